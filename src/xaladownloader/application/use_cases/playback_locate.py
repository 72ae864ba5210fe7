"""Locate the playable stream URL of a title or episode.

Strategies are tried in order until one yields a URL.  Each declares the
upstream generations it applies to, so the chain for a given deployment
is fixed at construction time:

1. ``SheetStrategy``       (JSON generations) media sheet / season stream
2. ``StreamEndpointStrategy`` (JSON generations) dedicated stream endpoint
3. ``PlayerScrapeStrategy``   (HTML generation) ``<video>`` on the detail page
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import structlog

from xaladownloader.domain.entities import (
    NotFoundError,
    SheetInfo,
    StreamSource,
    UpstreamError,
)
from xaladownloader.domain.ports import (
    OriginProviderPort,
    SchemaAdapterPort,
    UpstreamGatewayPort,
)
from xaladownloader.infrastructure.common.urls import (
    absolutize,
    expand_episode_template,
    is_episode_template,
    to_direct_fetch_url,
)

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LocateQuery:
    media_locator: str
    season: int | None = None
    episode: int | None = None

    @property
    def is_episode(self) -> bool:
        return self.season is not None and self.episode is not None


class LocatorStrategy(Protocol):
    name: str

    def applies_to(self, adapter: SchemaAdapterPort) -> bool: ...

    async def find(
        self,
        query: LocateQuery,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
    ) -> StreamSource | None:
        """Return a source, or ``None`` to let the next strategy try."""
        ...


class SheetStrategy:
    name = "sheet"

    def applies_to(self, adapter: SchemaAdapterPort) -> bool:
        return adapter.has_json_api

    async def find(
        self,
        query: LocateQuery,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
    ) -> StreamSource | None:
        if query.is_episode:
            found = await self._season_stream(query, adapter, upstream)
            if found is not None:
                return found

        path = adapter.sheet_path(query.media_locator)
        if path is None:
            return None
        sheet = adapter.decode_sheet(await upstream.fetch(path))
        if not sheet.urls:
            return None

        first = sheet.urls[0]
        if not is_episode_template(first.url):
            return None if query.is_episode else first
        if not query.is_episode:
            return None
        return dataclasses.replace(
            first,
            url=expand_episode_template(first.url, query.season, query.episode),
        )

    async def _season_stream(
        self,
        query: LocateQuery,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
    ) -> StreamSource | None:
        path = adapter.season_stream_path(
            query.media_locator, query.season, query.episode
        )
        if path is None:
            return None
        sheet = adapter.decode_sheet(await upstream.fetch(path))
        if not sheet.urls:
            return None
        first = sheet.urls[0]
        return dataclasses.replace(first, url=to_direct_fetch_url(first.url))


class StreamEndpointStrategy:
    name = "stream_endpoint"

    def applies_to(self, adapter: SchemaAdapterPort) -> bool:
        return adapter.has_json_api

    async def find(
        self,
        query: LocateQuery,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
    ) -> StreamSource | None:
        path = adapter.stream_path(query.media_locator, query.season, query.episode)
        if path is None:
            return None
        return adapter.decode_stream(await upstream.fetch(path))


class PlayerScrapeStrategy:
    name = "player_scrape"

    def applies_to(self, adapter: SchemaAdapterPort) -> bool:
        return not adapter.has_json_api

    async def find(
        self,
        query: LocateQuery,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
    ) -> StreamSource | None:
        path = adapter.detail_path(query.media_locator)
        if path is None:
            return None
        body = await upstream.fetch(path, accept="text/html")
        return adapter.decode_player(body)


def default_strategies() -> list[LocatorStrategy]:
    return [SheetStrategy(), StreamEndpointStrategy(), PlayerScrapeStrategy()]


class PlaybackLocator:
    """Runs the strategy chain and absolutizes the winning URL."""

    def __init__(
        self,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
        origin: OriginProviderPort,
        strategies: Sequence[LocatorStrategy] | None = None,
    ) -> None:
        self._adapter = adapter
        self._upstream = upstream
        self._origin = origin
        chain = default_strategies() if strategies is None else list(strategies)
        self._strategies = [s for s in chain if s.applies_to(adapter)]

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    async def locate(
        self,
        media_locator: str,
        season: int | None = None,
        episode: int | None = None,
    ) -> StreamSource:
        """Return the first playable source.

        Raises ``UpstreamError`` when the chain is exhausted after at least
        one upstream failure, ``NotFoundError`` when every strategy came
        back empty.
        """
        query = LocateQuery(media_locator, season, episode)
        failures: list[str] = []

        for strategy in self._strategies:
            try:
                source = await strategy.find(query, self._adapter, self._upstream)
            except UpstreamError as exc:
                log.warning(
                    "locate_strategy_failed",
                    strategy=strategy.name,
                    media=media_locator,
                    error=str(exc),
                )
                failures.append(f"{strategy.name}: {exc}")
                continue

            if source is None or not source.url.strip():
                log.debug("locate_strategy_empty", strategy=strategy.name, media=media_locator)
                continue

            url = absolutize(source.url, self._origin.get())
            log.info(
                "stream_located",
                strategy=strategy.name,
                media=media_locator,
                season=season,
                episode=episode,
            )
            return dataclasses.replace(source, url=url)

        if failures:
            raise UpstreamError("cannot obtain video URL: " + "; ".join(failures))
        raise NotFoundError(f"no playable source for {media_locator!r}")

    async def sheet_info(self, media_locator: str) -> SheetInfo:
        """Sheet of a title, season count prepared for display."""
        if self._adapter.has_json_api:
            path = self._adapter.sheet_path(media_locator)
            accept = "application/json"
        else:
            path = self._adapter.detail_path(media_locator)
            accept = "text/html"
        if path is None:
            raise NotFoundError(f"no sheet available for {media_locator!r}")

        sheet = self._adapter.decode_sheet(await self._upstream.fetch(path, accept=accept))
        return dataclasses.replace(sheet, season_count=sheet.display_season_count)

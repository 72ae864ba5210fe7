"""Thin catalog listings: last releases, franchises, seasons, episodes.

No fallbacks here; an endpoint the active generation does not have is a
``NotFoundError``.
"""

from __future__ import annotations

import structlog

from xaladownloader.domain.entities import (
    EpisodeRef,
    MediaRecord,
    NotFoundError,
    SeasonRef,
    ValidationError,
)
from xaladownloader.domain.ports import (
    OriginProviderPort,
    SchemaAdapterPort,
    UpstreamGatewayPort,
)

from .locators import api_media_id, require_locator

log = structlog.get_logger(__name__)


class CatalogBrowseUseCase:
    def __init__(
        self,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
        origin: OriginProviderPort,
    ) -> None:
        self._adapter = adapter
        self._upstream = upstream
        self._origin = origin

    def _unsupported(self, what: str) -> NotFoundError:
        return NotFoundError(
            f"{what} is not available for {self._adapter.generation.value}"
        )

    async def _fetch(self, path: str) -> str:
        accept = "application/json" if self._adapter.has_json_api else "text/html"
        return await self._upstream.fetch(path, accept=accept)

    async def last_releases(self) -> list[MediaRecord]:
        path = self._adapter.last_releases_path()
        if path is None:
            raise self._unsupported("last releases")
        body = await self._fetch(path)
        return self._adapter.decode_last_releases(body, self._origin.get())

    async def franchise(self, franchise_id: str) -> list[MediaRecord]:
        franchise_id = require_locator(franchise_id, "id")
        path = self._adapter.franchise_path(franchise_id)
        if path is None:
            raise self._unsupported("franchise listing")
        body = await self._fetch(path)
        return self._adapter.decode_franchise(body, self._origin.get())

    async def seasons(self, detail: str) -> list[SeasonRef]:
        detail = require_locator(detail, "detail")
        if self._adapter.has_json_api:
            detail = api_media_id(detail)
        path = self._adapter.seasons_path(detail)
        if path is None:
            raise self._unsupported("season listing")
        seasons = self._adapter.decode_seasons(await self._fetch(path))
        log.debug("seasons_listed", detail=detail, count=len(seasons))
        return seasons

    async def episodes(self, media_id: str, season: int) -> list[EpisodeRef]:
        """Episodes of one season, addressed by catalog id (JSON generations)."""
        if not self._adapter.has_json_api:
            raise self._unsupported("episode listing by id")
        media_id = api_media_id(require_locator(media_id, "id"))
        if season < 1:
            raise ValidationError(f"num must be >= 1, got {season}")
        path = self._adapter.episodes_path(media_id, season)
        if path is None:
            raise self._unsupported("episode listing")
        return self._adapter.decode_episodes(await self._fetch(path), season)

    async def season_episodes(self, season_url: str) -> list[EpisodeRef]:
        """Episodes listed on a season page (HTML generation)."""
        if self._adapter.has_json_api:
            raise self._unsupported("episode listing by season page")
        season_url = require_locator(season_url, "season")
        path = self._adapter.episodes_path(season_url, 0)
        if path is None:
            raise self._unsupported("episode listing")
        return self._adapter.decode_episodes(await self._fetch(path))

"""Schema adapter for the first JSON API generation.

Endpoints (relative to the origin):

- ``GET /api/v1/search-bar/search/{query}``
  → ``data.items.movies.items[] {id, title, type, posters.large, runtime, updated_at}``
- ``GET /api/v1/media/{id}/sheet``
  → ``data.items {id, type, season_count, urls[] {url, name}}``
- ``GET /api/v1/media/{id}/season/{s}/episode/{e}/stream`` → same ``urls[]`` shape
- ``GET /api/v1/stream/{id}`` and ``/api/v1/stream/{id}/episode?season=&episode=``
  → ``sources[] {url, label}``
- ``GET /api/v1/media/{id}/season/{n}`` → ``data.items.episodes[] {episode, name}``
- ``GET /api/v1/media/last-releases`` → ``data.items[]``
- ``GET /api/v1/franchise/{id}`` → ``data.items.movies.items[]``

In this generation ``runtime`` is already a display string ("125 min").
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

import structlog

from xaladownloader.domain.entities import (
    EpisodeRef,
    MediaKind,
    MediaRecord,
    Origin,
    SeasonRef,
    SheetInfo,
    StreamSource,
    UpstreamError,
    UpstreamGeneration,
)
from xaladownloader.infrastructure.common.urls import absolutize, is_series_link

from .html_v1 import decode_player_html

log = structlog.get_logger(__name__)

_SERIES_TYPES = frozenset({"tv", "series", "serie"})


def load_json(body: str) -> dict[str, Any]:
    """Parse a JSON document whose root must be an object."""
    try:
        doc = json.loads(body)
    except ValueError as exc:
        raise UpstreamError(f"undecodable JSON response: {exc}") from exc
    if not isinstance(doc, dict):
        raise UpstreamError(f"unexpected JSON root: {type(doc).__name__}")
    return doc


def dig(doc: Any, *keys: str) -> Any:
    """Walk nested mappings; a missing level is an ``UpstreamError``."""
    node = doc
    for key in keys:
        if not isinstance(node, dict) or key not in node:
            raise UpstreamError(f"response lacks {'.'.join(keys)}")
        node = node[key]
    return node


def _as_list(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise UpstreamError(f"{where} is not a list")
    return value


def _coerce_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class JsonApiV1Adapter:
    """Decodes the ``/api/v1`` JSON documents into the media model."""

    generation = UpstreamGeneration.JSON_API_V1
    has_json_api = True

    # ------------------------------------------------------------------
    # Request paths
    # ------------------------------------------------------------------

    def search_path(self, query: str) -> str:
        return f"/api/v1/search-bar/search/{quote(query, safe='')}"

    def sheet_path(self, media_id: str) -> str | None:
        return f"/api/v1/media/{quote(media_id, safe='')}/sheet"

    def season_stream_path(
        self, media_id: str, season: int, episode: int
    ) -> str | None:
        return (
            f"/api/v1/media/{quote(media_id, safe='')}"
            f"/season/{season}/episode/{episode}/stream"
        )

    def stream_path(
        self, media_id: str, season: int | None = None, episode: int | None = None
    ) -> str | None:
        base = f"/api/v1/stream/{quote(media_id, safe='')}"
        if season is None or episode is None:
            return base
        return f"{base}/episode?season={season}&episode={episode}"

    def detail_path(self, media_locator: str) -> str | None:
        return None

    def seasons_path(self, media_locator: str) -> str | None:
        return self.sheet_path(media_locator)

    def episodes_path(self, media_id: str, season: int) -> str | None:
        return f"/api/v1/media/{quote(media_id, safe='')}/season/{season}"

    def last_releases_path(self) -> str | None:
        return "/api/v1/media/last-releases"

    def franchise_path(self, franchise_id: str) -> str | None:
        return f"/api/v1/franchise/{quote(franchise_id, safe='')}"

    # ------------------------------------------------------------------
    # Catalog records
    # ------------------------------------------------------------------

    def decode_search(self, body: str, origin: Origin) -> list[MediaRecord]:
        items = dig(load_json(body), "data", "items", "movies", "items")
        return self._decode_records(_as_list(items, "movies.items"), origin)

    def decode_franchise(self, body: str, origin: Origin) -> list[MediaRecord]:
        return self.decode_search(body, origin)

    def decode_last_releases(self, body: str, origin: Origin) -> list[MediaRecord]:
        items = dig(load_json(body), "data", "items")
        return self._decode_records(_as_list(items, "data.items"), origin)

    def _decode_records(
        self, items: list[Any], origin: Origin
    ) -> list[MediaRecord]:
        """Decode each record; malformed ones are dropped, not fatal."""
        records: list[MediaRecord] = []
        for raw in items:
            try:
                records.append(self._decode_record(raw, origin))
            except (KeyError, TypeError, ValueError) as exc:
                log.debug(
                    "catalog_record_dropped",
                    generation=self.generation.value,
                    error=str(exc),
                )
        if items and not records:
            raise UpstreamError(
                f"none of {len(items)} catalog records could be decoded"
            )
        if len(records) < len(items):
            log.info(
                "catalog_records_partial",
                decoded=len(records),
                dropped=len(items) - len(records),
            )
        return records

    def _decode_record(self, raw: Any, origin: Origin) -> MediaRecord:
        if not isinstance(raw, dict):
            raise TypeError(f"record is {type(raw).__name__}, not an object")
        media_id = raw["id"]
        if isinstance(media_id, bool) or not isinstance(media_id, (int, str)):
            raise TypeError(f"invalid id {media_id!r}")
        title = raw["title"]
        if not isinstance(title, str):
            raise TypeError(f"invalid title {title!r}")
        updated = raw.get("updated_at")
        return MediaRecord(
            title=title.strip(),
            id=int(media_id),
            thumb_url=self._poster(raw, origin),
            kind=self._kind(raw),
            runtime=self._runtime(raw),
            updated_at=str(updated) if updated else None,
        )

    def _poster(self, raw: dict[str, Any], origin: Origin) -> str:
        posters = raw.get("posters") or {}
        if not isinstance(posters, dict):
            raise TypeError("posters is not an object")
        large = posters.get("large")
        return absolutize(str(large), origin) if large else ""

    def _runtime(self, raw: dict[str, Any]) -> str | None:
        runtime = raw.get("runtime")
        if runtime is None or runtime == "":
            return None
        return str(runtime).strip()

    def _kind(self, raw: dict[str, Any]) -> MediaKind:
        link = raw.get("url") or raw.get("slug") or ""
        if isinstance(link, str) and is_series_link(link):
            return MediaKind.SERIES
        if str(raw.get("type", "")).lower() in _SERIES_TYPES:
            return MediaKind.SERIES
        return MediaKind.MOVIE

    # ------------------------------------------------------------------
    # Playback metadata
    # ------------------------------------------------------------------

    def decode_sheet(self, body: str) -> SheetInfo:
        doc = load_json(body)
        items = dig(doc, "data", "items")
        if not isinstance(items, dict):
            raise UpstreamError("sheet data.items is not an object")

        urls: list[StreamSource] = []
        for entry in _as_list(items.get("urls"), "sheet urls"):
            if isinstance(entry, dict) and isinstance(entry.get("url"), str):
                url = entry["url"].strip()
                if url:
                    urls.append(StreamSource(url=url, source_label=entry.get("name")))

        return SheetInfo(
            media_id=items.get("id"),
            media_type=str(items.get("type") or "movie"),
            season_count=_coerce_int(items.get("season_count")),
            urls=urls,
            raw=doc,
        )

    def decode_stream(self, body: str) -> StreamSource | None:
        doc = load_json(body)
        for entry in _as_list(doc.get("sources"), "sources"):
            if isinstance(entry, dict) and isinstance(entry.get("url"), str):
                url = entry["url"].strip()
                if url:
                    label = entry.get("label") or entry.get("name")
                    return StreamSource(url=url, source_label=label)
        return None

    def decode_seasons(self, body: str) -> list[SeasonRef]:
        """Seasons are not listed; the sheet only reports how many exist."""
        sheet = self.decode_sheet(body)
        return [
            SeasonRef(title=f"S{number:02d}", locator=str(number))
            for number in range(1, sheet.display_season_count + 1)
        ]

    def decode_episodes(self, body: str, season: int | None = None) -> list[EpisodeRef]:
        episodes = dig(load_json(body), "data", "items", "episodes")
        refs: list[EpisodeRef] = []
        for entry in _as_list(episodes, "episodes"):
            if not isinstance(entry, dict):
                continue
            number = _coerce_int(entry.get("episode"))
            if number < 1:
                continue
            name = str(entry.get("name") or "").strip() or f"Episode {number:02d}"
            refs.append(EpisodeRef(title=name, locator=(season or 1, number)))
        return refs

    def decode_player(self, body: str) -> StreamSource | None:
        return decode_player_html(body)

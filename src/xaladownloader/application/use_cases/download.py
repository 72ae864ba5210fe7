"""Download use case: validate a request, describe or resolve the video."""

from __future__ import annotations

import copy
from typing import Any

import structlog

from xaladownloader.domain.entities import DownloadRequest, StreamSource
from xaladownloader.infrastructure.common.filenames import build_filename

from .locators import api_media_id
from .playback_locate import PlaybackLocator

log = structlog.get_logger(__name__)


class DownloadUseCase:
    """Front door of ``/api/download``.

    ``info()`` answers the ``infoOnly`` request the client uses to decide
    whether to ask for a season/episode; ``resolve()`` finds the video and
    the file name it should be saved under.
    """

    def __init__(self, locator: PlaybackLocator, *, numeric_ids: bool) -> None:
        self._locator = locator
        self._numeric_ids = numeric_ids

    def _media_locator(self, request: DownloadRequest) -> str:
        if self._numeric_ids:
            return api_media_id(request.media_locator)
        return request.media_locator

    async def info(self, request: DownloadRequest) -> dict[str, Any]:
        """Sheet payload ``{"data": {"items": {...}}}`` with display season count."""
        sheet = await self._locator.sheet_info(self._media_locator(request))

        items: dict[str, Any] = {}
        data = sheet.raw.get("data") if isinstance(sheet.raw, dict) else None
        if isinstance(data, dict) and isinstance(data.get("items"), dict):
            items = copy.deepcopy(data["items"])
        items.setdefault("type", sheet.media_type)
        items["season_count"] = sheet.season_count

        log.info(
            "download_info",
            media=request.media_locator,
            media_type=sheet.media_type,
            season_count=sheet.season_count,
        )
        return {"data": {"items": items}}

    async def resolve(self, request: DownloadRequest) -> tuple[StreamSource, str]:
        source = await self._locator.locate(
            self._media_locator(request),
            season=request.season,
            episode=request.episode,
        )
        filename = build_filename(request.display_title)
        log.info("download_resolved", media=request.media_locator, filename=filename)
        return source, filename

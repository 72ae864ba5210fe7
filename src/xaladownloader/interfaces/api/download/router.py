"""Download endpoint: sheet info or streamed video file."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from xaladownloader.domain.entities import DownloadRequest, EncodingError
from xaladownloader.interfaces.app_state import AppState

from .responses import VideoStreamResponse

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["download"])

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _flag(raw: str | None) -> bool:
    return (raw or "").strip().lower() in _TRUTHY


@router.get("/download")
async def download(
    request: Request,
    detail: str | None = None,
    title: str | None = None,
    season: str | None = None,
    episode: str | None = None,
    infoOnly: str | None = None,  # noqa: N803
) -> Response:
    """Describe (``infoOnly=true``) or stream the video of a title/episode.

    Status codes:
        200: sheet JSON, or the video body as an attachment.
        400: missing ``detail`` or malformed ``season``/``episode``.
        404: no strategy found a playable source.
        502: the catalog or the video host failed.
    """
    state = cast(AppState, request.app.state)
    dl_request = DownloadRequest.from_params(
        detail=detail,
        title=title,
        season=season,
        episode=episode,
        info_only=_flag(infoOnly),
    )

    if dl_request.info_only:
        payload = await state.download.info(dl_request)
        try:
            return JSONResponse(payload)
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"cannot encode sheet: {exc}") from exc

    source, filename = await state.download.resolve(dl_request)
    transfer = await state.streaming_proxy.open(source, filename)
    log.info(
        "download_streaming",
        media=dl_request.media_locator,
        filename=filename,
        content_length=transfer.content_length,
    )
    return VideoStreamResponse(transfer, tracker=state.graceful_shutdown)

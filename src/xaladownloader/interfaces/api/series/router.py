"""Season and episode listings."""

from __future__ import annotations

from typing import Any, cast

from fastapi import APIRouter, Request

from xaladownloader.domain.entities import ValidationError
from xaladownloader.interfaces.app_state import AppState

router = APIRouter(prefix="/api", tags=["series"])


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"invalid {name} parameter: {raw!r}") from None
    if value < 1:
        raise ValidationError(f"{name} must be >= 1, got {value}")
    return value


@router.get("/episodes")
async def episodes(request: Request, id: str = "", num: str = "1") -> list[dict[str, Any]]:  # noqa: A002
    """Episodes of season ``num`` of media ``id`` (JSON generations)."""
    state = cast(AppState, request.app.state)
    refs = await state.catalog_browse.episodes(id, _positive_int("num", num))
    return [ref.to_dict() for ref in refs]


@router.get("/series/episodes")
async def season_episodes(request: Request, season: str = "") -> list[dict[str, Any]]:
    """Episodes listed on a season page (HTML generation)."""
    state = cast(AppState, request.app.state)
    refs = await state.catalog_browse.season_episodes(season)
    return [ref.to_dict() for ref in refs]


@router.get("/series/seasons")
async def seasons(request: Request, detail: str = "") -> list[dict[str, Any]]:
    state = cast(AppState, request.app.state)
    refs = await state.catalog_browse.seasons(detail)
    return [ref.to_dict() for ref in refs]

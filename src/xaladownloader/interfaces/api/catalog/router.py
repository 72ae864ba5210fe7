"""Catalog endpoints: search, last releases, franchise, current origin."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request

from xaladownloader.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/search")
async def search(request: Request, q: str = "") -> list[dict[str, Any]]:
    """Search the catalog; 400 on an empty query, 502 on upstream failure."""
    state = cast(AppState, request.app.state)
    records = await state.catalog_search.search(q)
    return [record.to_dict() for record in records]


@router.get("/last-releases")
async def last_releases(request: Request) -> list[dict[str, Any]]:
    state = cast(AppState, request.app.state)
    records = await state.catalog_browse.last_releases()
    return [record.to_dict() for record in records]


@router.get("/franchise")
async def franchise(request: Request, id: str = "") -> list[dict[str, Any]]:  # noqa: A002
    state = cast(AppState, request.app.state)
    records = await state.catalog_browse.franchise(id)
    return [record.to_dict() for record in records]


@router.get("/origin")
async def current_origin(request: Request) -> dict[str, Any]:
    """Origin in use, the active generation and whether discovery failed."""
    state = cast(AppState, request.app.state)
    return {
        "base_url": state.origin.get().url,
        "generation": state.adapter.generation.value,
        "degraded": state.origin.degraded,
    }

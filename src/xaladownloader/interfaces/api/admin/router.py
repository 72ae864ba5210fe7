"""Operator endpoint overriding the catalog origin."""

from __future__ import annotations

import json
from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import Response

from xaladownloader.domain.entities import Origin, ValidationError
from xaladownloader.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


async def _read_base_url(request: Request) -> str:
    try:
        payload = json.loads(await request.body() or b"{}")
    except ValueError as exc:
        raise ValidationError(f"body is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError('expected {"base_url": "..."}')
    base_url = payload.get("base_url")
    if not isinstance(base_url, str) or not base_url.strip():
        raise ValidationError("missing base_url")
    return base_url


@router.post("/base-url", status_code=204)
async def set_base_url(request: Request) -> Response:
    """Persist and switch to a new origin.

    204 on success, 400 for an empty or unparsable URL, 500 when the
    settings file cannot be written (the old origin stays active).
    """
    state = cast(AppState, request.app.state)
    try:
        origin = Origin.parse(await _read_base_url(request))
    except ValueError as exc:
        raise ValidationError(f"invalid base_url: {exc}") from exc

    await state.origin.set(origin)
    log.info("origin_overridden", origin=origin.url)
    return Response(status_code=204)

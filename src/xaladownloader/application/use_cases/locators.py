"""Validation of media locators coming from query parameters."""

from __future__ import annotations

import re

from xaladownloader.domain.entities import ValidationError

_MEDIA_ID_RE = re.compile(r"[0-9]+")


def require_locator(value: str | None, param: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"missing ?{param}= parameter")
    return value


def api_media_id(locator: str) -> str:
    """JSON generations address media by numeric id only (ASCII digits)."""
    if _MEDIA_ID_RE.fullmatch(locator) is None:
        raise ValidationError(f"invalid media id: {locator!r}")
    return locator

"""Shared test fixtures for the xaladownloader test suite."""

from __future__ import annotations

import json
from typing import Any

import pytest

from xaladownloader.domain.entities import Origin, UpstreamError
from xaladownloader.infrastructure.catalog.adapters import (
    HtmlV1Adapter,
    JsonApiV1Adapter,
    JsonApiV2Adapter,
)

ORIGIN_URL = "https://api.example.to"


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class StaticOrigin:
    """OriginProviderPort with a settable value and no persistence."""

    def __init__(self, url: str = ORIGIN_URL) -> None:
        self.origin = Origin.parse(url)
        self.degraded = False

    def get(self) -> Origin:
        return self.origin

    async def set(self, origin: Origin) -> None:
        self.origin = origin


class FakeUpstream:
    """UpstreamGatewayPort answering from a path -> body (or exception) map."""

    def __init__(self, responses: dict[str, str | Exception] | None = None) -> None:
        self.responses: dict[str, str | Exception] = dict(responses or {})
        self.calls: list[str] = []

    async def fetch(
        self,
        path: str,
        *,
        timeout: float | None = None,
        accept: str = "application/json",
    ) -> str:
        self.calls.append(path)
        if path not in self.responses:
            raise UpstreamError(f"unexpected status 404 from {path}")
        response = self.responses[path]
        if isinstance(response, Exception):
            raise response
        return response


# ---------------------------------------------------------------------------
# JSON payload builders
# ---------------------------------------------------------------------------


def search_payload(items: list[Any]) -> str:
    return json.dumps({"data": {"items": {"movies": {"items": items}}}})


def sheet_payload(
    *,
    media_id: int = 42,
    media_type: str = "movie",
    season_count: int = 0,
    urls: list[dict[str, Any]] | None = None,
) -> str:
    return json.dumps(
        {
            "data": {
                "items": {
                    "id": media_id,
                    "type": media_type,
                    "season_count": season_count,
                    "urls": urls or [],
                }
            }
        }
    )


def sources_payload(urls: list[str]) -> str:
    return json.dumps({"sources": [{"url": u, "label": "1080p"} for u in urls]})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def origin() -> Origin:
    return Origin.parse(ORIGIN_URL)


@pytest.fixture()
def static_origin() -> StaticOrigin:
    return StaticOrigin()


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def json_v1_adapter() -> JsonApiV1Adapter:
    return JsonApiV1Adapter()


@pytest.fixture()
def json_v2_adapter() -> JsonApiV2Adapter:
    return JsonApiV2Adapter()


@pytest.fixture()
def html_adapter() -> HtmlV1Adapter:
    return HtmlV1Adapter()

"""Tests for the HTTP surface: routing, parameters and error mapping."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
from conftest import FakeUpstream, StaticOrigin, search_payload, sheet_payload
from fastapi import FastAPI
from fastapi.testclient import TestClient

from xaladownloader.application.use_cases import (
    CatalogBrowseUseCase,
    CatalogSearchUseCase,
    DownloadUseCase,
    PlaybackLocator,
)
from xaladownloader.domain.entities import PersistenceError, XalaError
from xaladownloader.infrastructure.catalog.adapters import (
    HtmlV1Adapter,
    JsonApiV1Adapter,
)
from xaladownloader.infrastructure.graceful_shutdown import GracefulShutdown
from xaladownloader.infrastructure.streaming.proxy import StreamTransfer
from xaladownloader.interfaces.api.admin.router import router as admin_router
from xaladownloader.interfaces.api.catalog.router import router as catalog_router
from xaladownloader.interfaces.api.download.router import router as download_router
from xaladownloader.interfaces.api.series.router import router as series_router
from xaladownloader.interfaces.app import _xala_error_handler


def _make_app(
    upstream: FakeUpstream | None = None,
    *,
    adapter=None,
    origin=None,
    streaming_proxy=None,
) -> FastAPI:
    """Create a minimal FastAPI app with all routers and real use cases."""
    app = FastAPI()
    for router in (catalog_router, download_router, series_router, admin_router):
        app.include_router(router)
    app.add_exception_handler(XalaError, _xala_error_handler)

    adapter = adapter or JsonApiV1Adapter()
    upstream = upstream or FakeUpstream()
    origin = origin or StaticOrigin()
    locator = PlaybackLocator(adapter, upstream, origin)

    app.state.adapter = adapter
    app.state.origin = origin
    app.state.catalog_search = CatalogSearchUseCase(adapter, upstream, origin)
    app.state.catalog_browse = CatalogBrowseUseCase(adapter, upstream, origin)
    app.state.playback_locator = locator
    app.state.download = DownloadUseCase(locator, numeric_ids=adapter.has_json_api)
    app.state.streaming_proxy = streaming_proxy or MagicMock()
    app.state.graceful_shutdown = GracefulShutdown()
    return app


# ---------------------------------------------------------------------------
# /api/search
# ---------------------------------------------------------------------------


class TestSearchRoute:
    def test_records_serialized(self) -> None:
        upstream = FakeUpstream(
            {
                "/api/v1/search-bar/search/alien": search_payload(
                    [
                        {
                            "id": 7,
                            "title": "Alien",
                            "type": "movie",
                            "runtime": "117 min",
                            "posters": {"large": "/img/alien.jpg"},
                        }
                    ]
                )
            }
        )
        resp = TestClient(_make_app(upstream)).get("/api/search", params={"q": "alien"})

        assert resp.status_code == 200
        assert resp.json() == [
            {
                "title": "Alien",
                "id": 7,
                "thumbUrl": "https://api.example.to/img/alien.jpg",
                "kind": "movie",
                "runtime": "117 min",
                "updated": None,
            }
        ]

    def test_empty_query_is_400(self) -> None:
        resp = TestClient(_make_app()).get("/api/search")
        assert resp.status_code == 400
        assert resp.json() == {"detail": "missing ?q= parameter"}

    def test_upstream_failure_is_502(self) -> None:
        resp = TestClient(_make_app()).get("/api/search", params={"q": "x"})
        assert resp.status_code == 502
        assert "404" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class TestListingRoutes:
    def test_franchise_unsupported_is_404(self) -> None:
        app = _make_app(adapter=HtmlV1Adapter())
        resp = TestClient(app).get("/api/franchise", params={"id": "3"})
        assert resp.status_code == 404

    def test_episodes_bad_num(self) -> None:
        resp = TestClient(_make_app()).get("/api/episodes?id=42&num=zero")
        assert resp.status_code == 400

    def test_seasons(self) -> None:
        upstream = FakeUpstream(
            {"/api/v1/media/42/sheet": sheet_payload(media_type="tv", season_count=2)}
        )
        resp = TestClient(_make_app(upstream)).get("/api/series/seasons?detail=42")
        assert resp.json() == [
            {"title": "S01", "locator": "1"},
            {"title": "S02", "locator": "2"},
        ]

    def test_origin(self) -> None:
        origin = StaticOrigin()
        origin.degraded = True
        resp = TestClient(_make_app(origin=origin)).get("/api/origin")
        assert resp.json() == {
            "base_url": "https://api.example.to",
            "generation": "json_api_v1",
            "degraded": True,
        }


# ---------------------------------------------------------------------------
# /api/download
# ---------------------------------------------------------------------------


class TestDownloadRoute:
    def test_missing_detail_is_400(self) -> None:
        resp = TestClient(_make_app()).get("/api/download")
        assert resp.status_code == 400
        assert resp.json() == {"detail": "missing ?detail= parameter"}

    def test_season_without_episode_is_400(self) -> None:
        resp = TestClient(_make_app()).get("/api/download?detail=42&season=1")
        assert resp.status_code == 400

    def test_info_only(self) -> None:
        upstream = FakeUpstream(
            {"/api/v1/media/42/sheet": sheet_payload(media_type="tv", season_count=0)}
        )
        resp = TestClient(_make_app(upstream)).get(
            "/api/download", params={"detail": "42", "infoOnly": "true"}
        )

        assert resp.status_code == 200
        items = resp.json()["data"]["items"]
        assert items["type"] == "tv"
        assert items["season_count"] == 1

    def test_nothing_playable_is_404(self) -> None:
        upstream = FakeUpstream(
            {
                "/api/v1/media/42/sheet": sheet_payload(urls=[]),
                "/api/v1/stream/42": '{"sources": []}',
            }
        )
        resp = TestClient(_make_app(upstream)).get("/api/download?detail=42")
        assert resp.status_code == 404

    def test_video_streamed_as_attachment(self) -> None:
        upstream = FakeUpstream(
            {
                "/api/v1/media/42/sheet": sheet_payload(
                    urls=[{"url": "https://cdn.example.to/42.mp4"}]
                )
            }
        )
        transfer = StreamTransfer(
            httpx.Response(
                200, content=b"video-bytes", headers={"Content-Type": "video/mp4"}
            ),
            "Alien Romulus.mp4",
        )
        proxy = MagicMock()
        proxy.open = AsyncMock(return_value=transfer)

        resp = TestClient(_make_app(upstream, streaming_proxy=proxy)).get(
            "/api/download", params={"detail": "42", "title": "Alien: Romulus"}
        )

        assert resp.status_code == 200
        assert resp.content == b"video-bytes"
        assert resp.headers["content-type"] == "video/mp4"
        assert resp.headers["content-disposition"] == (
            'attachment; filename="Alien Romulus.mp4"'
        )
        source, filename = proxy.open.await_args.args
        assert source.url == "https://cdn.example.to/42.mp4"
        assert filename == "Alien Romulus.mp4"


# ---------------------------------------------------------------------------
# /admin/base-url
# ---------------------------------------------------------------------------


class TestAdminRoute:
    def test_override_applied(self) -> None:
        origin = StaticOrigin()
        resp = TestClient(_make_app(origin=origin)).post(
            "/admin/base-url", json={"base_url": "http://www.new-domain.to/path"}
        )
        assert resp.status_code == 204
        assert origin.get().url == "https://www.new-domain.to"

    def test_missing_base_url(self) -> None:
        resp = TestClient(_make_app()).post("/admin/base-url", json={})
        assert resp.status_code == 400

    def test_not_json(self) -> None:
        resp = TestClient(_make_app()).post(
            "/admin/base-url",
            content=b"base_url=x",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert resp.status_code == 400

    def test_persistence_failure_is_500(self) -> None:
        origin = MagicMock()
        origin.set = AsyncMock(side_effect=PersistenceError("read-only file system"))
        resp = TestClient(_make_app(origin=origin)).post(
            "/admin/base-url", json={"base_url": "https://api.new.to"}
        )
        assert resp.status_code == 500
        assert resp.json() == {"detail": "read-only file system"}

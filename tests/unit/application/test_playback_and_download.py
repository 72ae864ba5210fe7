"""Tests for the playback locator chain and the download use case."""

from __future__ import annotations

import pytest
from conftest import FakeUpstream, StaticOrigin, sheet_payload, sources_payload

from xaladownloader.application.use_cases import DownloadUseCase, PlaybackLocator
from xaladownloader.domain.entities import (
    DownloadRequest,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from xaladownloader.infrastructure.catalog.adapters import (
    HtmlV1Adapter,
    JsonApiV1Adapter,
    JsonApiV2Adapter,
)

_SHEET = "/api/v1/media/42/sheet"
_SEASON_STREAM = "/api/v1/media/42/season/1/episode/3/stream"
_STREAM = "/api/v1/stream/42"
_EPISODE_STREAM = "/api/v1/stream/42/episode?season=1&episode=3"


def _locator(upstream: FakeUpstream, adapter=None) -> PlaybackLocator:
    return PlaybackLocator(adapter or JsonApiV1Adapter(), upstream, StaticOrigin())


# ---------------------------------------------------------------------------
# Strategy selection
# ---------------------------------------------------------------------------


class TestStrategyChain:
    def test_api_generations(self) -> None:
        for adapter in (JsonApiV1Adapter(), JsonApiV2Adapter()):
            assert _locator(FakeUpstream(), adapter).strategy_names == [
                "sheet",
                "stream_endpoint",
            ]

    def test_html_generation(self) -> None:
        assert _locator(FakeUpstream(), HtmlV1Adapter()).strategy_names == [
            "player_scrape"
        ]


# ---------------------------------------------------------------------------
# PlaybackLocator.locate
# ---------------------------------------------------------------------------


class TestLocate:
    async def test_sheet_wins_and_stops_chain(self) -> None:
        upstream = FakeUpstream(
            {
                _SHEET: sheet_payload(urls=[{"url": "https://cdn.example.to/a.mp4"}]),
                _STREAM: sources_payload(["https://cdn.example.to/b.mp4"]),
            }
        )
        source = await _locator(upstream).locate("42")

        assert source.url == "https://cdn.example.to/a.mp4"
        assert upstream.calls == [_SHEET]

    async def test_season_stream_rewritten(self) -> None:
        upstream = FakeUpstream(
            {
                _SEASON_STREAM: sheet_payload(
                    urls=[{"url": "https://cdn.example.to/stream?x=1"}]
                )
            }
        )
        source = await _locator(upstream).locate("42", 1, 3)

        assert source.url == "https://cdn.example.to/?x=1"
        assert upstream.calls == [_SEASON_STREAM]

    async def test_episode_template_expanded(self) -> None:
        upstream = FakeUpstream(
            {
                _SEASON_STREAM: sheet_payload(urls=[]),
                _SHEET: sheet_payload(
                    media_type="tv",
                    urls=[
                        {
                            "url": "https://cdn.example.to/dark/"
                            "s{season_number}e{episode_number}.mp4"
                        }
                    ],
                ),
            }
        )
        source = await _locator(upstream).locate("42", 1, 3)
        assert source.url == "https://cdn.example.to/dark/s01e03.mp4"

    async def test_empty_sheet_falls_through_to_stream(self) -> None:
        upstream = FakeUpstream(
            {
                _SHEET: sheet_payload(urls=[]),
                _STREAM: sources_payload(["/videos/42.mp4"]),
            }
        )
        source = await _locator(upstream).locate("42")

        assert source.url == "https://api.example.to/videos/42.mp4"
        assert upstream.calls == [_SHEET, _STREAM]

    async def test_upstream_failure_continues_chain(self) -> None:
        upstream = FakeUpstream(
            {
                _SEASON_STREAM: UpstreamError("unexpected status 500"),
                _EPISODE_STREAM: sources_payload(["https://cdn.example.to/e3.mp4"]),
            }
        )
        source = await _locator(upstream).locate("42", 1, 3)
        assert source.url == "https://cdn.example.to/e3.mp4"

    async def test_all_empty_is_not_found(self) -> None:
        upstream = FakeUpstream(
            {_SHEET: sheet_payload(urls=[]), _STREAM: sources_payload([])}
        )
        with pytest.raises(NotFoundError):
            await _locator(upstream).locate("42")

    async def test_exhausted_after_failure_is_upstream_error(self) -> None:
        upstream = FakeUpstream(
            {_SHEET: sheet_payload(urls=[]), _STREAM: UpstreamError("timed out")}
        )
        with pytest.raises(UpstreamError, match="stream_endpoint"):
            await _locator(upstream).locate("42")

    async def test_player_scrape_absolutized(self) -> None:
        upstream = FakeUpstream(
            {"/film/alien": '<video><source src="/media/alien.mp4"></video>'}
        )
        source = await _locator(upstream, HtmlV1Adapter()).locate("/film/alien")
        assert source.url == "https://api.example.to/media/alien.mp4"

    async def test_player_missing(self) -> None:
        upstream = FakeUpstream({"/film/alien": "<p>Bientôt disponible</p>"})
        with pytest.raises(NotFoundError):
            await _locator(upstream, HtmlV1Adapter()).locate("/film/alien")


# ---------------------------------------------------------------------------
# DownloadUseCase
# ---------------------------------------------------------------------------


class TestDownloadInfo:
    async def test_series_without_seasons_reports_one(self) -> None:
        upstream = FakeUpstream({_SHEET: sheet_payload(media_type="tv", season_count=0)})
        uc = DownloadUseCase(_locator(upstream), numeric_ids=True)

        payload = await uc.info(DownloadRequest.from_params(detail="42", info_only=True))

        items = payload["data"]["items"]
        assert items["season_count"] == 1
        assert items["type"] == "tv"
        assert items["id"] == 42

    async def test_movie_count_untouched(self) -> None:
        upstream = FakeUpstream({_SHEET: sheet_payload(media_type="movie", season_count=0)})
        uc = DownloadUseCase(_locator(upstream), numeric_ids=True)
        payload = await uc.info(DownloadRequest.from_params(detail="42"))
        assert payload["data"]["items"]["season_count"] == 0

    @pytest.mark.parametrize("detail", ["abc", "4²", "٤٢", "-1"])
    async def test_non_numeric_id_rejected(self, detail: str) -> None:
        upstream = FakeUpstream()
        uc = DownloadUseCase(_locator(upstream), numeric_ids=True)
        with pytest.raises(ValidationError):
            await uc.info(DownloadRequest.from_params(detail=detail))
        assert upstream.calls == []

    async def test_html_info_synthesized(self) -> None:
        upstream = FakeUpstream(
            {
                "/serie/dark": (
                    '<div class="seasons"><a href="/serie/dark/saison-1">S1</a></div>'
                )
            }
        )
        uc = DownloadUseCase(_locator(upstream, HtmlV1Adapter()), numeric_ids=False)
        payload = await uc.info(DownloadRequest.from_params(detail="/serie/dark"))
        assert payload["data"]["items"]["type"] == "tv"
        assert payload["data"]["items"]["season_count"] == 1


class TestDownloadResolve:
    async def test_episode_filename(self) -> None:
        upstream = FakeUpstream(
            {
                _SEASON_STREAM: sheet_payload(
                    urls=[{"url": "https://cdn.example.to/stream?t=1"}]
                )
            }
        )
        uc = DownloadUseCase(_locator(upstream), numeric_ids=True)
        request = DownloadRequest.from_params(
            detail="42", title="Dark: Origins", season="1", episode="3"
        )

        source, filename = await uc.resolve(request)

        assert source.url == "https://cdn.example.to/?t=1"
        assert filename == "Dark Origins S01E03.mp4"

    async def test_default_filename(self) -> None:
        upstream = FakeUpstream(
            {_SHEET: sheet_payload(urls=[{"url": "https://cdn.example.to/a.mp4"}])}
        )
        uc = DownloadUseCase(_locator(upstream), numeric_ids=True)
        _, filename = await uc.resolve(DownloadRequest.from_params(detail="42"))
        assert filename == "video.mp4"

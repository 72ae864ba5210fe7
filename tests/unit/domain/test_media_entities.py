"""Tests for media domain entities and request validation."""

from __future__ import annotations

import pytest

from xaladownloader.domain.entities import (
    DownloadRequest,
    EpisodeRef,
    MediaKind,
    MediaRecord,
    Origin,
    SheetInfo,
    ValidationError,
)

# ---------------------------------------------------------------------------
# Origin
# ---------------------------------------------------------------------------


class TestOrigin:
    def test_upgrades_http_and_drops_path(self) -> None:
        assert Origin.parse("http://api.Example.to/some/path/?q=1").url == (
            "https://api.example.to"
        )

    def test_bare_host(self) -> None:
        assert Origin.parse("api.example.to").url == "https://api.example.to"

    def test_trailing_slash_removed(self) -> None:
        assert Origin.parse("https://api.example.to/").url == "https://api.example.to"

    @pytest.mark.parametrize("raw", ["", "   ", "https://", "ftp://example.to"])
    def test_invalid_raises(self, raw: str) -> None:
        with pytest.raises(ValueError):
            Origin.parse(raw)

    def test_join_relative_and_absolute(self) -> None:
        origin = Origin.parse("https://api.example.to")
        assert origin.join("/api/v1/x") == "https://api.example.to/api/v1/x"
        assert origin.join("api/v1/x") == "https://api.example.to/api/v1/x"
        assert origin.join("https://cdn.example.to/v.mp4") == "https://cdn.example.to/v.mp4"

    def test_host(self) -> None:
        assert Origin.parse("https://api.example.to").host == "api.example.to"


# ---------------------------------------------------------------------------
# MediaRecord / EpisodeRef
# ---------------------------------------------------------------------------


class TestMediaRecord:
    def test_to_dict_keys(self) -> None:
        record = MediaRecord(
            title="Alien",
            id=7,
            thumb_url="https://img/7.jpg",
            kind=MediaKind.MOVIE,
            runtime="117 min",
            updated_at="2024-01-01",
        )
        assert record.to_dict() == {
            "title": "Alien",
            "id": 7,
            "thumbUrl": "https://img/7.jpg",
            "kind": "movie",
            "runtime": "117 min",
            "updated": "2024-01-01",
        }

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ValueError):
            MediaRecord(title="  ", id=1, thumb_url="", kind=MediaKind.MOVIE)


class TestEpisodeRef:
    def test_pair_locator(self) -> None:
        ref = EpisodeRef(title="Pilot", locator=(1, 3))
        assert ref.season == 1
        assert ref.episode == 3
        assert ref.to_dict() == {"title": "Pilot", "season": 1, "episode": 3}

    def test_path_locator(self) -> None:
        ref = EpisodeRef(title="Pilot", locator="/serie/x/s1/e1")
        assert ref.season is None
        assert ref.to_dict() == {"title": "Pilot", "locator": "/serie/x/s1/e1"}


# ---------------------------------------------------------------------------
# SheetInfo
# ---------------------------------------------------------------------------


class TestSheetInfo:
    def test_series_with_zero_seasons_displays_one(self) -> None:
        sheet = SheetInfo(media_id=1, media_type="tv", season_count=0)
        assert sheet.is_series
        assert sheet.display_season_count == 1

    def test_movie_keeps_zero(self) -> None:
        sheet = SheetInfo(media_id=1, media_type="movie", season_count=0)
        assert sheet.display_season_count == 0

    def test_series_count_untouched_when_positive(self) -> None:
        sheet = SheetInfo(media_id=1, media_type="series", season_count=4)
        assert sheet.display_season_count == 4


# ---------------------------------------------------------------------------
# DownloadRequest
# ---------------------------------------------------------------------------


class TestDownloadRequest:
    def test_missing_detail(self) -> None:
        with pytest.raises(ValidationError, match="detail"):
            DownloadRequest.from_params(detail=None)

    def test_blank_detail(self) -> None:
        with pytest.raises(ValidationError):
            DownloadRequest.from_params(detail="   ")

    def test_defaults(self) -> None:
        req = DownloadRequest.from_params(detail="42")
        assert req.media_locator == "42"
        assert req.title == "video"
        assert not req.is_episode
        assert req.display_title == "video"

    def test_episode_display_title(self) -> None:
        req = DownloadRequest.from_params(
            detail="42", title="Dark", season="1", episode="3"
        )
        assert req.is_episode
        assert req.display_title == "Dark S01E03"

    def test_season_without_episode(self) -> None:
        with pytest.raises(ValidationError, match="together"):
            DownloadRequest.from_params(detail="42", season="1")

    @pytest.mark.parametrize("value", ["abc", "0", "-2", "1.5"])
    def test_invalid_numbers(self, value: str) -> None:
        with pytest.raises(ValidationError):
            DownloadRequest.from_params(detail="42", season=value, episode="1")

    def test_info_only_flag(self) -> None:
        req = DownloadRequest.from_params(detail="42", info_only=True)
        assert req.info_only

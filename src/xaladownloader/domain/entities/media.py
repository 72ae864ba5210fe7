"""Domain entities for catalog resolution and stream relaying.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urljoin, urlparse

from .errors import ValidationError


class UpstreamGeneration(str, Enum):
    """Historical shape of the upstream catalog an adapter targets."""

    HTML_V1 = "html_v1"
    JSON_API_V1 = "json_api_v1"
    JSON_API_V2 = "json_api_v2"


class MediaKind(str, Enum):
    MOVIE = "movie"
    SERIES = "series"


@dataclass(frozen=True)
class Origin:
    """Scheme + host the catalog currently answers to.

    Always ``https``, never a path, never a trailing slash.
    """

    url: str

    @classmethod
    def parse(cls, raw: str) -> Origin:
        """Normalize *raw* into an Origin.

        ``http`` is upgraded to ``https``; path, query and fragment are
        dropped.  Raises ``ValueError`` when no host can be found.
        """
        value = (raw or "").strip()
        if not value:
            raise ValueError("origin must not be empty")
        if "://" not in value:
            value = f"https://{value}"
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"not an origin URL: {raw!r}")
        try:
            parsed.port
        except ValueError as exc:
            raise ValueError(f"not an origin URL: {raw!r}") from exc
        return cls(url=f"https://{parsed.netloc.lower()}")

    @property
    def host(self) -> str:
        return urlparse(self.url).netloc

    def join(self, path: str) -> str:
        """Resolve *path* (relative or absolute) against this origin."""
        return urljoin(f"{self.url}/", path)


@dataclass(frozen=True)
class MediaRecord:
    """A single catalog entry as the client consumes it."""

    title: str
    id: int | str  # numeric catalog id (API) or relative detail path (HTML)
    thumb_url: str
    kind: MediaKind
    runtime: str | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("MediaRecord.title must not be empty")

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "id": self.id,
            "thumbUrl": self.thumb_url,
            "kind": self.kind.value,
            "runtime": self.runtime,
            "updated": self.updated_at,
        }


@dataclass(frozen=True)
class SeasonRef:
    title: str
    locator: str  # relative season page path

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "locator": self.locator}


@dataclass(frozen=True)
class EpisodeRef:
    """Episode entry; locator is a page path or a ``(season, episode)`` pair."""

    title: str
    locator: str | tuple[int, int]

    @property
    def season(self) -> int | None:
        return self.locator[0] if isinstance(self.locator, tuple) else None

    @property
    def episode(self) -> int | None:
        return self.locator[1] if isinstance(self.locator, tuple) else None

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.locator, tuple):
            return {
                "title": self.title,
                "season": self.season,
                "episode": self.episode,
            }
        return {"title": self.title, "locator": self.locator}


@dataclass(frozen=True)
class StreamSource:
    """A resolved, directly fetchable video URL."""

    url: str
    source_label: str | None = None


@dataclass(frozen=True)
class SheetInfo:
    """Decoded sheet/metadata endpoint response."""

    media_id: int | str | None
    media_type: str
    season_count: int
    urls: list[StreamSource] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_series(self) -> bool:
        return self.media_type in ("tv", "series")

    @property
    def display_season_count(self) -> int:
        """Season count for display; series never report fewer than one."""
        if self.is_series and self.season_count < 1:
            return 1
        return self.season_count


def _parse_positive_int(name: str, value: str | int | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid {name} parameter: {value!r}") from None
    if number < 1:
        raise ValidationError(f"{name} must be >= 1, got {number}")
    return number


@dataclass(frozen=True)
class DownloadRequest:
    """Validated input to the download pipeline."""

    media_locator: str
    title: str = "video"
    season: int | None = None
    episode: int | None = None
    info_only: bool = False

    @classmethod
    def from_params(
        cls,
        *,
        detail: str | None,
        title: str | None = None,
        season: str | int | None = None,
        episode: str | int | None = None,
        info_only: bool = False,
    ) -> DownloadRequest:
        """Build a request from raw query parameters.

        Raises ``ValidationError`` when *detail* is missing or season and
        episode are malformed or not given together.
        """
        locator = (detail or "").strip()
        if not locator:
            raise ValidationError("missing ?detail= parameter")

        season_no = _parse_positive_int("season", season)
        episode_no = _parse_positive_int("episode", episode)
        if (season_no is None) != (episode_no is None):
            raise ValidationError("season and episode must be given together")

        return cls(
            media_locator=locator,
            title=(title or "").strip() or "video",
            season=season_no,
            episode=episode_no,
            info_only=info_only,
        )

    @property
    def is_episode(self) -> bool:
        return self.season is not None and self.episode is not None

    @property
    def display_title(self) -> str:
        """Title used for the downloaded file name."""
        if self.is_episode:
            return f"{self.title} S{self.season:02d}E{self.episode:02d}"
        return self.title

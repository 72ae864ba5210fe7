"""Port for decoding one upstream deployment generation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from xaladownloader.domain.entities import (
    EpisodeRef,
    MediaRecord,
    Origin,
    SeasonRef,
    SheetInfo,
    StreamSource,
    UpstreamGeneration,
)


@runtime_checkable
class SchemaAdapterPort(Protocol):
    """Builds request paths for, and decodes responses of, one upstream shape.

    Path builders return ``None`` when the generation has no such endpoint.
    Decoders take the raw response body and raise ``UpstreamError`` when
    the document as a whole cannot be decoded.  Individual malformed
    records are dropped, never raised.
    """

    @property
    def generation(self) -> UpstreamGeneration: ...

    @property
    def has_json_api(self) -> bool:
        """True when sheet/stream JSON endpoints exist."""
        ...

    def search_path(self, query: str) -> str: ...

    def sheet_path(self, media_id: str) -> str | None: ...

    def season_stream_path(
        self, media_id: str, season: int, episode: int
    ) -> str | None: ...

    def stream_path(
        self, media_id: str, season: int | None = None, episode: int | None = None
    ) -> str | None: ...

    def detail_path(self, media_locator: str) -> str | None:
        """Detail page of a media item (scraped generations only)."""
        ...

    def seasons_path(self, media_locator: str) -> str | None: ...

    def episodes_path(self, media_id: str, season: int) -> str | None: ...

    def last_releases_path(self) -> str | None: ...

    def franchise_path(self, franchise_id: str) -> str | None: ...

    def decode_search(self, body: str, origin: Origin) -> list[MediaRecord]: ...

    def decode_last_releases(self, body: str, origin: Origin) -> list[MediaRecord]: ...

    def decode_franchise(self, body: str, origin: Origin) -> list[MediaRecord]: ...

    def decode_sheet(self, body: str) -> SheetInfo: ...

    def decode_stream(self, body: str) -> StreamSource | None: ...

    def decode_seasons(self, body: str) -> list[SeasonRef]: ...

    def decode_episodes(
        self, body: str, season: int | None = None
    ) -> list[EpisodeRef]: ...

    def decode_player(self, body: str) -> StreamSource | None: ...

from .errors import (
    DiscoveryError,
    EncodingError,
    NotFoundError,
    PersistenceError,
    UpstreamError,
    ValidationError,
    XalaError,
)
from .media import (
    DownloadRequest,
    EpisodeRef,
    MediaKind,
    MediaRecord,
    Origin,
    SeasonRef,
    SheetInfo,
    StreamSource,
    UpstreamGeneration,
)

__all__ = [
    "DiscoveryError",
    "DownloadRequest",
    "EncodingError",
    "EpisodeRef",
    "MediaKind",
    "MediaRecord",
    "NotFoundError",
    "Origin",
    "PersistenceError",
    "SeasonRef",
    "SheetInfo",
    "StreamSource",
    "UpstreamError",
    "UpstreamGeneration",
    "ValidationError",
    "XalaError",
]

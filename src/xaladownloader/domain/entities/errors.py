"""Error taxonomy shared by all layers.

Each error carries the HTTP status the API layer renders it with.
"""

from __future__ import annotations


class XalaError(Exception):
    """Base error for xaladownloader domain/usecases."""

    status_code: int = 500


class ValidationError(XalaError):
    """Missing or malformed client parameter."""

    status_code = 400


class UpstreamError(XalaError):
    """Network failure, non-200 or undecodable response from the catalog."""

    status_code = 502


class NotFoundError(XalaError):
    """Every playback strategy (or listing) came up empty."""

    status_code = 404


class EncodingError(XalaError):
    """Response serialization failed."""

    status_code = 500


class PersistenceError(XalaError):
    """Settings could not be written to disk."""

    status_code = 500


class DiscoveryError(XalaError):
    """Origin discovery failed; callers fall back to the last known origin."""

"""Shared helpers (HTML selection, URL handling, file names)."""

from __future__ import annotations

from .filenames import build_filename, content_disposition, sanitize_filename
from .urls import absolutize, expand_episode_template, is_series_link, to_direct_fetch_url

__all__ = [
    "absolutize",
    "build_filename",
    "content_disposition",
    "expand_episode_template",
    "is_series_link",
    "sanitize_filename",
    "to_direct_fetch_url",
]

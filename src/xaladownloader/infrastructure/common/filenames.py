"""Download file name sanitization."""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import quote

_WHITESPACE_RE = re.compile(r"\s+")
_RESERVED_RE = re.compile(r'[\\/:*?"<>|]')

MAX_FILENAME_LENGTH = 200
VIDEO_EXTENSION = ".mp4"


def sanitize_filename(name: str) -> str:
    """Make *name* safe for Windows, macOS and Linux file systems.

    Whitespace runs collapse to one space, reserved characters
    ``\\ / : * ? " < > |`` are removed and the result is cut to
    200 characters.  Applying it twice yields the same value.

    >>> sanitize_filename('  Alien:   "Romulus" ')
    'Alien Romulus'
    """
    name = _RESERVED_RE.sub("", name)
    name = _WHITESPACE_RE.sub(" ", name).strip()
    return name[:MAX_FILENAME_LENGTH].rstrip()


def build_filename(title: str) -> str:
    """Sanitized ``<title>.mp4``; falls back to ``video.mp4``."""
    return f"{sanitize_filename(title) or 'video'}{VIDEO_EXTENSION}"


def content_disposition(filename: str) -> str:
    """``attachment`` disposition carrying *filename*.

    HTTP headers are latin-1, so non-ASCII titles get an ASCII fallback in
    ``filename`` plus the exact name in ``filename*`` (RFC 6266).
    """
    fallback = (
        unicodedata.normalize("NFKD", filename)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    fallback = fallback.strip()
    if fallback.removesuffix(VIDEO_EXTENSION).strip() == "":
        fallback = f"video{VIDEO_EXTENSION}"
    return (
        f'attachment; filename="{fallback}"; '
        f"filename*=UTF-8''{quote(filename, safe='')}"
    )

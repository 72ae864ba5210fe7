"""URL helpers for stream locations returned by the catalog."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from xaladownloader.domain.entities import Origin

# Detail links of series pages (``/serie/…``, ``/series/…``, ``/tv/…``).
_SERIES_LINK_RE = re.compile(r"/(?:series?|tv|saisons?)(?:/|-|$)", re.IGNORECASE)

_SEASON_PLACEHOLDER = "{season_number}"
_EPISODE_PLACEHOLDER = "{episode_number}"


def absolutize(url: str, origin: Origin) -> str:
    """Resolve *url* against *origin*.

    Already absolute URLs (``scheme://``) are returned unchanged;
    protocol-relative ones (``//cdn…``) get ``https:``.

    >>> absolutize("/v/1.mp4", Origin("https://api.example.to"))
    'https://api.example.to/v/1.mp4'
    """
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return url
    if url.startswith("//"):
        return f"https:{url}"
    return urljoin(f"{origin.url}/", url)


def to_direct_fetch_url(url: str) -> str:
    """Rewrite the query-style ``/stream?`` path into the direct ``/?`` form.

    The season stream endpoint hands out ``…/stream?token=…`` URLs which
    only answer with a redirect page; the same query on ``…/?`` serves
    the file.
    """
    return url.replace("/stream?", "/?", 1)


def expand_episode_template(url: str, season: int, episode: int) -> str:
    """Fill ``{season_number}``/``{episode_number}`` placeholders (2 digits)."""
    return url.replace(_SEASON_PLACEHOLDER, f"{season:02d}").replace(
        _EPISODE_PLACEHOLDER, f"{episode:02d}"
    )


def is_episode_template(url: str) -> bool:
    return _SEASON_PLACEHOLDER in url or _EPISODE_PLACEHOLDER in url


def is_series_link(href: str) -> bool:
    """True when *href* points to a series detail page."""
    return bool(href) and _SERIES_LINK_RE.search(urlparse(href).path or href) is not None

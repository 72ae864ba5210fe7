"""Origin discovery via the catalog's stable bootstrap page.

The catalog rotates its domain; a separate landing page keeps linking to
the current one.  Discovery fetches that page once and runs an ordered
selector chain over it:

    A. ``<link rel="canonical">``      (most reliably published)
    B. ``.cta-btn``                     (primary call-to-action)
    C. ``.card a.button-primary``       (first card's button)
    D. first anchor pointing at the catalog domain

API deployments answer on an ``api.`` sub-host, so the discovered
``www.`` host is rewritten when configured.
"""

from __future__ import annotations

from collections.abc import Callable
from urllib.parse import urlparse

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from xaladownloader.domain.entities import DiscoveryError, Origin
from xaladownloader.infrastructure.common.html_selectors import (
    attr_selector,
    first_match,
    parse_html,
)
from xaladownloader.infrastructure.config.schema import UpstreamConfig

log = structlog.get_logger(__name__)

HrefSelector = Callable[[BeautifulSoup | Tag], str | None]
OriginSelector = Callable[[BeautifulSoup | Tag], Origin | None]


def _catalog_anchor(domain_hint: str) -> HrefSelector:
    def _select(root: BeautifulSoup | Tag) -> str | None:
        if not domain_hint:
            return None
        for anchor in root.select("a[href]"):
            href = str(anchor.get("href", "")).strip()
            if domain_hint in (urlparse(href).hostname or ""):
                return href
        return None

    return _select


def _as_origin(name: str, select: HrefSelector) -> OriginSelector:
    """Turn an href selector into one that only yields usable origins.

    A matching element whose href is not an absolute URL counts as no
    match, so the next selector in the chain gets its turn.
    """

    def _select(root: BeautifulSoup | Tag) -> Origin | None:
        href = select(root)
        if not href:
            return None
        try:
            return Origin.parse(href.rstrip("/"))
        except ValueError:
            log.debug("origin_candidate_rejected", selector=name, href=href)
            return None

    return _select


def build_selector_chain(domain_hint: str = "") -> list[OriginSelector]:
    """Ordered selector chain; the first usable origin wins."""
    return [
        _as_origin("canonical", attr_selector('link[rel="canonical"]', "href")),
        _as_origin("cta", attr_selector(".cta-btn", "href")),
        _as_origin("card_button", attr_selector(".card a.button-primary", "href")),
        _as_origin("catalog_anchor", _catalog_anchor(domain_hint)),
    ]


def rewrite_to_api_host(origin: Origin) -> Origin:
    """``www.example.to`` → ``api.example.to``; ``example.to`` → ``api.example.to``."""
    host = origin.host
    if host.startswith("api."):
        return origin
    if host.startswith("www."):
        host = host.removeprefix("www.")
    return Origin(url=f"https://api.{host}")


def extract_origin(
    html: str,
    *,
    domain_hint: str = "",
    api_host: bool = False,
) -> Origin:
    """Pure part of discovery: pick the origin out of the bootstrap page."""
    origin = first_match(parse_html(html), build_selector_chain(domain_hint))
    if origin is None:
        raise DiscoveryError("no usable base URL on bootstrap page")
    return rewrite_to_api_host(origin) if api_host else origin


class OriginDiscovery:
    """Resolves the catalog's current canonical origin."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config: UpstreamConfig,
        user_agent: str,
    ) -> None:
        self._http = http_client
        self._config = config
        self._user_agent = user_agent

    async def discover(self) -> Origin:
        """Fetch the bootstrap page and extract the origin.

        Raises ``DiscoveryError`` on any network, status or parse failure.
        """
        url = self._config.bootstrap_url
        try:
            resp = await self._http.get(
                url,
                headers={"User-Agent": self._user_agent},
                timeout=self._config.discovery_timeout_seconds,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise DiscoveryError(f"bootstrap page unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise DiscoveryError(f"bootstrap page returned {resp.status_code}")

        origin = extract_origin(
            resp.text,
            domain_hint=self._config.catalog_domain_hint,
            api_host=self._config.rewrite_to_api_host and self._config.is_json_api,
        )
        log.info("origin_discovered", bootstrap=url, origin=origin.url)
        return origin

"""CSS-selector-based HTML extraction with fallback chains.

The catalog reshuffles its markup between releases, so every lookup is
expressed as an ordered chain: the first selector (or selector function)
that yields a value wins.  Helpers here are pure and work on an already
parsed tree so they can be tested without any network code.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from bs4 import BeautifulSoup, Tag

T = TypeVar("T")

Selector = Callable[[BeautifulSoup | Tag], T | None]


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (``lxml`` parser)."""
    return BeautifulSoup(html, "lxml")


def first_match(root: BeautifulSoup | Tag, chain: Iterable[Selector[T]]) -> T | None:
    """Evaluate selector functions in order; return the first non-empty value."""
    for selector in chain:
        value = selector(root)
        if value:
            return value
    return None


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Tries each selector in order.  Returns results from the **first**
    selector that matches at least one element.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def extract_text(
    element: Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
    strip: bool = True,
) -> str:
    """Extract text from the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(" ", strip=strip)
        return text if text else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            text = match.get_text(" ", strip=strip)
            if text:
                return text
    return default


def extract_attr(
    element: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract an HTML attribute from the first matching element.

    With ``selector=""`` the attribute is read from *element* itself.
    Empty attribute values count as missing.
    """
    if selector == "":
        val = element.get(attr)
        return str(val).strip() if val else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            val = match.get(attr)
            if val and str(val).strip():
                return str(val).strip()
    return default


def attr_selector(selector: str, attr: str) -> Selector[str]:
    """Build a chain element reading *attr* of the first *selector* match."""

    def _select(root: BeautifulSoup | Tag) -> str | None:
        return extract_attr(root, selector, attr) or None

    return _select


def extract_links(
    element: BeautifulSoup | Tag,
    selector: str = "a[href]",
    *fallback_selectors: str,
) -> list[dict[str, str]]:
    """Extract all links matching *selector*.

    Returns a list of ``{"text": ..., "href": ...}`` dicts; anchors
    without ``href`` are skipped.
    """
    tags = select_items(element, selector, *fallback_selectors)
    results: list[dict[str, str]] = []
    for tag in tags:
        href = tag.get("href")
        if not href:
            continue
        results.append(
            {
                "text": tag.get_text(" ", strip=True),
                "href": str(href).strip(),
            }
        )
    return results

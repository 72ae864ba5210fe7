"""Schema adapter for the first, server-rendered HTML catalog.

This generation has no JSON API: search results and the home page are
card grids, detail pages list seasons/episodes as plain links, and the
video URL is read from the embedded ``<video>`` player.
"""

from __future__ import annotations

from urllib.parse import quote_plus, urlparse

import structlog
from bs4 import Tag

from xaladownloader.domain.entities import (
    EpisodeRef,
    MediaKind,
    MediaRecord,
    Origin,
    SeasonRef,
    SheetInfo,
    StreamSource,
    UpstreamError,
    UpstreamGeneration,
)
from xaladownloader.infrastructure.common.html_selectors import (
    attr_selector,
    extract_attr,
    extract_links,
    extract_text,
    first_match,
    parse_html,
    select_items,
)
from xaladownloader.infrastructure.common.urls import absolutize, is_series_link

log = structlog.get_logger(__name__)

_CARD_SELECTORS = ("div.card", "article.item", "li.movie-item", ".result")
_SEASON_SELECTORS = (".seasons a[href]", ".season-list a[href]", "a.season[href]")
_EPISODE_SELECTORS = (
    ".episodes a[href]",
    ".episode-list a[href]",
    "a.episode[href]",
)

_TITLE_CHAIN = (
    attr_selector("img[alt]", "alt"),
    attr_selector("a[title]", "title"),
    lambda card: extract_attr(card, "", "title") or None,
    lambda card: extract_text(card, "span.label") or None,
)

_PLAYER_CHAIN = (
    attr_selector("video source[src]", "src"),
    attr_selector("video[src]", "src"),
    attr_selector('source[type^="video"][src]', "src"),
)


def _relative(href: str) -> str:
    """Reduce *href* to path (+ query) so it can be replayed against any origin."""
    parsed = urlparse(href)
    if not parsed.netloc:
        return href
    path = parsed.path or "/"
    return f"{path}?{parsed.query}" if parsed.query else path


def decode_player_html(body: str) -> StreamSource | None:
    """Read the video URL from an embedded HTML5 player, if any."""
    src = first_match(parse_html(body), _PLAYER_CHAIN)
    if not src:
        return None
    return StreamSource(url=src, source_label="player")


def _decode_card(card: Tag, origin: Origin) -> MediaRecord:
    if card.name == "a":
        href = extract_attr(card, "", "href")
    else:
        href = extract_attr(card, "a[href]", "href")
    if not href:
        raise ValueError("card has no link")

    title = first_match(card, _TITLE_CHAIN)
    if not title:
        raise ValueError(f"card {href!r} has no title")

    thumb = extract_attr(card, "img[src]", "src") or extract_attr(
        card, "img[data-src]", "data-src"
    )
    return MediaRecord(
        title=title.strip(),
        id=_relative(href),
        thumb_url=absolutize(thumb, origin) if thumb else "",
        kind=MediaKind.SERIES if is_series_link(href) else MediaKind.MOVIE,
    )


class HtmlV1Adapter:
    """Scrapes the card-grid catalog pages."""

    generation = UpstreamGeneration.HTML_V1
    has_json_api = False

    def search_path(self, query: str) -> str:
        return f"/search?q={quote_plus(query)}"

    def sheet_path(self, media_id: str) -> str | None:
        return None

    def season_stream_path(
        self, media_id: str, season: int, episode: int
    ) -> str | None:
        return None

    def stream_path(
        self, media_id: str, season: int | None = None, episode: int | None = None
    ) -> str | None:
        return None

    def detail_path(self, media_locator: str) -> str | None:
        return _relative(media_locator)

    def seasons_path(self, media_locator: str) -> str | None:
        return _relative(media_locator)

    def episodes_path(self, media_id: str, season: int) -> str | None:
        # Season pages carry their own episode list; the locator is the page.
        return _relative(media_id)

    def last_releases_path(self) -> str | None:
        return "/"

    def franchise_path(self, franchise_id: str) -> str | None:
        return None

    def decode_search(self, body: str, origin: Origin) -> list[MediaRecord]:
        cards = select_items(parse_html(body), *_CARD_SELECTORS)
        records: list[MediaRecord] = []
        for card in cards:
            try:
                records.append(_decode_card(card, origin))
            except ValueError as exc:
                log.debug("catalog_card_dropped", error=str(exc))
        if cards and not records:
            raise UpstreamError(f"none of {len(cards)} catalog cards could be decoded")
        return records

    def decode_last_releases(self, body: str, origin: Origin) -> list[MediaRecord]:
        return self.decode_search(body, origin)

    def decode_franchise(self, body: str, origin: Origin) -> list[MediaRecord]:
        return self.decode_search(body, origin)

    def decode_sheet(self, body: str) -> SheetInfo:
        """Summarize a detail page in the shape of an API sheet."""
        seasons = self.decode_seasons(body)
        player = decode_player_html(body)
        media_type = "tv" if seasons else "movie"
        return SheetInfo(
            media_id=None,
            media_type=media_type,
            season_count=len(seasons),
            urls=[player] if player else [],
            raw={
                "data": {
                    "items": {
                        "type": media_type,
                        "season_count": len(seasons),
                        "seasons": [s.to_dict() for s in seasons],
                    }
                }
            },
        )

    def decode_stream(self, body: str) -> StreamSource | None:
        return None

    def decode_seasons(self, body: str) -> list[SeasonRef]:
        links = extract_links(parse_html(body), *_SEASON_SELECTORS)
        return [
            SeasonRef(title=link["text"] or link["href"], locator=_relative(link["href"]))
            for link in links
        ]

    def decode_episodes(
        self, body: str, season: int | None = None
    ) -> list[EpisodeRef]:
        links = extract_links(parse_html(body), *_EPISODE_SELECTORS)
        return [
            EpisodeRef(title=link["text"] or link["href"], locator=_relative(link["href"]))
            for link in links
        ]

    def decode_player(self, body: str) -> StreamSource | None:
        return decode_player_html(body)

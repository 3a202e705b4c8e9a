"""AnimeSuge provider (animesugetv.to).

HTML scraping:
- Search:   /filter?keyword=<title>  ->  .flw-item cards, link in .film-name a
- Episodes: anime page, .episodes-list .nav-link / .ss-list a anchors
- Stream:   episode page, player iframe or inline player config
"""

from __future__ import annotations

from urllib.parse import quote_plus

from anisource.domain.entities.anime import (
    EpisodeDescriptor,
    EpisodeReference,
    SearchResult,
)
from anisource.infrastructure.common.episodes import (
    EpisodeMarkup,
    episodes_from_tags,
    from_attribute,
    from_attribute_pattern,
    from_href,
    from_text,
)
from anisource.infrastructure.common.html_selectors import (
    extract_attr,
    extract_text,
    select_first,
    select_items,
)

from .base import ProviderAdapterBase

_EPISODE_MARKUP = EpisodeMarkup(
    strategies=(
        from_attribute("data-number", "data-episode-num"),
        from_attribute_pattern("title", r"Episode\s*(\d+(?:\.\d+)?)"),
        from_text(r"(\d+(?:\.\d+)?)", selector=".ep-num"),
        from_href(r"-ep-(\d+(?:\.\d+)?)"),
    ),
    title_attr="title",
    title_selector=".ep-title",
)


class AnimeSugeProvider(ProviderAdapterBase):
    """AnimeSuge adapter; first in the default search order."""

    name = "AnimeSuge"
    _domains = ["animesugetv.to"]  # noqa: RUF012

    async def _search(self, title: str) -> SearchResult | None:
        url = f"{self.base_url}/filter?keyword={quote_plus(title)}"
        soup = await self._fetch_html(url, context="search")
        if soup is None:
            return None

        card = select_first(soup, ".flw-item", ".film_list-wrap .item")
        if card is None:
            return None

        href = extract_attr(card, ".film-name a", "href", ".film-detail a")
        name = extract_text(card, ".film-name a", ".film-name") or extract_attr(
            card, ".film-name a", "title"
        )
        if not href or not name:
            return None
        return SearchResult(title=name, link=self._absolute(href))

    async def _list_episodes(
        self, search_result: SearchResult
    ) -> list[EpisodeDescriptor] | None:
        soup = await self._fetch_html(search_result.link, context="episodes")
        if soup is None:
            return None

        anchors = select_items(
            soup,
            ".episodes-list .nav-link, .ss-list a",
            ".episodes a[href]",
        )
        return episodes_from_tags(
            anchors,
            anime_title=search_result.title,
            base_url=self.base_url,
            markup=_EPISODE_MARKUP,
        )

    async def _resolve_stream(self, episode: EpisodeReference) -> str | None:
        soup = await self._fetch_html(episode.link, context="stream")
        if soup is None:
            return None
        return self._find_player_reference(
            soup,
            iframes=(".play-video iframe", "#player iframe", "#frame"),
            videos=("video#player source[src]", "video source[src]", "video[src]"),
        )

"""AniWave provider (aniwave.to).

- Search:   /filter?keyword=<title>  ->  .film_list-wrap .flw-item
- Episodes: AJAX ``/ajax/episode/list/{id}`` (JSON ``{status, result: html}``),
            falling back to the static anime page when the id is unknown
            or the AJAX call yields nothing.
- Stream:   episode page, player iframe
"""

from __future__ import annotations

import re
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
    parse_html,
    select_first,
    select_items,
)

from .base import ProviderAdapterBase

# /watch/attack-on-titan.kww -> "kww"
_WATCH_ID_RE = re.compile(r"/watch/[a-z0-9-]+\.(\w+)", re.I)

_EPISODE_MARKUP = EpisodeMarkup(
    strategies=(
        from_attribute("data-num", "data-number"),
        from_attribute_pattern("title", r"Episode\s*(\d+(?:\.\d+)?)"),
        from_text(r"^(\d+(?:\.\d+)?)", selector=".num"),
        from_text(r"^(\d+(?:\.\d+)?)"),
        from_href(r"/ep-(\d+(?:\.\d+)?)"),
    ),
    title_attr="title",
    title_selector=".d-title",
)


def extract_watch_id(link: str) -> str | None:
    """Return the internal id from an AniWave watch URL."""
    match = _WATCH_ID_RE.search(link)
    return match.group(1) if match else None


class AniWaveProvider(ProviderAdapterBase):
    """AniWave adapter; second in the default search order."""

    name = "AniWave"
    _domains = ["aniwave.to"]  # noqa: RUF012

    async def _search(self, title: str) -> SearchResult | None:
        url = f"{self.base_url}/filter?keyword={quote_plus(title)}"
        soup = await self._fetch_html(url, context="search")
        if soup is None:
            return None

        card = select_first(soup, ".film_list-wrap .flw-item", "#list-items .item")
        if card is None:
            return None

        href = extract_attr(card, ".film-name a", "href", ".name a", "a.name")
        name = extract_text(card, ".film-name a", ".name a", "a.name")
        if not href or not name:
            return None
        link = self._absolute(href)
        return SearchResult(
            title=name,
            link=link,
            provider_internal_id=extract_watch_id(link),
        )

    async def _list_episodes(
        self, search_result: SearchResult
    ) -> list[EpisodeDescriptor] | None:
        anime_id = search_result.provider_internal_id or extract_watch_id(
            search_result.link
        )
        if anime_id:
            episodes = await self._list_episodes_ajax(anime_id, search_result)
            if episodes:
                return episodes
            self._log.info(f"{self.name}_ajax_fallback", anime_id=anime_id)
        else:
            self._log.info(f"{self.name}_no_internal_id", link=search_result.link)

        return await self._list_episodes_static(search_result)

    async def _list_episodes_ajax(
        self, anime_id: str, search_result: SearchResult
    ) -> list[EpisodeDescriptor]:
        url = f"{self.base_url}/ajax/episode/list/{anime_id}"
        data = await self._fetch_json(
            url,
            context="episodes_ajax",
            headers={
                "Referer": search_result.link,
                "X-Requested-With": "XMLHttpRequest",
                "Accept": "application/json, text/javascript, */*; q=0.01",
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("result"), str):
            return []
        if data.get("status") not in (None, 200, "200", True, "ok"):
            self._log.warning(
                f"{self.name}_ajax_bad_status", url=url, status=data.get("status")
            )
            return []

        fragment = parse_html(data["result"])
        anchors = select_items(fragment, ".episodes li a, ul.episodes a", "a[href]")
        return episodes_from_tags(
            anchors,
            anime_title=search_result.title,
            base_url=self.base_url,
            markup=_EPISODE_MARKUP,
        )

    async def _list_episodes_static(
        self, search_result: SearchResult
    ) -> list[EpisodeDescriptor] | None:
        soup = await self._fetch_html(search_result.link, context="episodes")
        if soup is None:
            return None
        anchors = select_items(
            soup,
            ".episodes-list a, #episodes-list a",
            'div.server[data-server-id="1"] ul.episodes a',
            ".episodes li a",
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
            iframes=("#player iframe", ".watch-video iframe", "iframe#iframe-embed"),
            videos=("video source[src]", "video[src]"),
        )

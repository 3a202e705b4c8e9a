"""AnimeDao provider (animedao.to)."""

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
        from_text(
            r"Episode\s*(\d+(?:\.\d+)?)|EP\s*(\d+(?:\.\d+)?)|(\d+(?:\.\d+)?)$"
        ),
        from_href(r"-episode-(\d+(?:\.\d+)?)"),
    ),
    title_attr="title",
)


class AnimeDaoProvider(ProviderAdapterBase):
    """AnimeDao adapter; third in the default search order.

    Episode anchors carry no data attributes, so the number comes from the
    link text (``Episode 12`` / ``EP 12`` / trailing digits) or the URL.
    """

    name = "AnimeDao"
    _domains = ["animedao.to"]  # noqa: RUF012

    async def _search(self, title: str) -> SearchResult | None:
        url = f"{self.base_url}/search/?q={quote_plus(title)}"
        soup = await self._fetch_html(url, context="search")
        if soup is None:
            return None

        card = select_first(soup, ".anime_card", ".animeinfo", ".anime-card")
        if card is None:
            return None

        href = extract_attr(card, "h5 a", "href", ".anime_name a", "a[href]")
        name = extract_text(card, "h5 a", ".anime_name a", "h5") or extract_attr(
            card, "h5 a", "title"
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
            soup, ".episode-list-item a, .ep-list a, #episode_related a"
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
            iframes=("#videocontent iframe", "iframe[src]"),
            videos=("video#player source[src]", ".anime_video_body_watch source[src]"),
            downloads=(".anime_download a[href]",),
        )

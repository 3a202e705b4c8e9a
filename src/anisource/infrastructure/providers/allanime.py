"""AllAnime provider (GraphQL API at api.allanime.day, site allanime.to).

Unlike the HTML adapters, every operation is a GraphQL POST.  The show's
``_id`` is carried as ``SearchResult.provider_internal_id``; episode
links point at the public site so they stay absolute and human-usable.

Stream sources come back as ``sourceUrls`` whose ``sourceUrl`` is either a
plain URL or an obfuscated ``--<hex>`` string (each byte XOR 56).
"""

from __future__ import annotations

import re
from typing import Any

from anisource.domain.entities.anime import (
    EpisodeDescriptor,
    EpisodeReference,
    SearchResult,
    make_episode_id,
)
from anisource.domain.exceptions import PreconditionError
from anisource.infrastructure.common.episodes import (
    normalize_episodes,
    parse_episode_number,
)

from .base import ProviderAdapterBase

SITE_URL = "https://allanime.to"

_TRANSLATION = "sub"

SEARCH_QUERY = (
    "query($search: SearchInput, $limit: Int, $translationType: VaildTranslationType)"
    " { shows(search: $search, limit: $limit, translationType: $translationType)"
    " { edges { _id name availableEpisodesDetail thumbnail } } }"
)
EPISODES_QUERY = (
    "query($_id: String!) { show(_id: $_id) { _id availableEpisodesDetail } }"
)
STREAMS_QUERY = (
    "query($showId: String!, $translationType: VaildTranslationType!,"
    " $episodeString: String!) { episode(showId: $showId,"
    " translationType: $translationType, episodeString: $episodeString)"
    " { sourceUrls } }"
)

_XOR_KEY = 56
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
# allanime.to/anime/<id>/episodes/sub/<n>
_EPISODE_LINK_RE = re.compile(r"/anime/([^/]+)/episodes/[^/]+/([^/?#]+)")


def decode_source_url(source_url: str) -> str:
    """Decode an obfuscated ``--<hex>`` source URL; plain URLs pass through.

    Malformed hex is returned unchanged so the caller can skip it.
    """
    if not source_url.startswith("-"):
        return source_url
    hex_part = source_url.rsplit("-", 1)[-1]
    if not hex_part or len(hex_part) % 2 or not _HEX_RE.match(hex_part):
        return source_url
    decoded = bytes(b ^ _XOR_KEY for b in bytes.fromhex(hex_part))
    return decoded.decode("utf-8", errors="replace")


def episode_link(show_id: str, number: str) -> str:
    return f"{SITE_URL}/anime/{show_id}/episodes/{_TRANSLATION}/{number}"


class AllAnimeProvider(ProviderAdapterBase):
    """AllAnime adapter; last in the default search order."""

    name = "AllAnime"
    _domains = ["api.allanime.day"]  # noqa: RUF012

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api"

    async def _graphql(
        self, query: str, variables: dict[str, Any], *, context: str
    ) -> dict[str, Any] | None:
        data = await self._fetch_json(
            self.api_url,
            context=context,
            method="POST",
            json={"query": query, "variables": variables},
            headers={
                "Accept": "application/json, */*",
                "Content-Type": "application/json",
                "Origin": SITE_URL,
                "Referer": f"{SITE_URL}/",
            },
        )
        if not isinstance(data, dict):
            return None
        if data.get("errors"):
            self._log.warning(
                f"{self.name}_graphql_errors", context=context, errors=data["errors"]
            )
        payload = data.get("data")
        return payload if isinstance(payload, dict) else None

    def _validate_search_result(self, search_result: SearchResult) -> None:
        super()._validate_search_result(search_result)
        if not search_result.provider_internal_id:
            raise PreconditionError("AllAnime needs the show id to list episodes")

    async def _search(self, title: str) -> SearchResult | None:
        payload = await self._graphql(
            SEARCH_QUERY,
            {
                "search": {"query": title, "allowAdult": False, "allowUnknown": False},
                "limit": 5,
                "translationType": _TRANSLATION,
            },
            context="search",
        )
        if payload is None:
            return None
        edges = (payload.get("shows") or {}).get("edges") or []
        for edge in edges:
            show_id = edge.get("_id")
            name = edge.get("name")
            if show_id and name:
                return SearchResult(
                    title=name,
                    link=f"{SITE_URL}/anime/{show_id}",
                    provider_internal_id=show_id,
                )
        return None

    async def _list_episodes(
        self, search_result: SearchResult
    ) -> list[EpisodeDescriptor] | None:
        show_id = search_result.provider_internal_id
        assert show_id is not None
        payload = await self._graphql(
            EPISODES_QUERY, {"_id": show_id}, context="episodes"
        )
        if payload is None:
            return None

        detail = (payload.get("show") or {}).get("availableEpisodesDetail") or {}
        raw_numbers = detail.get(_TRANSLATION) or []
        episodes: list[EpisodeDescriptor] = []
        for raw in raw_numbers:
            number = parse_episode_number(str(raw))
            if number is None:
                continue
            episodes.append(
                EpisodeDescriptor(
                    id=make_episode_id(search_result.title, number),
                    number=number,
                    title=f"Episode {raw}",
                    link=episode_link(show_id, str(raw)),
                )
            )
        return normalize_episodes(episodes)

    async def _resolve_stream(self, episode: EpisodeReference) -> str | None:
        match = _EPISODE_LINK_RE.search(episode.link)
        show_id = episode.provider_internal_id or (match.group(1) if match else None)
        number = match.group(2) if match else None
        if number is None and episode.number is not None:
            number = str(episode.number)
        if not show_id or not number:
            self._log.warning(f"{self.name}_unparseable_episode", link=episode.link)
            return None

        payload = await self._graphql(
            STREAMS_QUERY,
            {
                "showId": show_id,
                "translationType": _TRANSLATION,
                "episodeString": number,
            },
            context="stream",
        )
        if payload is None:
            return None
        sources = (payload.get("episode") or {}).get("sourceUrls") or []
        return self._pick_source(sources)

    def _pick_source(self, sources: list[dict[str, Any]]) -> str | None:
        """Highest-priority source that decodes to an absolute URL.

        Relative ``/apivtwo/`` sources need AllAnime's own clock API and
        are skipped.
        """
        candidates: list[tuple[float, str]] = []
        for source in sources:
            if not isinstance(source, dict):
                continue
            url = decode_source_url(str(source.get("sourceUrl") or ""))
            if url.startswith("//"):
                url = f"https:{url}"
            if not url.startswith(("http://", "https://")):
                continue
            try:
                priority = float(source.get("priority") or 0.0)
            except (TypeError, ValueError):
                priority = 0.0
            candidates.append((priority, url))
        if not candidates:
            return None
        candidates.sort(key=lambda c: c[0], reverse=True)
        return candidates[0][1]

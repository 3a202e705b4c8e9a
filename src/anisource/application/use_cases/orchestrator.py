"""Provider orchestrator: ordered search, single-provider dispatch after.

A request moves SEARCHING -> EPISODES_LISTED -> STREAM_RESOLVING; the
only fallback across providers happens while SEARCHING.  Once a provider
has been chosen, episode listing and stream resolution stay on it.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from anisource.domain.entities.anime import (
    AnimeLookup,
    EpisodeDescriptor,
    EpisodeReference,
)
from anisource.domain.exceptions import PreconditionError
from anisource.domain.ports.provider import ProviderPort

log = structlog.get_logger(__name__)


def not_found_message(title: str) -> str:
    return f'Could not find "{title}" on any provider.'


class ProviderOrchestrator:
    """Runs provider adapters in priority order.

    *providers* is an ordered iterable; its order is the search priority.
    """

    def __init__(self, providers: Iterable[ProviderPort]) -> None:
        self._providers: list[ProviderPort] = list(providers)
        self._by_name = {p.name.lower(): p for p in self._providers}

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    def get_provider(self, name: str | None) -> ProviderPort | None:
        if not name:
            return None
        return self._by_name.get(name.lower())

    async def fetch_anime(
        self, title: str, exclude: Iterable[str] = ()
    ) -> AnimeLookup:
        """Search providers one after another; first complete result wins.

        Providers named in *exclude* are skipped, so a caller whose episode
        listing failed can search again starting after that provider.
        """
        if not title or not title.strip():
            raise PreconditionError("title must be a non-empty string")

        excluded = {name.lower() for name in exclude}
        for provider in self._providers:
            if provider.name.lower() in excluded:
                continue
            log.info("provider_search_attempt", provider=provider.name, title=title)
            try:
                result = await provider.search(title)
            except PreconditionError:
                raise
            except Exception:
                log.exception(
                    "provider_search_crashed", provider=provider.name, title=title
                )
                continue

            if result is None:
                continue
            if not result.title or not result.link:
                log.warning(
                    "provider_search_incomplete",
                    provider=provider.name,
                    title=title,
                )
                continue

            log.info(
                "provider_search_success",
                provider=provider.name,
                title=title,
                match=result.title,
                link=result.link,
            )
            return AnimeLookup(source=provider.name, data=result)

        log.warning("provider_search_exhausted", title=title)
        return AnimeLookup(source=None, data=None, error=not_found_message(title))

    async def fetch_episodes(
        self, lookup: AnimeLookup
    ) -> list[EpisodeDescriptor] | None:
        """List episodes on the provider that found the anime."""
        if lookup is None or not lookup.source or lookup.data is None:
            raise PreconditionError("lookup needs a source and search data")
        if not lookup.data.link:
            raise PreconditionError("search data needs a link")

        provider = self.get_provider(lookup.source)
        if provider is None:
            log.warning("provider_unknown_source", source=lookup.source)
            return None

        episodes = await provider.list_episodes(lookup.data)
        if not episodes:
            log.warning(
                "provider_episodes_empty",
                provider=provider.name,
                link=lookup.data.link,
            )
            return None
        return episodes

    async def fetch_streaming_links(self, episode: EpisodeReference) -> str | None:
        """Ask the episode's provider for a player reference."""
        if episode is None or not episode.source or not episode.link:
            raise PreconditionError("episode needs a source and link")

        provider = self.get_provider(episode.source)
        if provider is None:
            log.warning("provider_unknown_source", source=episode.source)
            return None
        return await provider.resolve_stream(episode)

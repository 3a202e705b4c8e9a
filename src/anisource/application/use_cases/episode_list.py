"""Use case: list episodes for a MyAnimeList id."""

from __future__ import annotations

import structlog

from anisource.domain.entities.anime import EpisodeListing
from anisource.domain.exceptions import AnimeNotFoundError, EpisodesNotFoundError
from anisource.domain.ports.metadata import AnimeMetadataPort

from .orchestrator import ProviderOrchestrator

log = structlog.get_logger(__name__)


class EpisodeListUseCase:
    """MAL id -> title (metadata) -> provider search -> episode list.

    A failed title lookup does not abort: the search still runs with a
    ``malid:<id>`` term, which some providers understand.
    """

    def __init__(
        self,
        *,
        metadata: AnimeMetadataPort,
        orchestrator: ProviderOrchestrator,
    ) -> None:
        self._metadata = metadata
        self._orchestrator = orchestrator

    async def _lookup_title(self, mal_id: int) -> str | None:
        try:
            return await self._metadata.get_title(mal_id)
        except Exception:
            log.warning("episode_list_title_lookup_failed", mal_id=mal_id, exc_info=True)
            return None

    async def execute(self, mal_id: int) -> EpisodeListing:
        title = await self._lookup_title(mal_id)
        search_term = title or f"malid:{mal_id}"
        display = title or f"MAL ID {mal_id}"
        log.info("episode_list_request", mal_id=mal_id, search_term=search_term)

        lookup = await self._orchestrator.fetch_anime(search_term)
        if not lookup.found:
            raise AnimeNotFoundError(
                f'Could not find the anime "{display}" on supported providers.'
            )

        episodes = await self._orchestrator.fetch_episodes(lookup)
        if not episodes:
            raise EpisodesNotFoundError(
                f'No episodes found for "{display}" on {lookup.source}.'
            )

        assert lookup.source is not None and lookup.data is not None
        log.info(
            "episode_list_response",
            mal_id=mal_id,
            source=lookup.source,
            count=len(episodes),
        )
        return EpisodeListing(
            source=lookup.source,
            title=lookup.data.title,
            episodes=episodes,
        )

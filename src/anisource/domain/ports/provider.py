"""Port for anime provider adapters."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from anisource.domain.entities.anime import (
    EpisodeDescriptor,
    EpisodeReference,
    SearchResult,
)


@runtime_checkable
class ProviderPort(Protocol):
    """One third-party anime site.

    Every operation returns ``None`` on failure (network, block, challenge,
    parse).  Only ``PreconditionError`` is raised, for unusable input.
    """

    @property
    def name(self) -> str:
        """Provider name used as the ``source`` tag (e.g. ``"AniWave"``)."""
        ...

    async def search(self, title: str) -> SearchResult | None:
        """Return the first search result for *title*."""
        ...

    async def list_episodes(
        self, search_result: SearchResult
    ) -> list[EpisodeDescriptor] | None:
        """Return the episodes of the anime, sorted and unique by number."""
        ...

    async def resolve_stream(self, episode: EpisodeReference) -> str | None:
        """Return a player reference (embed or media URL) for *episode*."""
        ...

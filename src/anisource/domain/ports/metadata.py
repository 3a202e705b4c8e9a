"""Port for anime metadata lookups."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AnimeMetadataPort(Protocol):
    """Async interface for title lookups by MyAnimeList id."""

    async def get_title(self, mal_id: int) -> str | None:
        """Return the canonical title, or ``None`` if the lookup failed."""
        ...

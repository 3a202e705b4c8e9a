"""Use case: turn an episode into playable sources."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from anisource.domain.entities.anime import (
    EpisodeReference,
    ResolvedStream,
    WatchResponse,
    WatchSource,
)
from anisource.domain.exceptions import StreamNotFoundError

from .orchestrator import ProviderOrchestrator

log = structlog.get_logger(__name__)

ResolveFn = Callable[[str], Awaitable["ResolvedStream | None"]]

UNRESOLVED_QUALITY = "iframe/unresolved"


def _describe(episode: EpisodeReference) -> str:
    if episode.id:
        return episode.id
    if episode.number is not None:
        return f"episode {episode.number}"
    return episode.link


class WatchEpisodeUseCase:
    """Provider player reference -> stream link resolver -> ``WatchResponse``.

    When the resolver gives up, the raw player reference is still served
    as an embeddable iframe source.
    """

    def __init__(
        self,
        *,
        orchestrator: ProviderOrchestrator,
        resolve_fn: ResolveFn,
    ) -> None:
        self._orchestrator = orchestrator
        self._resolve = resolve_fn

    async def execute(self, episode: EpisodeReference) -> WatchResponse:
        reference = await self._orchestrator.fetch_streaming_links(episode)
        if not reference:
            raise StreamNotFoundError(
                f'Could not find a stream for "{_describe(episode)}" on {episode.source}.'
            )

        resolved = await self._resolve(reference)
        if resolved is None:
            log.warning("watch_resolution_failed", source=episode.source, url=reference)
            return WatchResponse(
                sources=[WatchSource(url=reference, quality=UNRESOLVED_QUALITY)],
                headers={"Referer": episode.link},
            )

        download = (
            resolved.url
            if not resolved.is_m3u8 and resolved.quality == "direct"
            else None
        )
        log.info(
            "watch_response",
            source=episode.source,
            is_m3u8=resolved.is_m3u8,
            quality=resolved.quality,
        )
        return WatchResponse(
            sources=[
                WatchSource(
                    url=resolved.url,
                    # Embed pages are neither HLS nor a file.
                    is_m3u8=None if resolved.is_embed else resolved.is_m3u8,
                    quality=resolved.quality,
                )
            ],
            headers=dict(resolved.headers) or {"Referer": episode.link},
            download=download,
        )

"""Shared base for embed decoders."""

from __future__ import annotations

import structlog

from anisource.domain.entities.anime import ResolvedStream
from anisource.infrastructure.http.retry_fetch import RetryingFetcher, RetryPolicy

from .registry import classify_direct_media, unresolved_tag

# Embed hosts either answer or they don't; one retry keeps the watch
# endpoint responsive.
EMBED_POLICY = RetryPolicy(retries=1, initial_delay_ms=500)


class EmbedDecoderBase:
    """Subclasses set ``name`` and ``signatures`` and implement ``decode``."""

    name: str = ""
    signatures: tuple[str, ...] = ()

    def __init__(self, fetcher: RetryingFetcher) -> None:
        self._fetcher = fetcher
        self._log = structlog.get_logger(self.name or __name__)

    async def _fetch_page(self, url: str, *, referer: str | None = None) -> str:
        headers = {"Referer": referer} if referer else None
        return await self._fetcher.fetch(url, headers=headers, policy=EMBED_POLICY)

    def _stream(self, media_url: str, *, referer: str | None = None) -> ResolvedStream:
        """Wrap an extracted media URL, classifying HLS vs direct file."""
        classified = classify_direct_media(media_url)
        headers = {"Referer": referer} if referer else {}
        if classified is None:
            # Extensionless CDN URLs are almost always HLS playlists here.
            return ResolvedStream(
                url=media_url, is_m3u8=True, quality="unknown", headers=headers
            )
        return ResolvedStream(
            url=classified.url,
            is_m3u8=classified.is_m3u8,
            quality=classified.quality,
            headers=headers,
        )

    def _unresolved(self, url: str) -> ResolvedStream:
        self._log.warning(f"{self.name}_extraction_failed", url=url)
        return ResolvedStream(url=url, quality=unresolved_tag(self.name))

"""Kwik decoder (the player AnimePahe links to).

The embed page hides ``const source='...m3u8'`` inside a packed script.
Kwik refuses requests without a Referer, and so does its CDN.
"""

from __future__ import annotations

from anisource.domain.entities.anime import ResolvedStream
from anisource.infrastructure.common.video_extract import extract_video_url

from .base import EmbedDecoderBase

_PAGE_REFERER = "https://animepahe.ru/"
_STREAM_REFERER = "https://kwik.cx/"


class KwikDecoder(EmbedDecoderBase):
    name = "kwik"
    signatures = ("kwik.",)

    async def decode(self, url: str) -> ResolvedStream | None:
        html = await self._fetch_page(url, referer=_PAGE_REFERER)
        media_url = extract_video_url(html)
        if not media_url:
            return self._unresolved(url)
        return self._stream(media_url, referer=_STREAM_REFERER)

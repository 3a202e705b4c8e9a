"""MP4Upload decoder."""

from __future__ import annotations

import re

from anisource.domain.entities.anime import ResolvedStream
from anisource.infrastructure.common.video_extract import extract_video_url

from .base import EmbedDecoderBase

_REFERER = "https://www.mp4upload.com/"

# mp4upload.com/abc123, mp4upload.com/embed-abc123.html
_FILE_ID_RE = re.compile(r"mp4upload\.com/(?:embed-)?([a-z0-9]+)", re.I)
_PLAYER_SRC_RE = re.compile(r"""player\.src\(\s*\{[^}]*?src\s*:\s*["']([^"']+)["']""", re.S)


def embed_url_for(url: str) -> str:
    """Canonical ``embed-<id>.html`` URL, or *url* when no id is present."""
    match = _FILE_ID_RE.search(url)
    if not match:
        return url
    return f"https://www.mp4upload.com/embed-{match.group(1)}.html"


class Mp4UploadDecoder(EmbedDecoderBase):
    name = "mp4upload"
    signatures = ("mp4upload",)

    async def decode(self, url: str) -> ResolvedStream | None:
        embed_url = embed_url_for(url)
        html = await self._fetch_page(embed_url, referer=_REFERER)
        if "file was deleted" in html.lower() or "file not found" in html.lower():
            self._log.info("mp4upload_offline", url=url)
            return None

        match = _PLAYER_SRC_RE.search(html)
        media_url = match.group(1) if match else extract_video_url(html)
        if not media_url:
            return self._unresolved(url)
        # The CDN rejects requests without the embed host as referer.
        return self._stream(media_url, referer=_REFERER)

"""Filemoon decoder: extracts HLS URLs from filemoon / kerapoxy embeds.

Supports two architectures:
1. Byse SPA (new): loads sources via GET /api/videos/{id}/embed/details JSON.
2. Legacy XFS: packed JavaScript (Dean Edwards packer) with a JWPlayer config.
"""

from __future__ import annotations

import json
import re
from typing import Any

from anisource.domain.entities.anime import ResolvedStream
from anisource.domain.exceptions import FetchError
from anisource.infrastructure.common.video_extract import extract_video_url

from .base import EMBED_POLICY, EmbedDecoderBase

_VIDEO_ID_RE = re.compile(r"/(?:e|d|download)/([a-z0-9]+)", re.I)
_ORIGIN_RE = re.compile(r"(https?://[^/]+)")

_OFFLINE_MARKERS = ("file not found", "file was deleted", 'class="fake-signup"')


def normalize_embed_url(url: str) -> str:
    """Ensure the /e/ embed form (``/d/`` and ``/download/`` are rewritten)."""
    if "/e/" in url:
        return url
    return re.sub(r"/(?:d|download)/", "/e/", url)


def parse_byse_sources(data: Any) -> str | None:
    """First absolute source URL from a Byse ``embed/details`` payload."""
    if not isinstance(data, dict):
        return None
    sources = data.get("sources")
    if not isinstance(sources, list):
        inner = data.get("data")
        sources = inner.get("sources") if isinstance(inner, dict) else None
    if not isinstance(sources, list):
        return None
    for source in sources:
        if not isinstance(source, dict):
            continue
        url = source.get("url") or source.get("file") or ""
        if url.startswith("http"):
            return url
    return None


class FilemoonDecoder(EmbedDecoderBase):
    name = "filemoon"
    signatures = ("filemoon", "kerapoxy")

    async def decode(self, url: str) -> ResolvedStream | None:
        embed_url = normalize_embed_url(url)

        media_url = await self._try_byse_api(embed_url)
        if media_url:
            return self._stream(media_url, referer=embed_url)

        html = await self._fetch_page(embed_url, referer=embed_url)
        lowered = html.lower()
        if any(marker in lowered for marker in _OFFLINE_MARKERS):
            self._log.info("filemoon_offline", url=url)
            return None

        media_url = extract_video_url(html)
        if media_url:
            self._log.debug("filemoon_packed_js_success", url=media_url[:80])
            return self._stream(media_url, referer=embed_url)
        return self._unresolved(url)

    async def _try_byse_api(self, embed_url: str) -> str | None:
        id_match = _VIDEO_ID_RE.search(embed_url)
        origin_match = _ORIGIN_RE.match(embed_url)
        if not id_match or not origin_match:
            return None

        api_url = (
            f"{origin_match.group(1)}/api/videos/{id_match.group(1)}/embed/details"
        )
        try:
            body = await self._fetcher.fetch(
                api_url,
                headers={"Referer": embed_url, "Accept": "application/json"},
                policy=EMBED_POLICY,
            )
            data = json.loads(body)
        except (FetchError, ValueError):
            # Legacy embeds have no such endpoint; fall through to HTML.
            self._log.debug("filemoon_byse_api_unavailable", url=api_url)
            return None
        return parse_byse_sources(data)

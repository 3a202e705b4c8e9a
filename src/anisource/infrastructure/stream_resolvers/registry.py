"""Stream link resolver: dispatches player references to embed decoders."""

from __future__ import annotations

import re
from urllib.parse import urlparse

import structlog

from anisource.domain.entities.anime import ResolvedStream
from anisource.domain.exceptions import FetchError
from anisource.domain.ports.stream_decoder import StreamDecoderPort

log = structlog.get_logger(__name__)

_M3U8_RE = re.compile(r"\.m3u8(?:\?|$)", re.I)
_DIRECT_MEDIA_RE = re.compile(r"\.(?:mp4|mkv|webm)(?:\?|$)", re.I)

QUALITY_HLS = "unknown"
QUALITY_DIRECT = "direct"
QUALITY_UNRESOLVED = "iframe/unresolved"


def unresolved_tag(decoder: str) -> str:
    """Quality tag for an embed the named decoder could not extract."""
    return f"iframe/{decoder}-unresolved"


def classify_direct_media(url: str) -> ResolvedStream | None:
    """Return a stream for URLs that already point at media, else ``None``.

    The path is inspected without its query string so signed CDN URLs
    (``master.m3u8?token=...``) are recognised.
    """
    path = urlparse(url).path or url
    if _M3U8_RE.search(path) or _M3U8_RE.search(url):
        return ResolvedStream(url=url, is_m3u8=True, quality=QUALITY_HLS)
    if _DIRECT_MEDIA_RE.search(path) or _DIRECT_MEDIA_RE.search(url):
        return ResolvedStream(url=url, is_m3u8=False, quality=QUALITY_DIRECT)
    return None


class StreamLinkResolver:
    """Turns a player reference into a ``ResolvedStream``.

    1. Direct media (``.m3u8`` / ``.mp4|.mkv|.webm``) short-circuits.
    2. Otherwise the first decoder whose signature occurs in the URL runs.
    3. No signature: the reference comes back tagged ``iframe/unresolved``.

    A decoder that raises yields ``None``.
    """

    def __init__(self, decoders: list[StreamDecoderPort] | None = None) -> None:
        self._decoders: list[StreamDecoderPort] = []
        for decoder in decoders or []:
            self.register(decoder)

    def register(self, decoder: StreamDecoderPort) -> None:
        self._decoders.append(decoder)
        log.debug(
            "stream_decoder_registered",
            decoder=decoder.name,
            signatures=list(decoder.signatures),
        )

    @property
    def supported_decoders(self) -> list[str]:
        return [decoder.name for decoder in self._decoders]

    def find_decoder(self, url: str) -> StreamDecoderPort | None:
        lowered = url.lower()
        for decoder in self._decoders:
            if any(signature in lowered for signature in decoder.signatures):
                return decoder
        return None

    async def resolve_player_url(self, player_reference: str) -> ResolvedStream | None:
        """Resolve *player_reference*; ``None`` only when a decoder failed hard."""
        if not player_reference:
            return None

        direct = classify_direct_media(player_reference)
        if direct is not None:
            log.info(
                "stream_direct_media",
                url=player_reference,
                is_m3u8=direct.is_m3u8,
            )
            return direct

        decoder = self.find_decoder(player_reference)
        if decoder is None:
            log.warning("stream_no_decoder", url=player_reference)
            return ResolvedStream(url=player_reference, quality=QUALITY_UNRESOLVED)

        return await self._try_decoder(decoder, player_reference)

    async def _try_decoder(
        self, decoder: StreamDecoderPort, url: str
    ) -> ResolvedStream | None:
        """Run *decoder*, logging success/failure."""
        try:
            result = await decoder.decode(url)
        except FetchError as exc:
            log.warning(
                "stream_decode_fetch_error",
                decoder=decoder.name,
                url=url,
                status=exc.status,
                code=exc.code,
            )
            return None
        except Exception:
            log.exception("stream_decode_error", decoder=decoder.name, url=url)
            return None

        if result is None:
            log.warning("stream_decode_failed", decoder=decoder.name, url=url)
            return None
        if result.is_embed:
            log.warning(
                "stream_decode_unresolved",
                decoder=decoder.name,
                url=url,
                quality=result.quality,
            )
        else:
            log.info(
                "stream_decode_success",
                decoder=decoder.name,
                is_m3u8=result.is_m3u8,
            )
        return result

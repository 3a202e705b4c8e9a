from anisource.infrastructure.http.retry_fetch import RetryingFetcher

from .filemoon import FilemoonDecoder
from .kwik import KwikDecoder
from .mp4upload import Mp4UploadDecoder
from .registry import StreamLinkResolver, classify_direct_media
from .vidplay import VidplayDecoder


def create_all_decoders(fetcher: RetryingFetcher) -> list:
    """Every embed decoder, in dispatch order."""
    return [
        VidplayDecoder(fetcher),
        FilemoonDecoder(fetcher),
        Mp4UploadDecoder(fetcher),
        KwikDecoder(fetcher),
    ]


__all__ = [
    "FilemoonDecoder",
    "KwikDecoder",
    "Mp4UploadDecoder",
    "StreamLinkResolver",
    "VidplayDecoder",
    "classify_direct_media",
    "create_all_decoders",
]

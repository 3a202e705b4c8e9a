from .metadata import AnimeMetadataPort
from .provider import ProviderPort
from .stream_decoder import StreamDecoderPort

__all__ = [
    "AnimeMetadataPort",
    "ProviderPort",
    "StreamDecoderPort",
]

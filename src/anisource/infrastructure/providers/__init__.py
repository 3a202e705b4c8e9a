from .allanime import AllAnimeProvider
from .animedao import AnimeDaoProvider
from .animesuge import AnimeSugeProvider
from .aniwave import AniWaveProvider
from .base import ProviderAdapterBase
from .registry import PROVIDER_CLASSES, ProviderRegistry, build_providers

__all__ = [
    "PROVIDER_CLASSES",
    "AllAnimeProvider",
    "AniWaveProvider",
    "AnimeDaoProvider",
    "AnimeSugeProvider",
    "ProviderAdapterBase",
    "ProviderRegistry",
    "build_providers",
]

"""Provider construction and ordered lookup."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from anisource.domain.ports.provider import ProviderPort
from anisource.infrastructure.config.schema import ProvidersConfig
from anisource.infrastructure.http.retry_fetch import RetryingFetcher

from .allanime import AllAnimeProvider
from .animedao import AnimeDaoProvider
from .animesuge import AnimeSugeProvider
from .aniwave import AniWaveProvider
from .base import ProviderAdapterBase

log = structlog.get_logger(__name__)

PROVIDER_CLASSES: dict[str, type[ProviderAdapterBase]] = {
    cls.name: cls
    for cls in (AnimeSugeProvider, AniWaveProvider, AnimeDaoProvider, AllAnimeProvider)
}


class ProviderRegistry:
    """Providers in search priority order, addressable by name.

    Names are matched case-insensitively so ``source=aniwave`` from a
    query string finds ``AniWave``.
    """

    def __init__(self, providers: Iterable[ProviderPort] = ()) -> None:
        self._providers: dict[str, ProviderPort] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: ProviderPort) -> None:
        key = provider.name.lower()
        if key in self._providers:
            raise ValueError(f"duplicate provider name: {provider.name}")
        self._providers[key] = provider
        log.debug("provider_registered", provider=provider.name)

    def get(self, name: str | None) -> ProviderPort | None:
        if not name:
            return None
        return self._providers.get(name.lower())

    def ordered(self) -> list[ProviderPort]:
        return list(self._providers.values())

    def list_names(self) -> list[str]:
        return [provider.name for provider in self._providers.values()]

    def __len__(self) -> int:
        return len(self._providers)


def build_providers(
    config: ProvidersConfig, fetcher: RetryingFetcher
) -> ProviderRegistry:
    """Instantiate the enabled providers in configured order.

    Unknown names in the configuration are logged and skipped.
    """
    by_lower = {name.lower(): cls for name, cls in PROVIDER_CLASSES.items()}
    domains = {name.lower(): url for name, url in config.domains.items()}
    registry = ProviderRegistry()
    for name in config.enabled:
        cls = by_lower.get(name.lower())
        if cls is None:
            log.warning("provider_unknown", provider=name)
            continue
        registry.register(cls(fetcher, base_url=domains.get(name.lower())))

    disabled = [n for n in PROVIDER_CLASSES if n not in registry.list_names()]
    log.info("providers_configured", order=registry.list_names(), disabled=disabled)
    return registry

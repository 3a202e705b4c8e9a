"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from anisource.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from anisource.application.use_cases import (
        EpisodeListUseCase,
        ProviderOrchestrator,
        WatchEpisodeUseCase,
    )
    from anisource.domain.ports import AnimeMetadataPort
    from anisource.infrastructure.http import RetryingFetcher
    from anisource.infrastructure.providers import ProviderRegistry
    from anisource.infrastructure.stream_resolvers import StreamLinkResolver


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    fetcher: RetryingFetcher
    http_client: httpx.AsyncClient  # metadata API only; scraping uses fetcher

    # Providers + resolution
    providers: ProviderRegistry
    stream_resolver: StreamLinkResolver
    metadata: AnimeMetadataPort

    # Application services
    orchestrator: ProviderOrchestrator
    episode_list_uc: EpisodeListUseCase
    watch_episode_uc: WatchEpisodeUseCase

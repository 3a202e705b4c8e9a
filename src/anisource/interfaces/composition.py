"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from anisource.application.use_cases import (
    EpisodeListUseCase,
    ProviderOrchestrator,
    WatchEpisodeUseCase,
)
from anisource.infrastructure.config.schema import AppConfig
from anisource.infrastructure.http.identity import random_user_agent
from anisource.infrastructure.http.retry_fetch import RetryingFetcher, RetryPolicy
from anisource.infrastructure.metadata import JikanClient
from anisource.infrastructure.providers import build_providers
from anisource.infrastructure.stream_resolvers import (
    StreamLinkResolver,
    create_all_decoders,
)
from anisource.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_fetcher(config: AppConfig) -> RetryingFetcher:
    """Retrying fetcher configured from the http.* section."""
    return RetryingFetcher(
        proxies=config.http_proxies,
        timeout=config.http_timeout_seconds,
        policy=RetryPolicy(
            retries=config.http_retries,
            initial_delay_ms=config.http_initial_delay_ms,
            backoff_factor=config.http_backoff_factor,
            max_jitter_ms=config.http_max_jitter_ms,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Retrying fetcher (shared by providers and decoders)
        2. Provider registry (configured order, disabled ones removed)
        3. Stream link resolver + decoders
        4. Metadata client (own httpx client)
        5. Orchestrator and use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Fetcher: per-attempt clients, so nothing to close on shutdown
    state.fetcher = build_fetcher(config)
    log.info(
        "fetcher_initialized",
        proxies=len(config.http_proxies),
        retries=config.http_retries,
        timeout=config.http_timeout_seconds,
    )

    # 2) Providers
    state.providers = build_providers(config.providers, state.fetcher)
    if not len(state.providers):
        log.warning("no_providers_enabled")

    # 3) Stream resolution
    state.stream_resolver = StreamLinkResolver(
        decoders=create_all_decoders(state.fetcher)
    )
    log.info(
        "stream_resolver_initialized",
        decoders=state.stream_resolver.supported_decoders,
    )

    # 4) Metadata (Jikan)
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": random_user_agent(), "Accept": "application/json"},
        follow_redirects=True,
    )
    state.metadata = JikanClient(
        http_client=state.http_client, base_url=config.jikan_base_url
    )

    # 5) Use cases
    state.orchestrator = ProviderOrchestrator(state.providers.ordered())
    state.episode_list_uc = EpisodeListUseCase(
        metadata=state.metadata,
        orchestrator=state.orchestrator,
    )
    state.watch_episode_uc = WatchEpisodeUseCase(
        orchestrator=state.orchestrator,
        resolve_fn=state.stream_resolver.resolve_player_url,
    )

    log.info("app_startup_complete", providers=state.orchestrator.provider_names)

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")
        log.info("app_shutdown_complete")

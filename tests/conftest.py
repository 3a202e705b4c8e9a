"""Shared test fixtures for the anisource test suite."""

from __future__ import annotations

import pytest

from anisource.domain.entities import EpisodeReference, SearchResult
from anisource.infrastructure.http.retry_fetch import RetryingFetcher, RetryPolicy

# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def no_wait_policy() -> RetryPolicy:
    """Three retries without any delay or jitter."""
    return RetryPolicy(retries=3, initial_delay_ms=0, backoff_factor=1.0, max_jitter_ms=0)


@pytest.fixture()
def fetcher() -> RetryingFetcher:
    """Fetcher with a single attempt so provider tests stay fast."""
    return RetryingFetcher(
        policy=RetryPolicy(retries=0, initial_delay_ms=0, max_jitter_ms=0)
    )


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def search_result() -> SearchResult:
    return SearchResult(
        title="Attack on Titan",
        link="https://aniwave.to/watch/attack-on-titan.kww",
        provider_internal_id="kww",
    )


@pytest.fixture()
def episode_reference() -> EpisodeReference:
    return EpisodeReference(
        source="AniWave",
        link="https://aniwave.to/watch/attack-on-titan.kww/ep-1",
        number=1,
        id="Attack-on-Titan-ep-1",
    )

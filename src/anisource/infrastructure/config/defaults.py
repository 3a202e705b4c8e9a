"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_PROVIDER_ORDER: list[str] = ["AnimeSuge", "AniWave", "AnimeDao", "AllAnime"]

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "anisource",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "proxies": [],
        "retries": 3,
        "initial_delay_ms": 1000,
        "backoff_factor": 1.5,
        "max_jitter_ms": 500,
    },
    "providers": {
        "order": list(DEFAULT_PROVIDER_ORDER),
        "disabled": [],
        "domains": {},
    },
    "metadata": {
        "jikan_base_url": "https://api.jikan.moe/v4",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}

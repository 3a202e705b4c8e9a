"""Per-request client identity: user agent, browser headers, proxy."""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from urllib.parse import urlsplit

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 "
    "Firefox/125.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


def random_user_agent() -> str:
    return random.choice(USER_AGENTS)  # noqa: S311


def pick_proxy(proxies: Sequence[str]) -> str | None:
    """Return a random proxy from the pool, or ``None`` for a direct connection."""
    if not proxies:
        return None
    return random.choice(proxies)  # noqa: S311


def proxy_host(proxy: str | None) -> str | None:
    """Host:port of *proxy* without credentials, for logging."""
    if proxy is None:
        return None
    parts = urlsplit(proxy)
    if parts.hostname is None:
        return None
    return f"{parts.hostname}:{parts.port}" if parts.port else parts.hostname


def build_headers(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Browser-like headers with a fresh user agent; *extra* wins."""
    headers = {"User-Agent": random_user_agent(), **BROWSER_HEADERS}
    if extra:
        headers.update(extra)
    return headers

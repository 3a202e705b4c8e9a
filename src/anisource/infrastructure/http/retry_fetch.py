"""Retrying HTTP fetcher with identity rotation and block detection.

Every attempt gets a fresh ``httpx.AsyncClient`` because the proxy is
chosen per attempt and httpx binds proxies to the client.  Nothing is
pooled across requests.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from anisource.domain.exceptions import (
    BlockingError,
    FetchError,
    HttpStatusError,
    NetworkError,
)

from .challenge import is_edge_block
from .identity import build_headers, pick_proxy, proxy_host

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0

_BLOCKING_STATUSES = frozenset({403, 429})

_DNS_HINTS: tuple[tuple[str, str], ...] = (
    ("temporary failure in name resolution", "EAI_AGAIN"),
    ("name or service not known", "ENOTFOUND"),
    ("nodename nor servname", "ENOTFOUND"),
    ("getaddrinfo failed", "ENOTFOUND"),
    ("no address associated", "ENOTFOUND"),
)


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently to retry.

    ``retries`` counts attempts *after* the first one.
    """

    retries: int = 3
    initial_delay_ms: int = 1000
    backoff_factor: float = 1.5
    max_jitter_ms: int = 500

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.initial_delay_ms < 0 or self.max_jitter_ms < 0:
            raise ValueError("delays must be >= 0")
        if self.backoff_factor < 1.0:
            raise ValueError("backoff_factor must be >= 1.0")


def _connect_error_code(exc: httpx.ConnectError) -> str:
    message = str(exc).lower()
    for hint, code in _DNS_HINTS:
        if hint in message:
            return code
    return "ECONNREFUSED"


def _check_response(response: httpx.Response, url: str) -> None:
    """Raise the matching ``FetchError`` for a non-success response."""
    status = response.status_code
    if is_edge_block(status, response.headers.get("server")):
        raise BlockingError(
            f"edge protection blocked {url}",
            url=url,
            status=status,
            code="EDGE_BLOCK",
        )
    if status in _BLOCKING_STATUSES:
        raise BlockingError(
            f"HTTP {status} for {url}",
            url=url,
            status=status,
            code=f"HTTP_{status}",
        )
    if not 200 <= status < 300:
        raise HttpStatusError(
            f"HTTP {status} for {url}",
            url=url,
            status=status,
            code=f"HTTP_{status}",
        )


class RetryingFetcher:
    """Fetches text bodies with retry, backoff and jitter.

    Retried: connection reset/refused, timeouts, DNS failures, proxy
    failures, 403, 429, edge blocks and 5xx.  Any other 4xx (404 included),
    redirect loops and undecodable bodies fail on the first attempt.
    """

    def __init__(
        self,
        *,
        proxies: Sequence[str] = (),
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._proxies = tuple(proxies)
        self._timeout = timeout
        self._policy = policy or RetryPolicy()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        json: Any = None,
        policy: RetryPolicy | None = None,
    ) -> str:
        """Return the body of the first successful response.

        Raises the last ``FetchError`` once retries are exhausted, or the
        first one that is not retryable.
        """
        policy = policy or self._policy
        attempts = policy.retries + 1
        delay = policy.initial_delay_ms / 1000.0
        last_error: FetchError | None = None
        attempt = 0

        for attempt in range(1, attempts + 1):
            proxy = pick_proxy(self._proxies)
            log.info(
                "fetch_attempt",
                url=url,
                method=method,
                attempt=attempt,
                max_attempts=attempts,
                proxy=proxy_host(proxy),
            )
            try:
                return await self._attempt(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    data=data,
                    json=json,
                    proxy=proxy,
                )
            except FetchError as exc:
                last_error = exc
                if not exc.retryable or attempt == attempts:
                    break
                wait = delay + random.uniform(0, policy.max_jitter_ms / 1000.0)  # noqa: S311
                log.info(
                    "fetch_retry",
                    url=url,
                    attempt=attempt,
                    status=exc.status,
                    code=exc.code,
                    delay=round(wait, 2),
                )
                await asyncio.sleep(wait)
                delay *= policy.backoff_factor

        assert last_error is not None
        log.warning(
            "fetch_failed",
            url=url,
            attempts=attempt,
            status=last_error.status,
            code=last_error.code,
            error=str(last_error),
        )
        raise last_error

    async def _attempt(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None,
        params: Mapping[str, Any] | None,
        data: Mapping[str, Any] | None,
        json: Any,
        proxy: str | None,
    ) -> str:
        try:
            async with httpx.AsyncClient(
                proxy=proxy,
                timeout=self._timeout,
                follow_redirects=True,
                headers=build_headers(headers),
            ) as client:
                response = await client.request(
                    method, url, params=params, data=data, json=json
                )
        except httpx.TimeoutException as exc:
            raise NetworkError(
                f"timeout fetching {url}", url=url, code="ETIMEDOUT"
            ) from exc
        except httpx.ProxyError as exc:
            raise NetworkError(
                f"proxy failure fetching {url}", url=url, code="EPROXY"
            ) from exc
        except httpx.ConnectError as exc:
            raise NetworkError(
                f"cannot connect to {url}", url=url, code=_connect_error_code(exc)
            ) from exc
        except (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError) as exc:
            raise NetworkError(
                f"connection reset fetching {url}", url=url, code="ECONNRESET"
            ) from exc
        except httpx.TooManyRedirects as exc:
            raise FetchError(
                f"redirect loop fetching {url}", url=url, code="EREDIRECT"
            ) from exc
        # Remaining transport, decoding and URL errors; not retried.
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise FetchError(
                f"cannot fetch {url}: {exc}", url=url, code="EREQUEST"
            ) from exc

        _check_response(response, url)
        return response.text


async def fetch_with_retry(
    url: str,
    *,
    proxies: Sequence[str] = (),
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    policy: RetryPolicy | None = None,
    **options: Any,
) -> str:
    """One-shot convenience wrapper around ``RetryingFetcher.fetch``."""
    fetcher = RetryingFetcher(proxies=proxies, timeout=timeout, policy=policy)
    return await fetcher.fetch(url, **options)

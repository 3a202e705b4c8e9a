"""Shared base class for provider adapters.

Owns what every adapter repeats: base URL handling, fetching through the
retrying fetcher, challenge detection, outcome logging, JSON parsing,
player-reference extraction and the "never raise, return ``None``"
contract of the public operations.

Subclasses implement ``_search``, ``_list_episodes`` and
``_resolve_stream``; they may raise anything, and the public wrappers
turn every failure except ``PreconditionError`` into ``None``.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from contextvars import ContextVar
from typing import Any

import structlog
from bs4 import BeautifulSoup

from anisource.domain.entities.anime import (
    Blocked,
    EpisodeDescriptor,
    EpisodeReference,
    NotFound,
    ProviderResult,
    SearchResult,
    Success,
    TransientError,
)
from anisource.domain.exceptions import (
    BlockingError,
    FetchError,
    HttpStatusError,
    PreconditionError,
)
from anisource.infrastructure.common.html_selectors import (
    absolutize,
    extract_attr,
    parse_html,
    select_items,
)
from anisource.infrastructure.common.video_extract import extract_video_url
from anisource.infrastructure.http.challenge import detect_challenge
from anisource.infrastructure.http.retry_fetch import RetryingFetcher

# Last URL fetched by the running operation, for error logs.
current_fetch_url: ContextVar[str | None] = ContextVar(
    "current_fetch_url",
    default=None,
)


class ProviderAdapterBase:
    """Shared base for HTML/JSON provider adapters.

    Subclasses **must** set:
    - ``name``
    - ``_domains`` (list with at least one domain string)

    Subclasses **must** override:
    - ``_search()``, ``_list_episodes()``, ``_resolve_stream()``
    """

    name: str = ""
    _domains: list[str] = []  # noqa: RUF012  # subclass overrides

    def __init__(self, fetcher: RetryingFetcher, *, base_url: str | None = None) -> None:
        self._fetcher = fetcher
        default = f"https://{self._domains[0]}" if self._domains else ""
        self.base_url: str = (base_url or default).rstrip("/")
        self._log = structlog.get_logger(self.name or __name__)

    # ------------------------------------------------------------------
    # Public operations (ProviderPort)
    # ------------------------------------------------------------------

    async def search(self, title: str) -> SearchResult | None:
        """Return the first search result for *title*, or ``None``."""
        if not title or not title.strip():
            raise PreconditionError("title must be a non-empty string")
        token = current_fetch_url.set(None)
        try:
            result = await self._search(title.strip())
        except Exception:
            self._log.exception(
                f"{self.name}_search_error", title=title, url=current_fetch_url.get()
            )
            return None
        finally:
            current_fetch_url.reset(token)
        if result is None:
            self._log.info(f"{self.name}_search_no_match", title=title)
        return result

    async def list_episodes(
        self, search_result: SearchResult
    ) -> list[EpisodeDescriptor] | None:
        """Return episodes sorted ascending and unique by number, or ``None``."""
        self._validate_search_result(search_result)
        token = current_fetch_url.set(None)
        try:
            episodes = await self._list_episodes(search_result)
        except Exception:
            self._log.exception(
                f"{self.name}_episodes_error",
                link=search_result.link,
                url=current_fetch_url.get(),
            )
            return None
        finally:
            current_fetch_url.reset(token)
        self._log.info(
            f"{self.name}_episodes_listed",
            link=search_result.link,
            count=len(episodes) if episodes else 0,
        )
        return episodes

    async def resolve_stream(self, episode: EpisodeReference) -> str | None:
        """Return a player reference for *episode*, or ``None``."""
        if not episode.link:
            raise PreconditionError("episode link is required")
        token = current_fetch_url.set(None)
        try:
            reference = await self._resolve_stream(episode)
        except Exception:
            self._log.exception(
                f"{self.name}_stream_error",
                link=episode.link,
                url=current_fetch_url.get(),
            )
            return None
        finally:
            current_fetch_url.reset(token)
        if reference is None:
            self._log.warning(f"{self.name}_no_player_found", link=episode.link)
        return reference

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    async def _search(self, title: str) -> SearchResult | None:
        raise NotImplementedError(f"{type(self).__name__}._search() not implemented")

    async def _list_episodes(
        self, search_result: SearchResult
    ) -> list[EpisodeDescriptor] | None:
        raise NotImplementedError(
            f"{type(self).__name__}._list_episodes() not implemented"
        )

    async def _resolve_stream(self, episode: EpisodeReference) -> str | None:
        raise NotImplementedError(
            f"{type(self).__name__}._resolve_stream() not implemented"
        )

    def _validate_search_result(self, search_result: SearchResult) -> None:
        if search_result is None or not search_result.title or not search_result.link:
            raise PreconditionError("search result needs both title and link")

    # ------------------------------------------------------------------
    # Fetch helpers
    # ------------------------------------------------------------------

    async def _fetch_document(
        self,
        url: str,
        *,
        context: str = "",
        **options: Any,
    ) -> ProviderResult[str]:
        """Fetch *url* and classify the outcome.  Never raises."""
        current_fetch_url.set(url)
        try:
            body = await self._fetcher.fetch(url, **options)
        except BlockingError as exc:
            self._log.warning(
                f"{self.name}_blocked",
                url=url,
                status=exc.status,
                code=exc.code,
                context=context,
            )
            return Blocked(str(exc))
        except HttpStatusError as exc:
            if exc.status == 404:
                self._log.info(f"{self.name}_not_found", url=url, context=context)
                return NotFound(str(exc))
            self._log.warning(
                f"{self.name}_http_error",
                url=url,
                status=exc.status,
                code=exc.code,
                context=context,
            )
            return TransientError(str(exc), status=exc.status, code=exc.code)
        except FetchError as exc:
            self._log.warning(
                f"{self.name}_fetch_error",
                url=url,
                status=exc.status,
                code=exc.code,
                error=str(exc),
                context=context,
            )
            return TransientError(str(exc), status=exc.status, code=exc.code)

        if detect_challenge(body) is None:
            self._log.warning(f"{self.name}_challenge_detected", url=url, context=context)
            return Blocked("challenge page")
        return Success(body)

    async def _fetch_html(
        self, url: str, *, context: str = "", **options: Any
    ) -> BeautifulSoup | None:
        result = await self._fetch_document(url, context=context, **options)
        if not isinstance(result, Success):
            return None
        return parse_html(result.value)

    async def _fetch_json(
        self, url: str, *, context: str = "", **options: Any
    ) -> dict | list | None:
        result = await self._fetch_document(url, context=context, **options)
        if not isinstance(result, Success):
            return None
        return self._safe_parse_json(result.value, url=url, context=context)

    def _safe_parse_json(
        self, body: str, *, url: str = "", context: str = ""
    ) -> dict | list | None:
        """Parse JSON with structured error logging."""
        try:
            return json.loads(body)
        except (json.JSONDecodeError, ValueError):
            self._log.warning(f"{self.name}_invalid_json", url=url, context=context)
            return None

    def _absolute(self, href: str) -> str:
        return absolutize(self.base_url, href)

    # ------------------------------------------------------------------
    # Player reference extraction
    # ------------------------------------------------------------------

    def _find_player_reference(
        self,
        soup: BeautifulSoup,
        *,
        iframes: Sequence[str] = (),
        videos: Sequence[str] = (),
        downloads: Sequence[str] = (),
    ) -> str | None:
        """Find the player on an episode page.

        Priority: iframe ``src`` -> ``<video>``/``<source>`` ``src`` ->
        inline-script player config -> download link.
        """
        for selectors, attrs in (
            (iframes, ("src", "data-src")),
            (videos, ("src", "data-src")),
        ):
            reference = self._first_attr(soup, selectors, attrs)
            if reference:
                return self._absolute(reference)

        for script in soup.find_all("script"):
            text = script.string or script.get_text() or ""
            if not text.strip():
                continue
            url = extract_video_url(text)
            if url:
                return self._absolute(url)

        reference = self._first_attr(soup, downloads, ("href",))
        if reference:
            return self._absolute(reference)
        return None

    @staticmethod
    def _first_attr(
        soup: BeautifulSoup, selectors: Sequence[str], attrs: Sequence[str]
    ) -> str:
        # Each selector in turn: an empty iframe must not hide a later <video>.
        for selector in selectors:
            for tag in select_items(soup, selector):
                for attr in attrs:
                    value = extract_attr(tag, "", attr)
                    if value and not value.startswith(("about:", "javascript:")):
                        return value
        return ""

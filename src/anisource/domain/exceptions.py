"""Domain exceptions for fetching, provider input and resolution."""

from __future__ import annotations


class FetchError(Exception):
    """Base class for failures of the retrying HTTP fetcher.

    ``code`` is a short machine tag (``"ECONNRESET"``, ``"HTTP_404"``, ...)
    that is logged but never shown to API clients.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        status: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.code = code


class NetworkError(FetchError):
    """Connection reset/refused, DNS failure or timeout."""

    retryable = True


class BlockingError(FetchError):
    """Rate limiting (403/429) or an edge-protection block page."""

    retryable = True


class HttpStatusError(FetchError):
    """Any other non-success status; only 5xx are retried."""

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        status: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, url=url, status=status, code=code)
        self.retryable = status is not None and status >= 500


class PreconditionError(ValueError):
    """Caller passed input that cannot be used (empty title, missing link)."""


class ResolutionError(Exception):
    """Base class for errors surfaced to API clients with a readable message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AnimeNotFoundError(ResolutionError):
    """No provider returned a usable search result."""


class EpisodesNotFoundError(ResolutionError):
    """The provider that found the title returned no episodes."""


class StreamNotFoundError(ResolutionError):
    """No player reference could be found for an episode."""

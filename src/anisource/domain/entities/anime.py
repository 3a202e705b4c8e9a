"""Domain entities for anime lookup, episode listing and stream resolution.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

T = TypeVar("T")

EpisodeNumber = Union[int, float]

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9]")


def make_episode_id(title: str, number: EpisodeNumber) -> str:
    """Build the stable episode id ``<sanitised-title>-ep-<number>``."""
    return f"{_UNSAFE_ID_CHARS.sub('-', title)}-ep-{format_episode_number(number)}"


def format_episode_number(number: EpisodeNumber) -> str:
    """Render ``12.0`` as ``12`` and keep ``8.5`` as ``8.5``."""
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


@dataclass(frozen=True)
class SearchResult:
    """First matching title on a provider."""

    title: str
    link: str  # absolute URL of the provider's anime page
    provider_internal_id: str | None = None


@dataclass(frozen=True)
class EpisodeDescriptor:
    """A single episode on a provider's page."""

    id: str
    number: EpisodeNumber
    title: str
    link: str  # absolute URL of the episode page


@dataclass(frozen=True)
class ResolvedStream:
    """Result of turning a player reference into something playable.

    ``quality`` is a free-form tag: ``"unknown"`` for HLS, ``"direct"`` for
    plain media files and ``"iframe/..."`` when only the embed page could
    be returned.
    """

    url: str
    quality: str | None = None
    is_m3u8: bool = False
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_embed(self) -> bool:
        return bool(self.quality and self.quality.startswith("iframe"))


@dataclass(frozen=True)
class AnimeLookup:
    """Outcome of searching every provider for a title.

    ``source`` is ``None`` (and ``error`` set) when no provider found it.
    """

    source: str | None
    data: SearchResult | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.source is not None and self.data is not None


@dataclass(frozen=True)
class EpisodeReference:
    """What stream resolution needs to know about an episode."""

    source: str
    link: str
    number: EpisodeNumber | None = None
    id: str | None = None
    provider_internal_id: str | None = None


@dataclass(frozen=True)
class EpisodeListing:
    """Episodes of one anime together with the provider that listed them."""

    source: str
    title: str
    episodes: list[EpisodeDescriptor]


@dataclass(frozen=True)
class WatchSource:
    """A single playable (or embeddable) source for an episode."""

    url: str
    is_m3u8: bool | None = None
    quality: str | None = None


@dataclass(frozen=True)
class WatchResponse:
    """Sources for one episode as served to the player."""

    sources: list[WatchSource]
    headers: dict[str, str] = field(default_factory=dict)
    download: str | None = None


# ---------------------------------------------------------------------------
# Provider fetch outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    reason: str = ""


@dataclass(frozen=True)
class Blocked:
    """Challenge page or edge block; never retried past the fetcher."""

    reason: str = ""


@dataclass(frozen=True)
class TransientError:
    reason: str = ""
    status: int | None = None
    code: str | None = None


ProviderResult = Union[Success[T], NotFound, Blocked, TransientError]

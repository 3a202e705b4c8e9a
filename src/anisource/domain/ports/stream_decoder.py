"""Port for embed-page decoders used by the stream link resolver."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from anisource.domain.entities.anime import ResolvedStream


@runtime_checkable
class StreamDecoderPort(Protocol):
    """Turns a known embed player URL into a playable stream.

    Implementations handle player-specific extraction (packed JS,
    token endpoints, JSON source APIs).
    """

    @property
    def name(self) -> str:
        """Decoder name (e.g. ``"filemoon"``)."""
        ...

    @property
    def signatures(self) -> tuple[str, ...]:
        """Lower-case URL substrings that select this decoder."""
        ...

    async def decode(self, url: str) -> ResolvedStream | None:
        """Return the stream, or ``None`` when extraction failed."""
        ...

"""Tests for StreamLinkResolver dispatch."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from anisource.domain.entities import ResolvedStream
from anisource.domain.exceptions import NetworkError
from anisource.infrastructure.stream_resolvers import (
    StreamLinkResolver,
    classify_direct_media,
)


def _decoder(name: str, signatures: tuple[str, ...], result: object = None) -> AsyncMock:
    decoder = AsyncMock()
    decoder.name = name
    decoder.signatures = signatures
    if isinstance(result, BaseException):
        decoder.decode = AsyncMock(side_effect=result)
    else:
        decoder.decode = AsyncMock(return_value=result)
    return decoder


class TestClassifyDirectMedia:
    def test_m3u8_with_query(self) -> None:
        stream = classify_direct_media("https://cdn.example/master.m3u8?token=abc")
        assert stream is not None
        assert stream.is_m3u8 is True
        assert stream.quality == "unknown"

    @pytest.mark.parametrize("ext", ["mp4", "mkv", "webm"])
    def test_direct_files(self, ext: str) -> None:
        stream = classify_direct_media(f"https://cdn.example/ep1.{ext}")
        assert stream is not None
        assert stream.is_m3u8 is False
        assert stream.quality == "direct"

    def test_embed_page(self) -> None:
        assert classify_direct_media("https://filemoon.example/e/abc") is None


class TestResolvePlayerUrl:
    @pytest.mark.asyncio()
    async def test_m3u8_short_circuits(self) -> None:
        decoder = _decoder("vidplay", ("cdn.example",))
        resolver = StreamLinkResolver([decoder])
        url = "https://cdn.example/hls/master.m3u8"

        result = await resolver.resolve_player_url(url)

        assert result is not None
        assert result.url == url
        assert result.is_m3u8 is True
        decoder.decode.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_dispatches_on_signature(self) -> None:
        stream = ResolvedStream(url="https://cdn/x.m3u8", is_m3u8=True, quality="unknown")
        vidplay = _decoder("vidplay", ("vidplay", "mcloud.to"))
        filemoon = _decoder("filemoon", ("filemoon",), stream)
        resolver = StreamLinkResolver([vidplay, filemoon])

        result = await resolver.resolve_player_url("https://FileMoon.sx/e/abc")

        assert result is stream
        filemoon.decode.assert_awaited_once_with("https://FileMoon.sx/e/abc")
        vidplay.decode.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_unknown_host_is_unresolved_iframe(self) -> None:
        resolver = StreamLinkResolver([_decoder("vidplay", ("vidplay",))])

        result = await resolver.resolve_player_url("https://unknown.example/embed/1")

        assert result == ResolvedStream(
            url="https://unknown.example/embed/1", quality="iframe/unresolved"
        )

    @pytest.mark.asyncio()
    async def test_decoder_fetch_error_yields_none(self) -> None:
        decoder = _decoder("kwik", ("kwik.",), NetworkError("reset", code="ECONNRESET"))
        resolver = StreamLinkResolver([decoder])
        assert await resolver.resolve_player_url("https://kwik.cx/e/abc") is None

    @pytest.mark.asyncio()
    async def test_decoder_crash_yields_none(self) -> None:
        decoder = _decoder("kwik", ("kwik.",), RuntimeError("boom"))
        resolver = StreamLinkResolver([decoder])
        assert await resolver.resolve_player_url("https://kwik.cx/e/abc") is None

    @pytest.mark.asyncio()
    async def test_empty_reference(self) -> None:
        assert await StreamLinkResolver().resolve_player_url("") is None

    def test_supported_decoders(self) -> None:
        resolver = StreamLinkResolver(
            [_decoder("vidplay", ("vidplay",)), _decoder("kwik", ("kwik.",))]
        )
        assert resolver.supported_decoders == ["vidplay", "kwik"]

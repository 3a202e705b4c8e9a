"""Tests for the AniWave provider adapter (AJAX episode list)."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from anisource.domain.entities import EpisodeReference, SearchResult
from anisource.infrastructure.http.retry_fetch import RetryingFetcher
from anisource.infrastructure.providers.aniwave import (
    AniWaveProvider,
    extract_watch_id,
)

_BASE = "https://aniwave.to"
_SHOW = f"{_BASE}/watch/attack-on-titan.kww"

_SEARCH_HTML = """
<html><body>
<div class="film_list-wrap">
  <div class="flw-item">
    <div class="film-name"><a href="/watch/attack-on-titan.kww">Attack on Titan</a></div>
  </div>
</div>
</body></html>
"""


def _ajax_body(numbers: list[int]) -> str:
    items = "".join(
        f'<li><a href="/watch/attack-on-titan.kww/ep-{n}" data-num="{n}">'
        f'<span class="num">{n}</span><span class="d-title">Part {n}</span></a></li>'
        for n in numbers
    )
    return json.dumps({"status": 200, "result": f'<ul class="episodes">{items}</ul>'})


_STATIC_HTML = """
<html><body>
<div class="episodes-list">
  <a href="/watch/attack-on-titan.kww/ep-2">2</a>
  <a href="/watch/attack-on-titan.kww/ep-1">1</a>
</div>
</body></html>
"""


@pytest.fixture()
def provider(fetcher: RetryingFetcher) -> AniWaveProvider:
    return AniWaveProvider(fetcher)


class TestExtractWatchId:
    def test_extracts_suffix(self) -> None:
        assert extract_watch_id(_SHOW) == "kww"

    def test_episode_path(self) -> None:
        assert extract_watch_id(f"{_SHOW}/ep-3") == "kww"

    def test_no_id(self) -> None:
        assert extract_watch_id(f"{_BASE}/home") is None


class TestSearch:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_carries_internal_id(self, provider: AniWaveProvider) -> None:
        respx.get(url__startswith=f"{_BASE}/filter").mock(
            return_value=httpx.Response(200, text=_SEARCH_HTML)
        )

        result = await provider.search("Attack on Titan")

        assert result == SearchResult(
            title="Attack on Titan", link=_SHOW, provider_internal_id="kww"
        )

    @pytest.mark.asyncio()
    @respx.mock
    async def test_zero_matches_returns_none(self, provider: AniWaveProvider) -> None:
        route = respx.get(url__startswith=f"{_BASE}/filter").mock(
            return_value=httpx.Response(
                200, text='<div class="film_list-wrap"></div>'
            )
        )

        assert await provider.search("Nothing") is None
        assert route.call_count == 1


class TestListEpisodes:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_ajax_duplicates_collapsed(
        self, provider: AniWaveProvider, search_result: SearchResult
    ) -> None:
        route = respx.get(f"{_BASE}/ajax/episode/list/kww").mock(
            return_value=httpx.Response(200, text=_ajax_body([1, 2, 2, 3]))
        )

        episodes = await provider.list_episodes(search_result)

        assert episodes is not None
        assert [e.number for e in episodes] == [1, 2, 3]
        assert episodes[1].link == f"{_SHOW}/ep-2"
        headers = route.calls.last.request.headers
        assert headers["X-Requested-With"] == "XMLHttpRequest"
        assert headers["Referer"] == _SHOW

    @pytest.mark.asyncio()
    @respx.mock
    async def test_falls_back_to_static_page(
        self, provider: AniWaveProvider, search_result: SearchResult
    ) -> None:
        respx.get(f"{_BASE}/ajax/episode/list/kww").mock(
            return_value=httpx.Response(500)
        )
        respx.get(_SHOW).mock(return_value=httpx.Response(200, text=_STATIC_HTML))

        episodes = await provider.list_episodes(search_result)

        assert episodes is not None
        assert [e.number for e in episodes] == [1, 2]
        assert episodes[0].title == "Episode 1"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_invalid_ajax_json_falls_back(
        self, provider: AniWaveProvider, search_result: SearchResult
    ) -> None:
        respx.get(f"{_BASE}/ajax/episode/list/kww").mock(
            return_value=httpx.Response(200, text="not json")
        )
        respx.get(_SHOW).mock(return_value=httpx.Response(200, text=_STATIC_HTML))

        episodes = await provider.list_episodes(search_result)

        assert episodes is not None
        assert len(episodes) == 2

    @pytest.mark.asyncio()
    @respx.mock
    async def test_ajax_redirect_loop_falls_back(
        self, provider: AniWaveProvider, search_result: SearchResult
    ) -> None:
        ajax = f"{_BASE}/ajax/episode/list/kww"
        respx.get(ajax).mock(
            return_value=httpx.Response(302, headers={"Location": ajax})
        )
        respx.get(_SHOW).mock(return_value=httpx.Response(200, text=_STATIC_HTML))

        episodes = await provider.list_episodes(search_result)

        assert episodes is not None
        assert [e.number for e in episodes] == [1, 2]

    @pytest.mark.asyncio()
    @respx.mock
    async def test_ajax_bad_encoding_falls_back(
        self, provider: AniWaveProvider, search_result: SearchResult
    ) -> None:
        respx.get(f"{_BASE}/ajax/episode/list/kww").mock(
            return_value=httpx.Response(
                200, content=b"not gzip", headers={"Content-Encoding": "gzip"}
            )
        )
        respx.get(_SHOW).mock(return_value=httpx.Response(200, text=_STATIC_HTML))

        episodes = await provider.list_episodes(search_result)

        assert episodes is not None
        assert [e.number for e in episodes] == [1, 2]

    @pytest.mark.asyncio()
    @respx.mock
    async def test_everything_fails(
        self, provider: AniWaveProvider, search_result: SearchResult
    ) -> None:
        respx.get(f"{_BASE}/ajax/episode/list/kww").mock(
            return_value=httpx.Response(404)
        )
        respx.get(_SHOW).mock(return_value=httpx.Response(404))

        assert await provider.list_episodes(search_result) is None


class TestResolveStream:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_player_iframe(
        self, provider: AniWaveProvider, episode_reference: EpisodeReference
    ) -> None:
        respx.get(episode_reference.link).mock(
            return_value=httpx.Response(
                200,
                text='<div id="player"><iframe src="https://mcloud.to/e/xyz?t=1"></iframe></div>',
            )
        )

        assert (
            await provider.resolve_stream(episode_reference)
            == "https://mcloud.to/e/xyz?t=1"
        )

    @pytest.mark.asyncio()
    @respx.mock
    async def test_blocked_returns_none(
        self, provider: AniWaveProvider, episode_reference: EpisodeReference
    ) -> None:
        respx.get(episode_reference.link).mock(return_value=httpx.Response(429))
        assert await provider.resolve_stream(episode_reference) is None

"""Tests for the AnimeDao provider adapter."""

from __future__ import annotations

import httpx
import pytest
import respx

from anisource.domain.entities import EpisodeReference, SearchResult
from anisource.infrastructure.http.retry_fetch import RetryingFetcher
from anisource.infrastructure.providers.animedao import AnimeDaoProvider

_BASE = "https://animedao.to"

_SEARCH_HTML = """
<div class="container">
  <div class="anime_card">
    <h5><a href="/anime/one-piece/">One Piece</a></h5>
  </div>
</div>
"""

_EPISODES_HTML = """
<div id="episodes">
  <div class="episode-list-item"><a href="/view/one-piece-episode-2">Episode 2</a></div>
  <div class="episode-list-item"><a href="/view/one-piece-episode-1">EP 1</a></div>
  <div class="episode-list-item"><a href="/view/one-piece-episode-3">Watch now</a></div>
  <div class="episode-list-item"><a href="/view/one-piece-episode-2-mirror">Episode 2</a></div>
</div>
"""

_DOWNLOAD_ONLY_HTML = """
<div class="anime_download"><a href="https://dl.example/one-piece-1.mp4">Download</a></div>
"""


@pytest.fixture()
def provider(fetcher: RetryingFetcher) -> AnimeDaoProvider:
    return AnimeDaoProvider(fetcher)


class TestAnimeDao:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_search(self, provider: AnimeDaoProvider) -> None:
        route = respx.get(url__startswith=f"{_BASE}/search/").mock(
            return_value=httpx.Response(200, text=_SEARCH_HTML)
        )

        result = await provider.search("One Piece")

        assert result == SearchResult(title="One Piece", link=f"{_BASE}/anime/one-piece/")
        assert route.calls.last.request.url.params["q"] == "One Piece"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_search_no_cards(self, provider: AnimeDaoProvider) -> None:
        respx.get(url__startswith=f"{_BASE}/search/").mock(
            return_value=httpx.Response(200, text="<div>No results</div>")
        )
        assert await provider.search("Nothing") is None

    @pytest.mark.asyncio()
    @respx.mock
    async def test_episode_numbers_from_text_and_url(
        self, provider: AnimeDaoProvider
    ) -> None:
        respx.get(f"{_BASE}/anime/one-piece/").mock(
            return_value=httpx.Response(200, text=_EPISODES_HTML)
        )

        episodes = await provider.list_episodes(
            SearchResult(title="One Piece", link=f"{_BASE}/anime/one-piece/")
        )

        assert episodes is not None
        assert [e.number for e in episodes] == [1, 2, 3]
        assert episodes[1].link == f"{_BASE}/view/one-piece-episode-2"
        assert episodes[2].link == f"{_BASE}/view/one-piece-episode-3"
        assert episodes[0].id == "One-Piece-ep-1"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_download_link_as_last_resort(self, provider: AnimeDaoProvider) -> None:
        link = f"{_BASE}/view/one-piece-episode-1"
        respx.get(link).mock(return_value=httpx.Response(200, text=_DOWNLOAD_ONLY_HTML))

        reference = await provider.resolve_stream(
            EpisodeReference(source="AnimeDao", link=link, number=1)
        )

        assert reference == "https://dl.example/one-piece-1.mp4"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_iframe_beats_download(self, provider: AnimeDaoProvider) -> None:
        link = f"{_BASE}/view/one-piece-episode-1"
        html = (
            '<div id="videocontent"><iframe src="https://www.mp4upload.com/embed-a1b2.html">'
            "</iframe></div>" + _DOWNLOAD_ONLY_HTML
        )
        respx.get(link).mock(return_value=httpx.Response(200, text=html))

        reference = await provider.resolve_stream(
            EpisodeReference(source="AnimeDao", link=link, number=1)
        )

        assert reference == "https://www.mp4upload.com/embed-a1b2.html"

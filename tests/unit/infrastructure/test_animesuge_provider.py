"""Tests for the AnimeSuge provider adapter."""

from __future__ import annotations

import httpx
import pytest
import respx

from anisource.domain.entities import EpisodeReference, SearchResult
from anisource.domain.exceptions import PreconditionError
from anisource.infrastructure.http.retry_fetch import RetryingFetcher
from anisource.infrastructure.providers.animesuge import AnimeSugeProvider

_BASE = "https://animesugetv.to"

_SEARCH_HTML = """
<html><body>
<div class="film_list-wrap">
  <div class="flw-item">
    <div class="film-detail">
      <h3 class="film-name"><a href="/anime/naruto-3fr" title="Naruto">Naruto</a></h3>
    </div>
  </div>
  <div class="flw-item">
    <h3 class="film-name"><a href="/anime/naruto-shippuden-x9">Naruto Shippuden</a></h3>
  </div>
</div>
</body></html>
"""

_EMPTY_SEARCH_HTML = '<html><body><div class="film_list-wrap"></div></body></html>'

_EPISODES_HTML = """
<html><body>
<div class="episodes-list">
  <a class="nav-link" href="/watch/naruto-3fr-ep-2" data-number="2" title="Episode 2">2</a>
  <a class="nav-link" href="/watch/naruto-3fr-ep-1" data-number="1" title="Enter: Naruto">1</a>
  <a class="nav-link" href="/watch/naruto-3fr-ep-1" data-number="1">1</a>
  <a class="nav-link" href="/watch/naruto-3fr-ep-3"><span class="ep-num">3</span></a>
  <a class="nav-link" href="#">soon</a>
</div>
</body></html>
"""

_PLAYER_HTML = """
<html><body>
<div class="play-video"><iframe src="//vidplay.example/e/abc123?autostart=true"></iframe></div>
</body></html>
"""

_SCRIPT_PLAYER_HTML = """
<html><body>
<div class="play-video"></div>
<script>jwplayer("p").setup({sources:[{file:"https://cdn.example/naruto/1/master.m3u8"}]});</script>
</body></html>
"""

_CHALLENGE_HTML = "<html><head><title>Just a moment...</title></head><body></body></html>"


@pytest.fixture()
def provider(fetcher: RetryingFetcher) -> AnimeSugeProvider:
    return AnimeSugeProvider(fetcher)


def _episode(link: str) -> EpisodeReference:
    return EpisodeReference(source="AnimeSuge", link=link, number=1)


class TestSearch:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_first_card_wins(self, provider: AnimeSugeProvider) -> None:
        route = respx.get(url__startswith=f"{_BASE}/filter").mock(
            return_value=httpx.Response(200, text=_SEARCH_HTML)
        )

        result = await provider.search("Naruto")

        assert result == SearchResult(title="Naruto", link=f"{_BASE}/anime/naruto-3fr")
        assert route.calls.last.request.url.params["keyword"] == "Naruto"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_zero_matches_returns_none(self, provider: AnimeSugeProvider) -> None:
        respx.get(url__startswith=f"{_BASE}/filter").mock(
            return_value=httpx.Response(200, text=_EMPTY_SEARCH_HTML)
        )
        assert await provider.search("Unknown Title") is None

    @pytest.mark.asyncio()
    @respx.mock
    async def test_challenge_page_returns_none(self, provider: AnimeSugeProvider) -> None:
        respx.get(url__startswith=f"{_BASE}/filter").mock(
            return_value=httpx.Response(200, text=_CHALLENGE_HTML)
        )
        assert await provider.search("Naruto") is None

    @pytest.mark.asyncio()
    @respx.mock
    async def test_http_error_returns_none(self, provider: AnimeSugeProvider) -> None:
        respx.get(url__startswith=f"{_BASE}/filter").mock(
            return_value=httpx.Response(404)
        )
        assert await provider.search("Naruto") is None

    @pytest.mark.asyncio()
    async def test_empty_title_raises(self, provider: AnimeSugeProvider) -> None:
        with pytest.raises(PreconditionError):
            await provider.search("   ")

    @pytest.mark.asyncio()
    @respx.mock
    async def test_mirror_domain(self, fetcher: RetryingFetcher) -> None:
        provider = AnimeSugeProvider(fetcher, base_url="https://animesuge.mirror/")
        respx.get(url__startswith="https://animesuge.mirror/filter").mock(
            return_value=httpx.Response(200, text=_SEARCH_HTML)
        )
        result = await provider.search("Naruto")
        assert result is not None
        assert result.link == "https://animesuge.mirror/anime/naruto-3fr"


class TestListEpisodes:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_sorted_unique_episodes(self, provider: AnimeSugeProvider) -> None:
        respx.get(f"{_BASE}/anime/naruto-3fr").mock(
            return_value=httpx.Response(200, text=_EPISODES_HTML)
        )

        episodes = await provider.list_episodes(
            SearchResult(title="Naruto", link=f"{_BASE}/anime/naruto-3fr")
        )

        assert episodes is not None
        assert [e.number for e in episodes] == [1, 2, 3]
        assert episodes[0].title == "Enter: Naruto"
        assert episodes[0].id == "Naruto-ep-1"
        assert episodes[0].link == f"{_BASE}/watch/naruto-3fr-ep-1"
        assert episodes[2].title == "Episode 3"

    @pytest.mark.asyncio()
    async def test_missing_link_raises(self, provider: AnimeSugeProvider) -> None:
        with pytest.raises(PreconditionError):
            await provider.list_episodes(SearchResult(title="Naruto", link=""))

    @pytest.mark.asyncio()
    @respx.mock
    async def test_network_failure_returns_none(
        self, provider: AnimeSugeProvider
    ) -> None:
        respx.get(f"{_BASE}/anime/naruto-3fr").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        episodes = await provider.list_episodes(
            SearchResult(title="Naruto", link=f"{_BASE}/anime/naruto-3fr")
        )
        assert episodes is None


class TestResolveStream:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_iframe_reference(self, provider: AnimeSugeProvider) -> None:
        link = f"{_BASE}/watch/naruto-3fr-ep-1"
        respx.get(link).mock(return_value=httpx.Response(200, text=_PLAYER_HTML))

        reference = await provider.resolve_stream(_episode(link))

        assert reference == "https://vidplay.example/e/abc123?autostart=true"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_inline_player_config(self, provider: AnimeSugeProvider) -> None:
        link = f"{_BASE}/watch/naruto-3fr-ep-1"
        respx.get(link).mock(return_value=httpx.Response(200, text=_SCRIPT_PLAYER_HTML))

        reference = await provider.resolve_stream(_episode(link))

        assert reference == "https://cdn.example/naruto/1/master.m3u8"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_frame_placeholder_data_src(self, provider: AnimeSugeProvider) -> None:
        link = f"{_BASE}/watch/naruto-3fr-ep-1"
        respx.get(link).mock(
            return_value=httpx.Response(
                200,
                text='<div id="frame" data-src="https://mp4upload.com/embed-n1.html"></div>',
            )
        )

        reference = await provider.resolve_stream(_episode(link))

        assert reference == "https://mp4upload.com/embed-n1.html"

    @pytest.mark.asyncio()
    @respx.mock
    async def test_no_player_returns_none(self, provider: AnimeSugeProvider) -> None:
        link = f"{_BASE}/watch/naruto-3fr-ep-1"
        respx.get(link).mock(return_value=httpx.Response(200, text="<html></html>"))
        assert await provider.resolve_stream(_episode(link)) is None

    @pytest.mark.asyncio()
    async def test_missing_link_raises(self, provider: AnimeSugeProvider) -> None:
        with pytest.raises(PreconditionError):
            await provider.resolve_stream(_episode(""))

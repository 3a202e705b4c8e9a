"""Tests for episode-number strategies and list normalisation."""

from __future__ import annotations

import pytest

from anisource.domain.entities import EpisodeDescriptor
from anisource.infrastructure.common.episodes import (
    EpisodeMarkup,
    episodes_from_tags,
    extract_number,
    from_attribute,
    from_attribute_pattern,
    from_href,
    from_text,
    normalize_episodes,
    parse_episode_number,
)
from anisource.infrastructure.common.html_selectors import parse_html

_BASE = "https://anime.example"


def _anchor(html: str):
    return parse_html(html).select_one("a")


def _episode(number: float, link: str = "") -> EpisodeDescriptor:
    return EpisodeDescriptor(
        id=f"X-ep-{number}",
        number=number,
        title=f"Episode {number}",
        link=link or f"{_BASE}/ep-{number}",
    )


class TestParseEpisodeNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("12", 12), (" 3 ", 3), ("8.5", 8.5), ("4.0", 4)],
    )
    def test_valid(self, raw: str, expected: float) -> None:
        assert parse_episode_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "12a", "-1"])
    def test_invalid(self, raw: str | None) -> None:
        assert parse_episode_number(raw) is None


class TestStrategies:
    def test_from_attribute_first_present_wins(self) -> None:
        tag = _anchor('<a href="/x" data-episode-num="7">x</a>')
        assert from_attribute("data-number", "data-episode-num")(tag) == 7

    def test_from_attribute_pattern(self) -> None:
        tag = _anchor('<a href="/x" title="Episode 4: The Night">x</a>')
        assert from_attribute_pattern("title", r"Episode\s*(\d+)")(tag) == 4

    def test_from_text_with_selector(self) -> None:
        tag = _anchor('<a href="/x"><span class="ep-num">EP 9</span></a>')
        assert from_text(r"(\d+)", selector=".ep-num")(tag) == 9

    def test_from_text_missing_selector(self) -> None:
        tag = _anchor('<a href="/x">9</a>')
        assert from_text(r"(\d+)", selector=".ep-num")(tag) is None

    def test_from_text_alternation_groups(self) -> None:
        strategy = from_text(r"Episode\s*(\d+)|EP\s*(\d+)|(\d+)$")
        assert strategy(_anchor('<a href="/x">EP 5</a>')) == 5
        assert strategy(_anchor('<a href="/x">Naruto 6</a>')) == 6

    def test_from_href(self) -> None:
        tag = _anchor('<a href="/naruto-episode-11">watch</a>')
        assert from_href(r"-episode-(\d+)")(tag) == 11

    def test_extract_number_uses_first_hit(self) -> None:
        tag = _anchor('<a href="/show-ep-3" data-number="2">x</a>')
        strategies = [from_attribute("data-number"), from_href(r"-ep-(\d+)")]
        assert extract_number(tag, strategies) == 2

    def test_extract_number_none(self) -> None:
        tag = _anchor('<a href="/x">x</a>')
        assert extract_number(tag, [from_attribute("data-number")]) is None


class TestEpisodesFromTags:
    _MARKUP = EpisodeMarkup(strategies=(from_attribute("data-number"),))

    def test_builds_descriptors(self) -> None:
        soup = parse_html(
            '<a href="/ep/2" data-number="2" title="The Second">2</a>'
            '<a href="/ep/1" data-number="1">1</a>'
        )
        episodes = episodes_from_tags(
            soup.select("a"),
            anime_title="Attack on Titan",
            base_url=_BASE,
            markup=self._MARKUP,
        )

        assert [e.number for e in episodes] == [1, 2]
        assert episodes[0].id == "Attack-on-Titan-ep-1"
        assert episodes[0].title == "Episode 1"
        assert episodes[0].link == f"{_BASE}/ep/1"
        assert episodes[1].title == "The Second"

    def test_skips_placeholder_links_and_missing_numbers(self) -> None:
        soup = parse_html(
            '<a href="#" data-number="1">1</a>'
            '<a href="javascript:void(0)" data-number="2">2</a>'
            '<a data-number="3">3</a>'
            '<a href="/ep/x">?</a>'
            '<a href="/ep/4" data-number="4">4</a>'
        )
        episodes = episodes_from_tags(
            soup.select("a"), anime_title="X", base_url=_BASE, markup=self._MARKUP
        )
        assert [e.number for e in episodes] == [4]

    def test_empty_input(self) -> None:
        assert (
            episodes_from_tags([], anime_title="X", base_url=_BASE, markup=self._MARKUP)
            == []
        )


class TestNormalizeEpisodes:
    def test_sorted_and_unique_first_wins(self) -> None:
        first_two = _episode(2, link=f"{_BASE}/first")
        episodes = [_episode(3), first_two, _episode(1), _episode(2, link=f"{_BASE}/dup")]

        result = normalize_episodes(episodes)

        assert [e.number for e in result] == [1, 2, 3]
        assert result[1].link == f"{_BASE}/first"

    def test_fractional_episodes_sort_between(self) -> None:
        result = normalize_episodes([_episode(9), _episode(8.5), _episode(8)])
        assert [e.number for e in result] == [8, 8.5, 9]

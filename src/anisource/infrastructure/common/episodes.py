"""Episode-number extraction and list normalisation shared by adapters.

Each adapter describes *where* its markup keeps the number (data attribute,
tooltip, visible text, URL) as an ordered list of strategies; this module
runs them and turns the matches into sorted, de-duplicated descriptors.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from bs4 import Tag

from anisource.domain.entities.anime import (
    EpisodeDescriptor,
    EpisodeNumber,
    make_episode_id,
)

from .html_selectors import absolutize

_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")

NumberStrategy = Callable[[Tag], "EpisodeNumber | None"]


def parse_episode_number(raw: str | None) -> EpisodeNumber | None:
    """``"12"`` -> 12, ``"8.5"`` -> 8.5, anything else -> ``None``."""
    if raw is None:
        return None
    raw = raw.strip()
    if not _NUMBER_RE.match(raw):
        return None
    if "." in raw:
        value = float(raw)
        return int(value) if value.is_integer() else value
    return int(raw)


def from_attribute(*attrs: str) -> NumberStrategy:
    """Read the number from the first present data attribute."""

    def strategy(tag: Tag) -> EpisodeNumber | None:
        for attr in attrs:
            number = parse_episode_number(_attr(tag, attr))
            if number is not None:
                return number
        return None

    return strategy


def from_attribute_pattern(attr: str, pattern: str) -> NumberStrategy:
    """Search *attr* (e.g. ``title``) with a regex whose group 1 is the number."""
    regex = re.compile(pattern, re.I)

    def strategy(tag: Tag) -> EpisodeNumber | None:
        return _first_group(regex, _attr(tag, attr))

    return strategy


def from_text(pattern: str, selector: str = "") -> NumberStrategy:
    """Search the visible text (of *selector* inside the tag, if given)."""
    regex = re.compile(pattern, re.I)

    def strategy(tag: Tag) -> EpisodeNumber | None:
        target = tag.select_one(selector) if selector else tag
        if target is None:
            return None
        return _first_group(regex, target.get_text(" ", strip=True))

    return strategy


def from_href(pattern: str) -> NumberStrategy:
    """Search the link target."""
    regex = re.compile(pattern, re.I)

    def strategy(tag: Tag) -> EpisodeNumber | None:
        return _first_group(regex, _attr(tag, "href"))

    return strategy


def extract_number(
    tag: Tag, strategies: Sequence[NumberStrategy]
) -> EpisodeNumber | None:
    """Run *strategies* in order; first non-``None`` wins."""
    for strategy in strategies:
        number = strategy(tag)
        if number is not None:
            return number
    return None


@dataclass(frozen=True)
class EpisodeMarkup:
    """Where an adapter finds the pieces of one episode element."""

    strategies: Sequence[NumberStrategy]
    title_attr: str = "title"
    title_selector: str = ""


def episodes_from_tags(
    tags: Iterable[Tag],
    *,
    anime_title: str,
    base_url: str,
    markup: EpisodeMarkup,
) -> list[EpisodeDescriptor]:
    """Build descriptors from anchor tags, skipping ones without href or number."""
    episodes: list[EpisodeDescriptor] = []
    for tag in tags:
        href = _attr(tag, "href")
        if not href or href.startswith(("#", "javascript:")):
            continue
        number = extract_number(tag, markup.strategies)
        if number is None:
            continue
        title = _episode_title(tag, markup) or f"Episode {number}"
        episodes.append(
            EpisodeDescriptor(
                id=make_episode_id(anime_title, number),
                number=number,
                title=title,
                link=absolutize(base_url, href),
            )
        )
    return normalize_episodes(episodes)


def normalize_episodes(
    episodes: Iterable[EpisodeDescriptor],
) -> list[EpisodeDescriptor]:
    """Drop repeated numbers (first occurrence wins) and sort ascending."""
    seen: dict[EpisodeNumber, EpisodeDescriptor] = {}
    for episode in episodes:
        seen.setdefault(episode.number, episode)
    return sorted(seen.values(), key=lambda e: e.number)


def _episode_title(tag: Tag, markup: EpisodeMarkup) -> str:
    title = _attr(tag, markup.title_attr) if markup.title_attr else ""
    if title:
        return title
    if markup.title_selector:
        match = tag.select_one(markup.title_selector)
        if match is not None:
            return match.get_text(strip=True)
    return ""


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return str(value).strip() if value else ""


def _first_group(regex: re.Pattern[str], text: str) -> EpisodeNumber | None:
    if not text:
        return None
    match = regex.search(text)
    if not match:
        return None
    # Alternation patterns leave unused groups empty.
    for group in match.groups() or (match.group(0),):
        number = parse_episode_number(group)
        if number is not None:
            return number
    return None

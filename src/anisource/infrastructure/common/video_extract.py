"""Video URL extraction from player pages and inline scripts.

Handles JWPlayer-style ``sources:[{file:...}]`` configs, bare ``file:``
entries and Dean Edwards packed JavaScript.  Used by the provider
adapters (inline player config on episode pages) and by the embed
decoders (Filemoon, MP4Upload, Kwik).
"""

from __future__ import annotations

import re

_PACKED_START_RE = re.compile(
    r"eval\s*\(\s*function\s*\(\s*p\s*,\s*a\s*,\s*c\s*,\s*k\s*,\s*e\s*,\s*(?:d|r)\s*\)"
)

_PACKED_ARGS_RE = re.compile(
    r"}\s*\(\s*'(.*?)',\s*(\d+),\s*(\d+),\s*'([^']*)'\s*\.split\('\|'\)",
    re.DOTALL,
)

_SOURCES_FILE_RE = re.compile(
    r"""sources\s*:\s*\[[^\]]*?\{[^}]*?file\s*:\s*["']([^"']+)["']""",
    re.DOTALL,
)
_FILE_M3U8_RE = re.compile(r"""file\s*:\s*["']([^"']+\.m3u8[^"']*)["']""")
_SOURCE_SRC_RE = re.compile(
    r"""(?:source|src)\s*[:=]\s*["'](https?://[^"']+\.(?:m3u8|mp4)[^"']*)["']"""
)
_QUOTED_MEDIA_RE = re.compile(r"""["'](https?://[^"'\s]+\.(?:m3u8|mp4)[^"'\s]*)["']""")

_NOISE = ("thumbnail", "track", "sprite", ".vtt", ".jpg", ".png")

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _to_base(num: int, radix: int) -> str:
    """Encode *num* the way the packer names its tokens (up to base 62)."""
    if num < radix:
        return _DIGITS[num]
    return _to_base(num // radix, radix) + _DIGITS[num % radix]


def unpack_p_a_c_k(packed: str) -> str | None:
    """Unpack Dean Edwards packed JavaScript.

    Format: eval(function(p,a,c,k,e,d){...}('payload',base,count,'dict'.split('|')))

    Every word token in the payload is a base-N index into the dictionary.
    """
    match = _PACKED_ARGS_RE.search(packed)
    if not match:
        return None

    payload = match.group(1)
    base = int(match.group(2))
    count = int(match.group(3))
    keywords = match.group(4).split("|")
    if base < 2 or base > len(_DIGITS):
        return None

    if len(keywords) < count:
        keywords.extend([""] * (count - len(keywords)))

    lookup = {_to_base(i, base): word for i, word in enumerate(keywords) if word}

    def _replace_word(m: re.Match[str]) -> str:
        word = m.group(0)
        return lookup.get(word, word)

    return re.sub(r"\b\w+\b", _replace_word, payload)


def unpack_all(html: str) -> list[str]:
    """Unpack every packed block found in *html*."""
    unpacked: list[str] = []
    for m in _PACKED_START_RE.finditer(html):
        chunk = html[m.start() : m.start() + 65536]
        result = unpack_p_a_c_k(chunk)
        if result:
            unpacked.append(result)
    return unpacked


def _clean(url: str) -> str | None:
    lowered = url.lower()
    if any(noise in lowered for noise in _NOISE):
        return None
    return url.replace("\\/", "/")


def extract_from_script(js: str) -> str | None:
    """Extract a stream URL from a player config script.

    Patterns, most specific first:
    1. ``sources:[{file:"..."}]``
    2. ``file:"...m3u8"``
    3. ``source:"https://...m3u8|mp4"`` / ``src=...``
    """
    normalized = js.replace("\\'", "'").replace('\\"', '"')
    for regex in (_SOURCES_FILE_RE, _FILE_M3U8_RE, _SOURCE_SRC_RE):
        for m in regex.finditer(normalized):
            url = _clean(m.group(1))
            if url:
                return url
    return None


def extract_video_url(html: str) -> str | None:
    """Extract a playable video URL from a page.

    Tries, in order:
    1. Packed JavaScript blocks (JWPlayer config inside)
    2. Player config directly in the page
    3. Any quoted absolute HLS/MP4 URL

    Returns the first URL found, or ``None``.
    """
    for unpacked in unpack_all(html):
        url = extract_from_script(unpacked)
        if url:
            return url

    url = extract_from_script(html)
    if url:
        return url

    for m in _QUOTED_MEDIA_RE.finditer(html):
        url = _clean(m.group(1))
        if url:
            return url
    return None

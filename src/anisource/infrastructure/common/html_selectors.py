"""CSS-selector-based HTML extraction with fallback chains.

Every extraction function accepts a primary selector and optional
*fallback_selectors*; the first selector that yields a match wins.
Provider pages change layout often, so adapters list the current markup
first and older variants after it.
"""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Returns results from the **first** selector that matches at least
    one element.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def select_first(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> Tag | None:
    items = select_items(root, selector, *fallback_selectors)
    return items[0] if items else None


def extract_text(
    element: Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract stripped text from the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(strip=True)
        return text if text else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            text = match.get_text(strip=True)
            if text:
                return text
    return default


def extract_attr(
    element: Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract an HTML attribute from the first matching child element.

    With ``selector=""`` the attribute is read from *element* itself.
    """
    if selector == "":
        val = element.get(attr)
        return str(val).strip() if val else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            val = match.get(attr)
            if val:
                return str(val).strip()
    return default


def absolutize(base_url: str, href: str) -> str:
    """Make *href* absolute.

    ``//host/x`` gets ``https:``; ``/x`` and ``x`` are joined onto
    *base_url*; absolute URLs pass through.
    """
    href = href.strip()
    if href.startswith("//"):
        return f"https:{href}"
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url.rstrip("/") + "/", href)

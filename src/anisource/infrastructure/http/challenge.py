"""Shared anti-bot challenge / edge-block detection.

Centralises the markers so that every provider adapter and the
retrying fetcher reuse the same heuristic.  Detection is best-effort:
an unknown challenge page passes through and fails later at parse time.
"""

from __future__ import annotations

_CHALLENGE_MARKERS: tuple[str, ...] = (
    # Cloudflare JS challenge / WAF / Turnstile
    "just a moment...",
    "challenge-platform",
    "cf-browser-verification",
    "cf-error-details",
    "attention required! | cloudflare",
    "cf-turnstile",
    # CAPTCHA widgets
    "g-recaptcha",
    "www.google.com/recaptcha",
    "h-captcha",
    "hcaptcha.com/1/api.js",
    # DDoS-Guard / generic interstitials
    "ddos-guard",
    "checking your browser before accessing",
    "verify you are human",
    "please enable javascript and cookies to continue",
)

_EDGE_VENDORS: tuple[str, ...] = ("cloudflare", "ddos-guard", "sucuri", "akamai")

_EDGE_BLOCK_STATUSES = frozenset({403, 503})


def detect_challenge(body: str | None) -> str | None:
    """Return *body* unchanged, or ``None`` if it is a challenge page.

    Case-insensitive substring scan; the returned object is the same
    string that was passed in.
    """
    if body is None:
        return None
    lowered = body.lower()
    if any(marker in lowered for marker in _CHALLENGE_MARKERS):
        return None
    return body


def is_edge_block(status_code: int, server: str | None) -> bool:
    """Return *True* when an edge-protection vendor answered 403/503.

    The ``Server`` header names the vendor (``cloudflare``, ``ddos-guard``).
    """
    if status_code not in _EDGE_BLOCK_STATUSES or not server:
        return False
    server = server.lower()
    return any(vendor in server for vendor in _EDGE_VENDORS)

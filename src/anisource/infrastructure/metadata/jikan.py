"""Jikan (unofficial MyAnimeList API) client: MAL id -> title."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)

_DEFAULT_BASE_URL = "https://api.jikan.moe/v4"


class JikanClient:
    """Async Jikan client using a shared httpx client.

    Implements ``AnimeMetadataPort`` from domain.ports.metadata.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str = _DEFAULT_BASE_URL,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str) -> dict[str, Any] | None:
        """GET request with error handling. Returns parsed JSON or None."""
        url = f"{self._base_url}{path}"
        try:
            resp = await self._http.get(url)
            if resp.status_code == 404:
                log.debug("jikan_resource_not_found", path=path)
                return None
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            log.warning(
                "jikan_http_error", path=path, status=exc.response.status_code
            )
            return None
        except httpx.HTTPError:
            log.warning("jikan_network_error", path=path, exc_info=True)
            return None
        except ValueError:
            log.warning("jikan_invalid_json", path=path)
            return None

    async def get_title(self, mal_id: int) -> str | None:
        """Return the default title for *mal_id* (English title as fallback)."""
        data = await self._get(f"/anime/{mal_id}")
        if not data:
            return None
        anime = data.get("data") or {}
        title = anime.get("title") or anime.get("title_english")
        if not title:
            log.info("jikan_title_missing", mal_id=mal_id)
            return None
        return title

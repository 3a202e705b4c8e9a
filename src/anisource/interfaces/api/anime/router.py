"""Anime API endpoints (search, episodes, watch)."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from anisource.domain.entities.anime import (
    EpisodeDescriptor,
    EpisodeReference,
    SearchResult,
    WatchResponse,
)
from anisource.domain.exceptions import PreconditionError, ResolutionError
from anisource.infrastructure.common.episodes import parse_episode_number
from anisource.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/anime", tags=["anime"])


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _format_search_result(result: SearchResult) -> dict[str, Any]:
    return {
        "title": result.title,
        "link": result.link,
        "providerInternalId": result.provider_internal_id,
    }


def _format_episode(episode: EpisodeDescriptor) -> dict[str, Any]:
    return {
        "id": episode.id,
        "number": episode.number,
        "title": episode.title,
        "link": episode.link,
    }


def _format_watch(response: WatchResponse) -> dict[str, Any]:
    sources = []
    for source in response.sources:
        item: dict[str, Any] = {"url": source.url}
        if source.is_m3u8 is not None:
            item["isM3U8"] = source.is_m3u8
        if source.quality is not None:
            item["quality"] = source.quality
        sources.append(item)
    body: dict[str, Any] = {"sources": sources, "headers": response.headers}
    if response.download:
        body["download"] = response.download
    return body


@router.get("/search")
async def search_anime(
    request: Request,
    title: str = Query(default=""),
) -> JSONResponse:
    """Find *title* on the first provider that has it."""
    state = cast(AppState, request.app.state)
    if not title.strip():
        return _message(400, "Missing anime title.")

    lookup = await state.orchestrator.fetch_anime(title)
    if not lookup.found:
        return _message(404, lookup.error or f'Could not find "{title}".')

    assert lookup.data is not None
    return JSONResponse(
        content={
            "source": lookup.source,
            "data": _format_search_result(lookup.data),
        }
    )


@router.get("/episodes/{mal_id}")
async def list_episodes(request: Request, mal_id: str) -> JSONResponse:
    """Episodes for a MyAnimeList id, from the first provider that has the title."""
    state = cast(AppState, request.app.state)
    if not mal_id.isdigit():
        return _message(400, "Invalid or missing Anime MAL ID.")

    try:
        listing = await state.episode_list_uc.execute(int(mal_id))
    except ResolutionError as exc:
        log.info("episodes_not_found", mal_id=mal_id, reason=exc.message)
        return _message(404, exc.message)

    return JSONResponse(
        content={
            "episodes": [_format_episode(e) for e in listing.episodes],
            "source": listing.source,
        }
    )


@router.get("/watch/{episode_id}")
async def watch_episode(
    request: Request,
    episode_id: str,
    source: str = Query(default=""),
    link: str = Query(default=""),
    number: str | None = Query(default=None),
    provider_id: str | None = Query(default=None, alias="providerInternalId"),
) -> JSONResponse:
    """Playable sources for one episode on the provider that listed it."""
    state = cast(AppState, request.app.state)
    if not source or not link:
        return _message(400, "Missing episode source or link.")

    episode = EpisodeReference(
        source=source,
        link=link,
        number=parse_episode_number(number),
        id=episode_id,
        provider_internal_id=provider_id,
    )
    try:
        response = await state.watch_episode_uc.execute(episode)
    except PreconditionError:
        return _message(400, "Missing episode source or link.")
    except ResolutionError as exc:
        log.info("watch_not_found", episode_id=episode_id, reason=exc.message)
        return _message(404, exc.message)

    return JSONResponse(content=_format_watch(response))

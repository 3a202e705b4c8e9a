from .anime import (
    AnimeLookup,
    Blocked,
    EpisodeDescriptor,
    EpisodeListing,
    EpisodeNumber,
    EpisodeReference,
    NotFound,
    ProviderResult,
    ResolvedStream,
    SearchResult,
    Success,
    TransientError,
    WatchResponse,
    WatchSource,
    format_episode_number,
    make_episode_id,
)

__all__ = [
    "AnimeLookup",
    "Blocked",
    "EpisodeDescriptor",
    "EpisodeListing",
    "EpisodeNumber",
    "EpisodeReference",
    "NotFound",
    "ProviderResult",
    "ResolvedStream",
    "SearchResult",
    "Success",
    "TransientError",
    "WatchResponse",
    "WatchSource",
    "format_episode_number",
    "make_episode_id",
]

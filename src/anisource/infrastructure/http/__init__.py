from .challenge import detect_challenge, is_edge_block
from .retry_fetch import RetryingFetcher, RetryPolicy, fetch_with_retry

__all__ = [
    "RetryPolicy",
    "RetryingFetcher",
    "detect_challenge",
    "fetch_with_retry",
    "is_edge_block",
]

from .jikan import JikanClient

__all__ = ["JikanClient"]

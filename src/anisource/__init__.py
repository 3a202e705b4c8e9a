"""Multi-provider anime search, episode listing and stream resolution."""

__version__ = "0.1.0"

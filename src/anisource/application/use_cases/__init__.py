from .episode_list import EpisodeListUseCase
from .orchestrator import ProviderOrchestrator
from .watch_episode import WatchEpisodeUseCase

__all__ = ["EpisodeListUseCase", "ProviderOrchestrator", "WatchEpisodeUseCase"]

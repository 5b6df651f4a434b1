"""
Favcast - turns saved social-media posts into a weekly audio podcast.
"""

from .config.settings import Settings, get_settings
from .models.content import PodcastEpisode
from .pipeline import EpisodePipeline, run_pipeline

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "get_settings",
    "PodcastEpisode",
    "EpisodePipeline",
    "run_pipeline",
]

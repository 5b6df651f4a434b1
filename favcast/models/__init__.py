"""Data models for the pipeline."""

from .content import (
    BookmarkItem,
    ScrapedContent,
    ClassificationResult,
    SubCategoryResult,
    ClassifiedItem,
    SummarizedItem,
    ContentBucket,
    NarratedSection,
    AudioArtifact,
    PodcastEpisode,
)

__all__ = [
    "BookmarkItem",
    "ScrapedContent",
    "ClassificationResult",
    "SubCategoryResult",
    "ClassifiedItem",
    "SummarizedItem",
    "ContentBucket",
    "NarratedSection",
    "AudioArtifact",
    "PodcastEpisode",
]

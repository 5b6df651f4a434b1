"""
Content models for the favorites pipeline.
A bookmark moves through classification and summarization, is grouped into
buckets, narrated, and ends up in an audio episode.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import ContentCategory


class BookmarkItem(BaseModel):
    """
    A bookmarked post as delivered by the spreadsheet feed.
    Immutable once fetched.
    """

    model_config = ConfigDict(frozen=True)

    external_id: str = Field(..., description="Stable id, the post link")
    posted_at: datetime
    author: str
    source_link: str
    enrichment_link: Optional[str] = None
    raw_text: str = ""

    # Row id once persisted
    db_id: Optional[int] = None


class ScrapedContent(BaseModel):
    """Enrichment text from a linked page, or an error marker."""

    url: str
    title: str = ""
    content: str = ""
    site_name: str = ""
    publish_date: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content)


class ClassificationResult(BaseModel):
    category: ContentCategory
    confidence: float = 0.5
    reasoning: Optional[str] = None


class SubCategoryResult(BaseModel):
    sub_category: str
    confidence: float = 0.5
    reasoning: Optional[str] = None


class ClassifiedItem(BaseModel):
    """A bookmark with its primary category and (possibly missing) subcategory."""

    model_config = ConfigDict(frozen=True)

    item: BookmarkItem
    category: ContentCategory
    sub_category: Optional[str] = None


class SummarizedItem(BaseModel):
    """A classified bookmark plus its summary text."""

    model_config = ConfigDict(frozen=True)

    item: BookmarkItem
    category: ContentCategory
    sub_category: Optional[str] = None
    summary: str
    target_summary_length: int = 300

    @property
    def external_id(self) -> str:
        return self.item.external_id

    @property
    def author(self) -> str:
        return self.item.author


class ContentBucket(BaseModel):
    """Items sharing a category and subcategory, in processing order."""

    category: ContentCategory
    sub_category: str
    label: str
    items: list[SummarizedItem] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)


class NarratedSection(BaseModel):
    bucket_label: str
    item_count: int = 0
    narration_text: str


class AudioArtifact(BaseModel):
    path: str
    duration_seconds: float = 0.0


class PodcastEpisode(BaseModel):
    """Terminal record of one pipeline run."""

    title: str
    final_artifact_path: str
    duration_seconds: float = 0.0
    included_item_ids: list[str] = Field(default_factory=list)
    script_path: Optional[str] = None
    generated_at: datetime = Field(default_factory=datetime.now)

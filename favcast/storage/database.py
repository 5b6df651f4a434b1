"""
Persistence for processed bookmarks, episodes and log entries.
Uses SQLite with SQLAlchemy by default; any SQLAlchemy URL works.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    JSON,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker

from ..models.content import BookmarkItem, PodcastEpisode

logger = logging.getLogger(__name__)

Base = declarative_base()


class ProcessedBookmark(Base):
    """A bookmark seen by the pipeline."""
    __tablename__ = 'processed_bookmarks'
    __table_args__ = (
        Index('idx_bookmark_posted_at', 'posted_at'),
        Index('idx_bookmark_processed', 'processed'),
    )

    id = Column(Integer, primary_key=True)
    source_link = Column(String(500), unique=True, nullable=False)
    posted_at = Column(DateTime, nullable=False)
    author = Column(String(200), nullable=False)
    enrichment_link = Column(String(1000))
    raw_text = Column(Text, default='')

    category = Column(String(20), default='')
    sub_category = Column(String(50))
    processed = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PodcastEpisodeRecord(Base):
    """Generated podcast episode."""
    __tablename__ = 'podcast_episodes'

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    file_location = Column(String(500), nullable=False)
    duration_seconds = Column(Float, default=0.0)
    item_ids = Column(JSON, default=list)  # external ids, processing order
    generated_at = Column(DateTime, default=datetime.utcnow)


class SystemLogEntry(Base):
    __tablename__ = 'system_logs'
    __table_args__ = (
        Index('idx_log_level', 'level'),
    )

    id = Column(Integer, primary_key=True)
    level = Column(String(10), nullable=False)
    message = Column(Text, nullable=False)
    details = Column(Text)
    timestamp = Column(DateTime, default=datetime.utcnow)


class Repository:
    """
    Explicitly constructed persistence handle.

    Each operation runs in its own short session so a failure in one call
    never leaves the handle unusable for the next.
    """

    def __init__(self, database_url: str = "sqlite:///favcast.db"):
        self.database_url = database_url
        self.engine = create_engine(database_url)
        Base.metadata.create_all(self.engine)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @contextmanager
    def session(self):
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def save_item(
        self,
        item: BookmarkItem,
        category: str = "",
        sub_category: Optional[str] = None,
    ) -> int:
        """Upsert a bookmark keyed by its source link. Returns the row id."""
        with self.session() as session:
            row = session.query(ProcessedBookmark).filter_by(source_link=item.source_link).first()
            if row is None:
                row = ProcessedBookmark(
                    source_link=item.source_link,
                    posted_at=item.posted_at,
                    author=item.author,
                    enrichment_link=item.enrichment_link,
                    raw_text=item.raw_text,
                    category=category,
                    sub_category=sub_category,
                )
                session.add(row)
            else:
                row.raw_text = item.raw_text
                if category:
                    row.category = category
                if sub_category:
                    row.sub_category = sub_category
            session.flush()
            return row.id

    def mark_processed(self, item_id: int) -> None:
        with self.session() as session:
            row = session.get(ProcessedBookmark, item_id)
            if row is not None:
                row.processed = True

    def get_unprocessed_items(self, start: datetime, end: datetime) -> list[BookmarkItem]:
        with self.session() as session:
            rows = (
                session.query(ProcessedBookmark)
                .filter(
                    ProcessedBookmark.posted_at >= start,
                    ProcessedBookmark.posted_at <= end,
                    ProcessedBookmark.processed.is_(False),
                )
                .order_by(ProcessedBookmark.posted_at.asc())
                .all()
            )
            return [
                BookmarkItem(
                    external_id=row.source_link,
                    posted_at=row.posted_at,
                    author=row.author,
                    source_link=row.source_link,
                    enrichment_link=row.enrichment_link,
                    raw_text=row.raw_text or "",
                    db_id=row.id,
                )
                for row in rows
            ]

    def save_episode(self, episode: PodcastEpisode) -> int:
        with self.session() as session:
            row = PodcastEpisodeRecord(
                title=episode.title,
                file_location=episode.final_artifact_path,
                duration_seconds=episode.duration_seconds,
                item_ids=list(episode.included_item_ids),
                generated_at=episode.generated_at,
            )
            session.add(row)
            session.flush()
            return row.id

    def list_episodes(self) -> list[PodcastEpisodeRecord]:
        with self.session() as session:
            return session.query(PodcastEpisodeRecord).order_by(PodcastEpisodeRecord.id).all()

    def save_log_entry(self, level: str, message: str, details: Optional[dict] = None) -> None:
        with self.session() as session:
            session.add(SystemLogEntry(
                level=level,
                message=message,
                details=json.dumps(details, default=str) if details else None,
            ))

    def list_log_entries(self) -> list[SystemLogEntry]:
        with self.session() as session:
            return session.query(SystemLogEntry).order_by(SystemLogEntry.id).all()

    def close(self) -> None:
        self.engine.dispose()


@contextmanager
def open_repository(database_url: str) -> Iterator[Repository]:
    """Open a persistence handle for one run; always disposed on exit."""
    repository = Repository(database_url)
    logger.info(f"Opened database {database_url}")
    try:
        yield repository
    finally:
        repository.close()
        logger.info("Closed database")

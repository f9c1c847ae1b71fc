"""SQLite persistence for extracted content and sync history."""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from sqlalchemy import Float, ForeignKey, Integer, Text, create_engine, delete, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from ..models import ContentEntry, EnrichedRecord, ExtractedYouTubeContent, SyncResult

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class ContentRow(Base):
    __tablename__ = "content"

    url: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[str]] = mapped_column(Text)
    consumed_at: Mapped[Optional[str]] = mapped_column(Text)
    last_updated: Mapped[Optional[str]] = mapped_column(Text)
    scrape_at: Mapped[Optional[str]] = mapped_column(Text)


class MetadataRow(Base):
    __tablename__ = "metadata"

    url: Mapped[str] = mapped_column(Text, ForeignKey("content.url"), primary_key=True)
    og_title: Mapped[Optional[str]] = mapped_column(Text)
    og_description: Mapped[Optional[str]] = mapped_column(Text)
    og_image: Mapped[Optional[str]] = mapped_column(Text)
    keywords: Mapped[Optional[str]] = mapped_column(Text)


class WebRow(Base):
    __tablename__ = "web"

    url: Mapped[str] = mapped_column(Text, ForeignKey("content.url"), primary_key=True)
    full_content: Mapped[Optional[str]] = mapped_column(Text)


class YouTubeRow(Base):
    __tablename__ = "youtube"

    url: Mapped[str] = mapped_column(Text, ForeignKey("content.url"), primary_key=True)
    video_id: Mapped[Optional[str]] = mapped_column(Text)
    channel_name: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    duration: Mapped[Optional[str]] = mapped_column(Text)


class TranscriptRow(Base):
    __tablename__ = "transcript"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, ForeignKey("youtube.url"))
    text: Mapped[Optional[str]] = mapped_column(Text)
    duration: Mapped[Optional[float]] = mapped_column(Float)
    offset: Mapped[Optional[float]] = mapped_column(Float)
    lang: Mapped[Optional[str]] = mapped_column(Text)


class SyncHistoryRow(Base):
    __tablename__ = "sync_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sync_time: Mapped[str] = mapped_column(Text)
    entries_added: Mapped[int] = mapped_column(Integer, default=0)
    entries_updated: Mapped[int] = mapped_column(Integer, default=0)
    entries_scraped: Mapped[int] = mapped_column(Integer, default=0)
    scrape_errors: Mapped[int] = mapped_column(Integer, default=0)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContentStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self.engine = create_engine(f"sqlite:///{db_path}")

    def init_db(self):
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(self.engine)
        logger.info(f"Database initialized at {self.db_path}")

    def close(self):
        self.engine.dispose()

    def get_content(self, url: str) -> Optional[ContentRow]:
        with Session(self.engine) as session:
            return session.get(ContentRow, url)

    def get_transcript(self, url: str) -> List[TranscriptRow]:
        with Session(self.engine) as session:
            stmt = select(TranscriptRow).where(TranscriptRow.url == url).order_by(TranscriptRow.id)
            return list(session.scalars(stmt))

    def sync_history(self) -> List[SyncHistoryRow]:
        with Session(self.engine) as session:
            return list(session.scalars(select(SyncHistoryRow).order_by(SyncHistoryRow.id)))

    def upsert_entry(self, entry: ContentEntry) -> str:
        """Records an API entry. Returns "created", "updated" (title changed), "pending"
        (known but never scraped successfully) or "unchanged"."""
        now = _now()
        with Session(self.engine) as session, session.begin():
            row = session.get(ContentRow, entry.url)
            if row is None:
                session.add(ContentRow(
                    url=entry.url,
                    title=entry.title,
                    created_at=now,
                    consumed_at=entry.created_time or None,
                    last_updated=now,
                ))
                return "created"

            if row.title != entry.title:
                row.title = entry.title
                row.last_updated = now
                return "updated"

            if row.scrape_at is None:
                return "pending"
            return "unchanged"

    def save_record(self, record: EnrichedRecord):
        """Upserts an extracted record and its type-specific rows."""
        now = _now()
        meta = record.meta_data

        with Session(self.engine) as session, session.begin():
            row = session.get(ContentRow, record.url)
            if row is None:
                row = ContentRow(url=record.url, created_at=now)
                session.add(row)
            # The API title drives change detection; the scraped one only fills a gap
            if not row.title:
                row.title = record.title
            if record.consumed_at:
                row.consumed_at = record.consumed_at
            row.last_updated = now
            row.scrape_at = now

            session.merge(MetadataRow(
                url=record.url,
                og_title=meta.og_title,
                og_description=meta.og_description,
                og_image=meta.og_image,
                keywords=meta.keywords,
            ))

            if isinstance(record, ExtractedYouTubeContent):
                session.merge(YouTubeRow(
                    url=record.url,
                    video_id=record.video_id,
                    channel_name=record.channel_name,
                    description=record.description,
                    duration=meta.duration,
                ))
                session.execute(delete(TranscriptRow).where(TranscriptRow.url == record.url))
                session.add_all(
                    TranscriptRow(
                        url=record.url,
                        text=segment.text,
                        duration=segment.duration,
                        offset=segment.offset,
                        lang=segment.lang,
                    )
                    for segment in record.transcript or []
                )
            else:
                session.merge(WebRow(url=record.url, full_content=record.full_content))

    def record_sync(self, result: SyncResult):
        with Session(self.engine) as session, session.begin():
            session.add(SyncHistoryRow(
                sync_time=_now(),
                entries_added=result.added,
                entries_updated=result.updated,
                entries_scraped=result.scraped,
                scrape_errors=result.errors,
            ))

"""SQLAlchemy ORM models for episodes and their transcripts."""

from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import JSON


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Episode(Base):
    """Episode model.

    Stores show-level metadata for a published episode. The import pipeline
    only reads episodes; they are created by whatever syncs the show catalog.
    """

    __tablename__ = "episodes"

    # Upstream episode id (not generated locally)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    show_id: Mapped[Optional[int]] = mapped_column(Integer)

    # Metadata from the show catalog
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer)

    # Source audio
    download_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    transcript: Mapped[Optional["TranscriptRecord"]] = relationship(
        "TranscriptRecord", back_populates="episode", uselist=False
    )

    __table_args__ = (
        Index("ix_episodes_show_id", "show_id"),
        Index("ix_episodes_published_at", "published_at"),
    )

    def __repr__(self) -> str:
        return f"<Episode(id={self.id}, title={self.title!r})>"


class TranscriptRecord(Base):
    """Stored transcript of one episode.

    Written once by the import pipeline's insert stage; there is no update path.
    """

    __tablename__ = "transcripts"

    episode_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("episodes.id", ondelete="CASCADE"),
        primary_key=True,
        autoincrement=False,
    )
    language: Mapped[Optional[str]] = mapped_column(String(32))
    segments: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)
    # Full text, kept for search indexing
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    episode: Mapped["Episode"] = relationship("Episode", back_populates="transcript")

    def __repr__(self) -> str:
        return (
            f"<TranscriptRecord(episode_id={self.episode_id}, "
            f"segments={len(self.segments or [])})>"
        )

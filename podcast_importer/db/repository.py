"""Repository pattern implementation for episode and transcript persistence.

Provides an abstract interface and SQLAlchemy implementation for database operations.
Supports both SQLite (local development) and PostgreSQL (production).
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from .models import Base, Episode, TranscriptRecord

if TYPE_CHECKING:
    from ..transcription.models import EpisodeTranscript

logger = logging.getLogger(__name__)


class EpisodeRepositoryInterface(ABC):
    """Abstract interface for episode and transcript persistence.

    The import pipeline depends only on `get_episode` and `insert_transcripts`.
    """

    @abstractmethod
    def get_episode(self, episode_id: int) -> Optional[Episode]:
        """
        Retrieve an episode by its id.

        Returns:
            The Episode instance if found, `None` otherwise.
        """
        pass

    @abstractmethod
    def insert_transcripts(self, records: Iterable["EpisodeTranscript"]) -> int:
        """
        Persist new episode transcripts.

        Parameters:
            records: Converted transcripts to store. Each episode may be stored once.

        Returns:
            int: Number of transcripts written.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the datastore rejects the write.
        """
        pass

    @abstractmethod
    def create_episode(
        self, episode_id: int, title: str, download_url: str, **kwargs
    ) -> Episode:
        """
        Create and persist an episode.

        Parameters:
            episode_id (int): Upstream episode id.
            title (str): Episode title.
            download_url (str): URL of the episode audio.
            **kwargs: Optional fields such as `show_id`, `description`, `published_at`.

        Returns:
            Episode: The persisted Episode instance.
        """
        pass

    @abstractmethod
    def get_transcript(self, episode_id: int) -> Optional[TranscriptRecord]:
        """
        Retrieve the stored transcript of an episode.

        Returns:
            The TranscriptRecord if one was stored, `None` otherwise.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release database connections and engine resources."""
        pass


class SQLAlchemyEpisodeRepository(EpisodeRepositoryInterface):
    """SQLAlchemy-based implementation of the episode repository.

    Supports SQLite for local development and PostgreSQL for production.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
        create_tables: bool = False,
    ):
        """
        Initialize the repository and configure its SQLAlchemy engine and session factory.

        Parameters:
            database_url (str): SQLAlchemy-compatible database URL.
            pool_size (int): Connection pool size for non-SQLite databases.
            max_overflow (int): Maximum overflow connections for non-SQLite databases.
            echo (bool): If true, enable SQLAlchemy SQL statement logging.
            create_tables (bool): If true, create missing tables on startup.
        """
        self.database_url = database_url

        # SQLite doesn't support connection pooling; stage workers call in from threads
        if database_url.startswith("sqlite"):
            self.engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
            )
        else:
            self.engine = create_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                echo=echo,
            )

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        if create_tables:
            self.create_tables()

        logger.debug("Database engine ready")

    def _get_session(self) -> Session:
        return self.SessionLocal()

    def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)

    def get_episode(self, episode_id: int) -> Optional[Episode]:
        with self._get_session() as session:
            return session.get(Episode, episode_id)

    def create_episode(
        self, episode_id: int, title: str, download_url: str, **kwargs
    ) -> Episode:
        with self._get_session() as session:
            episode = Episode(
                id=episode_id, title=title, download_url=download_url, **kwargs
            )
            session.add(episode)
            session.commit()
            session.refresh(episode)
            logger.info(f"Created episode: {title} ({episode.id})")
            return episode

    def insert_transcripts(self, records: Iterable["EpisodeTranscript"]) -> int:
        rows = [
            TranscriptRecord(
                episode_id=record.episode_id,
                language=record.transcript.language,
                segments=record.transcript.to_dict()["segments"],
                text=record.transcript.text,
            )
            for record in records
        ]
        if not rows:
            return 0

        with self._get_session() as session:
            try:
                session.add_all(rows)
                session.commit()
            except Exception:
                session.rollback()
                raise

        logger.debug(f"Inserted {len(rows)} transcripts")
        return len(rows)

    def get_transcript(self, episode_id: int) -> Optional[TranscriptRecord]:
        with self._get_session() as session:
            stmt = select(TranscriptRecord).where(
                TranscriptRecord.episode_id == episode_id
            )
            return session.scalar(stmt)

    def list_transcribed_episode_ids(self) -> List[int]:
        """
        List ids of every episode that already has a stored transcript.

        Returns:
            List[int]: Episode ids in ascending order.
        """
        with self._get_session() as session:
            stmt = select(TranscriptRecord.episode_id).order_by(
                TranscriptRecord.episode_id
            )
            return list(session.scalars(stmt).all())

    def close(self) -> None:
        """
        Dispose the SQLAlchemy engine and release database connections and resources.
        """
        self.engine.dispose()
        logger.info("Database connection closed")

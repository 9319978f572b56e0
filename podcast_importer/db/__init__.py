"""Database module for episode and transcript persistence.

Provides:
- SQLAlchemy ORM models (Episode, TranscriptRecord)
- Repository interface and implementation
- Factory functions for creating repositories
"""

from .factory import create_repository, create_repository_from_config
from .models import Base, Episode, TranscriptRecord
from .repository import EpisodeRepositoryInterface, SQLAlchemyEpisodeRepository

__all__ = [
    "Base",
    "Episode",
    "TranscriptRecord",
    "EpisodeRepositoryInterface",
    "SQLAlchemyEpisodeRepository",
    "create_repository",
    "create_repository_from_config",
]

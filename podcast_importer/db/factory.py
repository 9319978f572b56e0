"""Repository construction from a URL or from application Config."""

import logging
import os
from typing import Optional

from .repository import EpisodeRepositoryInterface, SQLAlchemyEpisodeRepository

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./podcast_importer.db"


def _redact(database_url: str) -> str:
    # Keep the scheme and host part, drop user:password
    scheme, sep, rest = database_url.partition("://")
    if "@" not in rest:
        return database_url
    return f"{scheme}{sep}...@{rest.rsplit('@', 1)[-1]}"


def create_repository(
    database_url: Optional[str] = None,
    pool_size: int = 5,
    max_overflow: int = 10,
    echo: bool = False,
    create_tables: bool = False,
) -> EpisodeRepositoryInterface:
    """
    Build a SQLAlchemy repository.

    Without `database_url`, `DATABASE_URL` from the environment is used, then a
    local SQLite file. Pool settings are ignored for SQLite.
    """
    url = database_url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    logger.info(f"Using database {_redact(url)}")
    return SQLAlchemyEpisodeRepository(
        database_url=url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        echo=echo,
        create_tables=create_tables,
    )


def create_repository_from_config(config, create_tables: bool = False) -> EpisodeRepositoryInterface:
    """Build a repository from the DATABASE_URL and DB_* settings of a Config."""
    return create_repository(
        database_url=config.DATABASE_URL,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        echo=config.DB_ECHO,
        create_tables=create_tables,
    )

"""Insert worker: stores converted transcripts."""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from ...db.repository import EpisodeRepositoryInterface
from ...errors import DatastoreError
from ...transcription.models import EpisodeTranscript
from .base import StageWorker

logger = logging.getLogger(__name__)


class InsertWorker(StageWorker):
    """Worker that writes one EpisodeTranscript to the datastore."""

    def __init__(self, repository: EpisodeRepositoryInterface):
        self.repository = repository

    @property
    def name(self) -> str:
        return "Insert"

    async def process(self, record: EpisodeTranscript) -> int:
        """Insert one transcript.

        Returns:
            The episode id.

        Raises:
            DatastoreError: If the datastore rejects the write (including a
                transcript that was already stored).
        """
        logger.info(f"Inserting episode {record.episode_id} into database")
        try:
            await asyncio.to_thread(self.repository.insert_transcripts, [record])
        except SQLAlchemyError as e:
            raise DatastoreError(
                f"Failed to insert transcript: {e}", record.episode_id
            ) from e

        self.log_done(record.episode_id)
        return record.episode_id

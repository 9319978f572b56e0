"""Download worker for episode audio.

Looks the episode up, streams its audio to disk and normalizes it to the wav
format the transcription service needs.
"""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from ...audio.normalizer import AudioNormalizer
from ...config import Config
from ...db.repository import EpisodeRepositoryInterface
from ...errors import DatastoreError, EpisodeNotFoundError
from ...podcast.downloader import EpisodeDownloader
from ..config import ImportJobConfig
from .base import StageWorker

logger = logging.getLogger(__name__)


class DownloadWorker(StageWorker):
    """Worker that downloads and normalizes one episode's audio.

    The normalized audio ends up at `config.build_wav_path(episode_id)`; the
    raw download is deleted once normalization succeeds.
    """

    def __init__(
        self,
        config: Config,
        job_config: ImportJobConfig,
        repository: EpisodeRepositoryInterface,
        downloader: EpisodeDownloader,
        normalizer: AudioNormalizer,
    ):
        """Initialize the download worker.

        Args:
            config: Application configuration.
            job_config: Import job configuration.
            repository: Database repository for episode lookups.
            downloader: Downloader sharing the run's HTTP session.
            normalizer: ffmpeg wrapper.
        """
        self.config = config
        self.job_config = job_config
        self.repository = repository
        self.downloader = downloader
        self.normalizer = normalizer

    @property
    def name(self) -> str:
        """Human-readable name for this worker."""
        return "Download"

    async def process(self, episode_id: int) -> int:
        """Download and normalize one episode.

        Returns:
            The episode id.

        Raises:
            EpisodeNotFoundError: If the episode is not in the datastore.
            DatastoreError: If the lookup itself fails.
            NetworkError: If the audio cannot be fetched.
            FileSystemError: If the audio cannot be written.
            NormalizerError: If ffmpeg fails; the raw download is kept.
        """
        try:
            episode = await asyncio.to_thread(self.repository.get_episode, episode_id)
        except SQLAlchemyError as e:
            raise DatastoreError(f"Episode lookup failed: {e}", episode_id) from e

        if episode is None:
            raise EpisodeNotFoundError("Episode not found", episode_id)

        if self.job_config.reuse_transcript_cache and self.config.transcript_cache_exists(
            episode_id
        ):
            logger.info(
                f"Transcript cache exists for episode {episode_id}, skipping download"
            )
            return episode_id

        result = await self.downloader.download(episode)

        wav_path = self.config.build_wav_path(episode_id)
        logger.debug(f"wav output: {wav_path}")
        await self.normalizer.normalize(result.local_path, wav_path, episode_id)

        self.log_done(episode_id)
        return episode_id

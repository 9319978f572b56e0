"""Batch import job manager.

Runs a cohort of episodes through Download, Transcribe, Convert and Insert.
Each stage has its own StageExecutor bounding its concurrency. Stages are
drained strictly in order: nothing is scheduled for stage N+1 until every
task of stage N has been awaited, and the first failure aborts the run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import List, Optional

import aiohttp

from ..audio.normalizer import AudioNormalizer
from ..config import Config
from ..db.repository import EpisodeRepositoryInterface
from ..podcast.downloader import EpisodeDownloader
from ..transcription.client import TranscriptionClient
from .config import ImportJobConfig
from .stage import StageExecutor
from .workers import ConvertWorker, DownloadWorker, InsertWorker, TranscriptionWorker

logger = logging.getLogger(__name__)


@dataclass
class ImportStats:
    """Statistics for an import run."""

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    stopped_at: Optional[datetime] = None

    # Per-stage completion counters
    downloaded: int = 0
    transcribed: int = 0
    converted: int = 0
    inserted: int = 0

    @property
    def duration_seconds(self) -> float:
        """Duration of the run in seconds."""
        end = self.stopped_at or datetime.now(UTC)
        return (end - self.started_at).total_seconds()


class JobManager:
    """Stage-by-stage orchestrator for a batch import.

    Example:
        config = Config()
        job_config = ImportJobConfig.from_env()
        repository = create_repository_from_config(config)

        async with aiohttp.ClientSession() as session:
            manager = JobManager(config, job_config, repository, session)
            for episode_id in (101, 102, 103):
                manager.enqueue_download(episode_id)
            stats = await manager.run_to_completion()
    """

    def __init__(
        self,
        config: Config,
        job_config: ImportJobConfig,
        repository: EpisodeRepositoryInterface,
        session: Optional[aiohttp.ClientSession],
        downloader: Optional[EpisodeDownloader] = None,
        normalizer: Optional[AudioNormalizer] = None,
        transcription_client: Optional[TranscriptionClient] = None,
    ):
        """Initialize the job manager.

        Args:
            config: Application configuration.
            job_config: Stage limits and retry settings.
            repository: Persistence gateway.
            session: HTTP session shared by downloads and transcription.
            downloader: Overrides the default EpisodeDownloader.
            normalizer: Overrides the default AudioNormalizer.
            transcription_client: Overrides the default TranscriptionClient.
        """
        self.config = config
        self.job_config = job_config
        self.repository = repository

        downloader = downloader or EpisodeDownloader(session=session, config=config)
        normalizer = normalizer or AudioNormalizer(ffmpeg_path=config.FFMPEG_PATH)
        transcription_client = transcription_client or TranscriptionClient(
            session=session,
            url=config.TRANSCRIBER_URL,
            retry_backoff_seconds=job_config.transcribe_retry_seconds,
        )

        self.download_worker = DownloadWorker(
            config=config,
            job_config=job_config,
            repository=repository,
            downloader=downloader,
            normalizer=normalizer,
        )
        self.transcription_worker = TranscriptionWorker(
            config=config,
            job_config=job_config,
            client=transcription_client,
        )
        self.convert_worker = ConvertWorker()
        self.insert_worker = InsertWorker(repository=repository)

        self.download_stage = StageExecutor("download", job_config.max_download_jobs)
        self.transcribe_stage = StageExecutor(
            "transcribe", job_config.max_transcribe_jobs
        )
        self.convert_stage = StageExecutor("convert", job_config.max_convert_jobs)
        self.insert_stage = StageExecutor("insert", job_config.max_insert_jobs)

        self._stats = ImportStats()

    @property
    def stages(self) -> List[StageExecutor]:
        return [
            self.download_stage,
            self.transcribe_stage,
            self.convert_stage,
            self.insert_stage,
        ]

    @property
    def stats(self) -> ImportStats:
        return self._stats

    def enqueue_download(self, episode_id: int) -> None:
        """Schedule the download of one episode without waiting for it.

        Raises:
            StageStateError: If the run has already started draining.
        """
        logger.debug(f"Enqueuing download job for episode {episode_id}")
        self.download_stage.submit(
            episode_id, self.download_worker.process, episode_id
        )

    def _enqueue_transcribe(self, episode_id: int) -> None:
        logger.debug(f"Enqueuing transcribe job for episode {episode_id}")
        self.transcribe_stage.submit(
            episode_id, self.transcription_worker.process, episode_id
        )

    def _enqueue_convert(self, episode_id: int, raw) -> None:
        logger.debug(f"Enqueuing convert job for episode {episode_id}")
        self.convert_stage.submit(
            episode_id, self.convert_worker.process, episode_id, raw
        )

    def _enqueue_insert(self, episode_id: int, record) -> None:
        logger.debug(f"Enqueuing insert job for episode {episode_id}")
        self.insert_stage.submit(episode_id, self.insert_worker.process, record)

    async def run_to_completion(self) -> ImportStats:
        """Drain every stage in order.

        Returns:
            ImportStats for the run.

        Raises:
            ImportJobError: The first failure encountered. The rest of the
                failing stage's operations are abandoned, not cancelled, and
                no later stage is started.
        """
        cohort = self.download_stage.pending
        logger.info(f"Starting import of {cohort} episodes")
        self._stats = ImportStats()

        # Next-stage tasks start as soon as they are submitted, so a stage's
        # outputs are only handed on once the whole stage has drained.
        try:
            downloaded = []
            async for episode_id, _ in self.download_stage.drain():
                self._stats.downloaded += 1
                downloaded.append(episode_id)
            for episode_id in downloaded:
                self._enqueue_transcribe(episode_id)

            transcribed = []
            async for episode_id, raw in self.transcribe_stage.drain():
                self._stats.transcribed += 1
                transcribed.append((episode_id, raw))
            for episode_id, raw in transcribed:
                self._enqueue_convert(episode_id, raw)

            converted = []
            async for episode_id, record in self.convert_stage.drain():
                self._stats.converted += 1
                converted.append((episode_id, record))
            for episode_id, record in converted:
                self._enqueue_insert(episode_id, record)

            async for episode_id, _ in self.insert_stage.drain():
                self._stats.inserted += 1

        except Exception as e:
            logger.error(f"Import aborted: {e}")
            raise
        finally:
            self._stats.stopped_at = datetime.now(UTC)

        logger.info(
            f"Import complete: {self._stats.inserted}/{cohort} episodes stored "
            f"in {self._stats.duration_seconds:.1f}s"
        )
        return self._stats

    async def wait_abandoned(self) -> None:
        """Settle operations abandoned by a failed run.

        Abandoned downloads are awaited so no ffmpeg process is killed while
        it writes a wav. Abandoned operations of later stages are cancelled:
        a transcription may be retrying against a service that is down and
        would never finish. Results and errors are discarded.
        """
        downloads = self.download_stage.abandoned
        if downloads:
            logger.info(
                f"Waiting for {len(downloads)} abandoned downloads to finish..."
            )
            await asyncio.gather(*downloads, return_exceptions=True)

        others = [
            task
            for stage in self.stages[1:]
            for task in stage.abandoned
            if not task.done()
        ]
        if others:
            logger.info(f"Cancelling {len(others)} abandoned operations")
            for task in others:
                task.cancel()
            await asyncio.gather(*others, return_exceptions=True)

"""Transcription worker for normalized episode audio.

Sends the episode's wav to the speech-to-text service and caches the raw
response under the transcript directory.
"""

import asyncio
import logging
import os
from pathlib import Path

from ...config import Config
from ...errors import FileSystemError
from ...transcription.client import TranscriptionClient, parse_raw_transcript
from ...transcription.models import RawTranscript
from ..config import ImportJobConfig
from .base import StageWorker

logger = logging.getLogger(__name__)


class TranscriptionWorker(StageWorker):
    """Worker that transcribes one episode.

    The cache file at `config.build_transcript_cache_path(episode_id)` is
    written after every successful transcription. With
    `reuse_transcript_cache` enabled an existing cache file is loaded instead
    of calling the service.
    """

    def __init__(
        self,
        config: Config,
        job_config: ImportJobConfig,
        client: TranscriptionClient,
    ):
        self.config = config
        self.job_config = job_config
        self.client = client

    @property
    def name(self) -> str:
        """Human-readable name for this worker."""
        return "Transcription"

    async def process(self, episode_id: int) -> RawTranscript:
        """Transcribe one episode.

        Returns:
            The service's raw transcript.

        Raises:
            FileSystemError: If the audio cannot be read or the cache cannot be written.
            NetworkError: If the service answers with an error status.
            DeserializationError: If the response cannot be parsed.
        """
        cache_path = self.config.build_transcript_cache_path(episode_id)

        if self.job_config.reuse_transcript_cache and self.config.transcript_cache_exists(
            episode_id
        ):
            logger.info(f"Using cached transcript for episode {episode_id}")
            return await self._load_cache(cache_path, episode_id)

        wav_path = self.config.build_wav_path(episode_id)
        if not os.path.exists(wav_path):
            raise FileSystemError(f"Audio file not found: {wav_path}", episode_id)

        logger.info(f"Transcribing episode {episode_id}")
        raw = await self.client.transcribe(wav_path, episode_id)

        await self._write_cache(cache_path, raw, episode_id)

        self.log_done(episode_id)
        return raw

    async def _write_cache(
        self, cache_path: str, raw: RawTranscript, episode_id: int
    ) -> None:
        logger.debug(f"Writing transcript cache: {cache_path}")
        try:
            await asyncio.to_thread(
                Path(cache_path).write_text, raw.model_dump_json(), "utf-8"
            )
        except OSError as e:
            raise FileSystemError(
                f"Could not write transcript cache {cache_path}: {e}", episode_id
            ) from e

    async def _load_cache(self, cache_path: str, episode_id: int) -> RawTranscript:
        try:
            body = await asyncio.to_thread(Path(cache_path).read_bytes)
        except OSError as e:
            raise FileSystemError(
                f"Could not read transcript cache {cache_path}: {e}", episode_id
            ) from e
        return parse_raw_transcript(body, episode_id)

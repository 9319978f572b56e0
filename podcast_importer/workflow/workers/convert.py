"""Convert worker: raw service transcript to the stored representation."""

import logging

from ...transcription.models import EpisodeTranscript, RawTranscript, Transcript
from .base import StageWorker

logger = logging.getLogger(__name__)


class ConvertWorker(StageWorker):
    """Pure conversion step; performs no I/O."""

    @property
    def name(self) -> str:
        return "Convert"

    async def process(self, episode_id: int, raw: RawTranscript) -> EpisodeTranscript:
        logger.info(f"Converting episode {episode_id}")
        return EpisodeTranscript(
            episode_id=episode_id, transcript=Transcript.from_raw(raw)
        )

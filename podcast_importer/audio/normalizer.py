"""Audio normalization with ffmpeg.

Converts downloaded episode audio into the 16 kHz mono signed 16-bit PCM wav
the transcription service expects.
"""

import asyncio
import logging
import os
from typing import List, Optional

from ..errors import FileSystemError, NormalizerError

logger = logging.getLogger(__name__)


class AudioNormalizer:
    """Runs ffmpeg as an asynchronous subprocess.

    Example:
        normalizer = AudioNormalizer(ffmpeg_path="ffmpeg")
        await normalizer.normalize("audio/mp3/42.mp3", "audio/wav/42.wav")
    """

    SAMPLE_RATE = 16000
    CHANNELS = 1
    CODEC = "pcm_s16le"

    def __init__(self, ffmpeg_path: str = "ffmpeg"):
        self.ffmpeg_path = ffmpeg_path

    def build_command(self, input_path: str, output_path: str) -> List[str]:
        """Build the ffmpeg argument list for one conversion."""
        return [
            self.ffmpeg_path,
            "-nostdin",
            "-y",
            "-i", input_path,
            "-ar", str(self.SAMPLE_RATE),
            "-ac", str(self.CHANNELS),
            "-c:a", self.CODEC,
            output_path,
        ]

    async def normalize(
        self,
        input_path: str,
        output_path: str,
        episode_id: Optional[int] = None,
        remove_input: bool = True,
    ) -> str:
        """Convert `input_path` into a normalized wav at `output_path`.

        On success the input file is deleted (unless `remove_input` is False).
        On failure the input file is left in place.

        Returns:
            The output path.

        Raises:
            NormalizerError: If ffmpeg cannot be started or exits non-zero.
            FileSystemError: If the input file cannot be removed afterwards.
        """
        command = self.build_command(input_path, output_path)
        logger.debug(f"Running: {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise NormalizerError(
                f"Could not start {self.ffmpeg_path}: {e}", episode_id
            ) from e

        _, stderr = await process.communicate()

        if process.returncode != 0:
            tail = stderr.decode(errors="replace").strip().splitlines()[-1:] if stderr else []
            logger.error(
                f"Couldn't convert episode {episode_id} to wav "
                f"(exit code {process.returncode}): {' '.join(tail)}"
            )
            raise NormalizerError(
                f"ffmpeg exited with code {process.returncode} converting {input_path}",
                episode_id,
                returncode=process.returncode,
            )

        if remove_input:
            try:
                os.remove(input_path)
            except OSError as e:
                raise FileSystemError(
                    f"Could not remove {input_path}: {e}", episode_id
                ) from e

        logger.debug(f"Normalized {input_path} -> {output_path}")
        return output_path

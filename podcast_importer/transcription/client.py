"""HTTP client for the external speech-to-text service.

Talks to a whisper.cpp style `/inference` endpoint: the audio is posted as
multipart form data and the service answers with `verbose_json`.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Optional

import aiohttp
from pydantic import ValidationError

from ..errors import DeserializationError, FileSystemError, NetworkError
from .models import RawTranscript

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Sends audio files to the transcription service.

    Transport failures while sending are retried forever with a fixed backoff.
    Error statuses and unparseable responses are not retried.

    Example:
        async with aiohttp.ClientSession() as session:
            client = TranscriptionClient(session, "http://localhost:8080/inference")
            raw = await client.transcribe("audio/wav/42.wav")
    """

    DEFAULT_RETRY_BACKOFF = 5

    # Deterministic decoding
    FORM_FIELDS = {
        "temperature": "0.0",
        "temperature_inc": "0.0",
        "response_format": "verbose_json",
    }

    def __init__(
        self,
        session: aiohttp.ClientSession,
        url: str,
        retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the client.

        Args:
            session: Shared aiohttp session.
            url: Transcription endpoint.
            retry_backoff_seconds: Wait between failed send attempts.
            sleep: Coroutine used for the backoff wait.
        """
        self.session = session
        self.url = url
        self.retry_backoff_seconds = retry_backoff_seconds
        self._sleep = sleep
        self.send_attempts = 0

    def _build_form(self, audio: bytes, filename: str) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for name, value in self.FORM_FIELDS.items():
            form.add_field(name, value)
        form.add_field(
            "file", audio, filename=filename, content_type="audio/wav"
        )
        return form

    async def _send(
        self, audio: bytes, filename: str, episode_id: Optional[int]
    ) -> aiohttp.ClientResponse:
        attempt = 0
        while True:
            attempt += 1
            self.send_attempts += 1
            try:
                # The form body is consumed by each send, so rebuild it
                return await self.session.post(
                    self.url, data=self._build_form(audio, filename)
                )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(
                    f"Error sending transcription request for episode {episode_id} "
                    f"(attempt {attempt}), retrying in {self.retry_backoff_seconds}s: {e}"
                )
                await self._sleep(self.retry_backoff_seconds)

    async def transcribe(
        self, audio_path: str, episode_id: Optional[int] = None
    ) -> RawTranscript:
        """Transcribe one audio file.

        Args:
            audio_path: Path to a 16 kHz mono wav file.
            episode_id: Episode the audio belongs to, used in errors and logs.

        Returns:
            The parsed service response.

        Raises:
            FileSystemError: If the audio file cannot be read.
            NetworkError: If the service answers with an error status or the
                response body cannot be received.
            DeserializationError: If the response is not a valid transcript.
        """
        try:
            audio = await asyncio.to_thread(Path(audio_path).read_bytes)
        except OSError as e:
            raise FileSystemError(
                f"Could not read audio file {audio_path}: {e}", episode_id
            ) from e

        response = await self._send(audio, os.path.basename(audio_path), episode_id)

        async with response:
            try:
                body = await response.read()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise NetworkError(
                    f"Failed to read transcription response: {type(e).__name__} {e}",
                    episode_id,
                ) from e

        if response.status >= 400:
            detail = body.decode(errors="replace")
            raise NetworkError(
                f"Transcription service returned HTTP {response.status}: {detail[:200]}",
                episode_id,
                status=response.status,
            )

        return parse_raw_transcript(body, episode_id)


def parse_raw_transcript(body, episode_id: Optional[int] = None) -> RawTranscript:
    """Parse a service response body into a RawTranscript.

    Raises:
        DeserializationError: If the body is not JSON or does not have the
            expected shape.
    """
    try:
        return RawTranscript.model_validate(json.loads(body))
    except (ValueError, ValidationError) as e:
        raise DeserializationError(
            f"Invalid transcription response: {e}", episode_id
        ) from e

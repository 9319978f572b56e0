"""Tests for the transcription service client."""

import asyncio
import json
import pytest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from podcast_importer.errors import (
    DeserializationError,
    FileSystemError,
    NetworkError,
    TaskJoinError,
)
from podcast_importer.transcription.client import TranscriptionClient
from podcast_importer.workflow.stage import StageExecutor


VERBOSE_JSON = {
    "language": "en",
    "segments": [{"id": 0, "start": 0.0, "end": 1.5, "text": " Hello"}],
}


def _make_response(status=200, body=None):
    """Build a mock aiohttp response usable as an async context manager."""
    response = MagicMock()
    response.status = status
    payload = json.dumps(VERBOSE_JSON).encode() if body is None else body
    response.read = AsyncMock(return_value=payload)
    return response


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "12.wav"
    path.write_bytes(b"RIFF....WAVEfmt ")
    return path


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds):
        sleeps.append(seconds)

    return _sleep


class TestTranscriptionClient:
    """Tests for TranscriptionClient."""

    def test_transcribe_success(self, audio_file, fake_sleep, sleeps):
        """Test a successful transcription on the first attempt."""
        session = MagicMock()
        session.post = AsyncMock(return_value=_make_response())
        client = TranscriptionClient(
            session, "http://stt.local/inference", sleep=fake_sleep
        )

        raw = asyncio.run(client.transcribe(str(audio_file), episode_id=12))

        assert raw.language == "en"
        assert raw.segments[0].text == " Hello"
        assert client.send_attempts == 1
        assert sleeps == []

        args, kwargs = session.post.call_args
        assert args[0] == "http://stt.local/inference"
        assert isinstance(kwargs["data"], aiohttp.FormData)

    def test_retries_transport_errors_with_fixed_backoff(
        self, audio_file, fake_sleep, sleeps
    ):
        """Test that send failures are retried after the backoff until one succeeds."""
        session = MagicMock()
        session.post = AsyncMock(
            side_effect=[
                aiohttp.ClientConnectionError("connection refused"),
                aiohttp.ClientConnectionError("connection refused"),
                _make_response(),
            ]
        )
        client = TranscriptionClient(
            session, "http://stt.local/inference", sleep=fake_sleep
        )

        raw = asyncio.run(client.transcribe(str(audio_file), episode_id=12))

        assert len(raw.segments) == 1
        assert client.send_attempts == 3
        assert session.post.await_count == 3
        assert sleeps == [5, 5]

    def test_retries_timeouts(self, audio_file, fake_sleep, sleeps):
        """Test that timeouts are treated like transport failures."""
        session = MagicMock()
        session.post = AsyncMock(
            side_effect=[asyncio.TimeoutError(), _make_response()]
        )
        client = TranscriptionClient(
            session,
            "http://stt.local/inference",
            retry_backoff_seconds=2,
            sleep=fake_sleep,
        )

        asyncio.run(client.transcribe(str(audio_file)))

        assert sleeps == [2]

    def test_error_status_is_not_retried(self, audio_file, fake_sleep, sleeps):
        """Test that an HTTP error status raises NetworkError immediately."""
        session = MagicMock()
        session.post = AsyncMock(
            return_value=_make_response(status=500, body=b"model not loaded")
        )
        client = TranscriptionClient(
            session, "http://stt.local/inference", sleep=fake_sleep
        )

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(client.transcribe(str(audio_file), episode_id=12))

        assert exc_info.value.status == 500
        assert exc_info.value.episode_id == 12
        assert client.send_attempts == 1
        assert sleeps == []

    def test_body_read_timeout_is_network_error(self, audio_file, fake_sleep, sleeps):
        """Test that a timeout while reading the response fails the episode."""
        response = _make_response()
        response.read = AsyncMock(side_effect=asyncio.TimeoutError())
        session = MagicMock()
        session.post = AsyncMock(return_value=response)
        client = TranscriptionClient(
            session, "http://stt.local/inference", sleep=fake_sleep
        )

        async def scenario():
            stage = StageExecutor("transcribe", 1)
            stage.submit(12, client.transcribe, str(audio_file), 12)
            return [item async for item in stage.drain()]

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(scenario())

        assert not isinstance(exc_info.value, TaskJoinError)
        assert exc_info.value.episode_id == 12
        assert client.send_attempts == 1
        assert sleeps == []

    def test_malformed_body_raises_deserialization_error(
        self, audio_file, fake_sleep
    ):
        """Test that an unparseable body is a deserialization error."""
        session = MagicMock()
        session.post = AsyncMock(return_value=_make_response(body=b"not json"))
        client = TranscriptionClient(
            session, "http://stt.local/inference", sleep=fake_sleep
        )

        with pytest.raises(DeserializationError):
            asyncio.run(client.transcribe(str(audio_file), episode_id=12))

    def test_missing_audio_file(self, tmp_path, fake_sleep):
        """Test that a missing audio file fails before any request."""
        session = MagicMock()
        session.post = AsyncMock()
        client = TranscriptionClient(
            session, "http://stt.local/inference", sleep=fake_sleep
        )

        with pytest.raises(FileSystemError):
            asyncio.run(client.transcribe(str(tmp_path / "missing.wav"), 4))

        session.post.assert_not_called()

    def test_form_fields(self):
        """Test the deterministic decoding options sent with every request."""
        assert TranscriptionClient.FORM_FIELDS == {
            "temperature": "0.0",
            "temperature_inc": "0.0",
            "response_format": "verbose_json",
        }

"""Tests for the ffmpeg audio normalizer."""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from podcast_importer.audio.normalizer import AudioNormalizer
from podcast_importer.errors import NormalizerError


def _make_process(returncode=0, stderr=b""):
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    return process


@pytest.fixture
def mp3_file(tmp_path):
    path = tmp_path / "7.mp3"
    path.write_bytes(b"ID3")
    return path


class TestAudioNormalizer:
    """Tests for AudioNormalizer."""

    def test_build_command(self):
        """Test the ffmpeg arguments."""
        normalizer = AudioNormalizer(ffmpeg_path="/usr/bin/ffmpeg")

        command = normalizer.build_command("in.mp3", "out.wav")

        assert command == [
            "/usr/bin/ffmpeg",
            "-nostdin",
            "-y",
            "-i", "in.mp3",
            "-ar", "16000",
            "-ac", "1",
            "-c:a", "pcm_s16le",
            "out.wav",
        ]

    def test_success_removes_input(self, mp3_file, tmp_path):
        """Test that the raw download is deleted after a successful conversion."""
        normalizer = AudioNormalizer()
        output = str(tmp_path / "7.wav")

        with patch(
            "asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=_make_process(0)),
        ) as mock_exec:
            result = asyncio.run(normalizer.normalize(str(mp3_file), output, 7))

        assert result == output
        assert not mp3_file.exists()
        assert mock_exec.call_args.args[0] == "ffmpeg"

    def test_failure_keeps_input(self, mp3_file, tmp_path):
        """Test that a failed conversion raises and leaves the input in place."""
        normalizer = AudioNormalizer()

        with patch(
            "asyncio.create_subprocess_exec",
            new=AsyncMock(
                return_value=_make_process(1, b"Invalid data found when processing input\n")
            ),
        ):
            with pytest.raises(NormalizerError) as exc_info:
                asyncio.run(
                    normalizer.normalize(str(mp3_file), str(tmp_path / "7.wav"), 7)
                )

        assert exc_info.value.returncode == 1
        assert exc_info.value.episode_id == 7
        assert mp3_file.exists()

    def test_missing_binary(self, mp3_file, tmp_path):
        """Test that an ffmpeg that cannot be started is a normalizer error."""
        normalizer = AudioNormalizer(ffmpeg_path="/nonexistent/ffmpeg")

        with patch(
            "asyncio.create_subprocess_exec",
            new=AsyncMock(side_effect=FileNotFoundError("no such file")),
        ):
            with pytest.raises(NormalizerError, match="Could not start"):
                asyncio.run(
                    normalizer.normalize(str(mp3_file), str(tmp_path / "7.wav"), 7)
                )

        assert mp3_file.exists()

    def test_keep_input_when_requested(self, mp3_file, tmp_path):
        """Test remove_input=False."""
        normalizer = AudioNormalizer()

        with patch(
            "asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=_make_process(0)),
        ):
            asyncio.run(
                normalizer.normalize(
                    str(mp3_file), str(tmp_path / "7.wav"), 7, remove_input=False
                )
            )

        assert mp3_file.exists()

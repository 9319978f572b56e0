"""Tests for application and import job configuration."""

import os
import pytest
from unittest.mock import patch

from podcast_importer.config import Config
from podcast_importer.workflow.config import ImportJobConfig, _get_int_env


class TestConfig:
    """Tests for Config."""

    def test_default_directories(self, monkeypatch):
        """Test default import directory layout."""
        for name in ("IMPORT_DOWNLOAD_DIR", "IMPORT_WAV_DIR", "IMPORT_TRANSCRIPT_DIR"):
            monkeypatch.delenv(name, raising=False)

        config = Config()

        assert config.DOWNLOAD_DIR == "audio/mp3"
        assert config.WAV_DIR == "audio/wav"
        assert config.TRANSCRIPT_DIR == "transcripts"

    def test_path_builders(self, import_dirs):
        """Test per-episode file paths."""
        config = Config()

        assert config.build_download_path(42) == os.path.join(
            str(import_dirs["download"]), "42.mp3"
        )
        assert config.build_wav_path(42) == os.path.join(
            str(import_dirs["wav"]), "42.wav"
        )
        assert config.build_transcript_cache_path(42) == os.path.join(
            str(import_dirs["transcripts"]), "42.json"
        )

    def test_rejects_non_http_transcriber_url(self, monkeypatch):
        """Test that the transcriber URL must be http(s)."""
        monkeypatch.setenv("TRANSCRIBER_URL", "ftp://localhost/inference")

        with pytest.raises(ValueError, match="TRANSCRIBER_URL"):
            Config()

    def test_check_dirs(self, tmp_path, monkeypatch):
        """Test directory check before and after creating the tree."""
        monkeypatch.setenv("IMPORT_DOWNLOAD_DIR", str(tmp_path / "a"))
        monkeypatch.setenv("IMPORT_WAV_DIR", str(tmp_path / "b"))
        monkeypatch.setenv("IMPORT_TRANSCRIPT_DIR", str(tmp_path / "c"))
        config = Config()

        assert config.check_dirs() is False

        config.ensure_dirs()

        assert config.check_dirs() is True

    def test_transcript_cache_exists_ignores_empty_file(self, import_dirs):
        """Test that an empty cache file does not count as a cached transcript."""
        config = Config()
        assert config.transcript_cache_exists(5) is False

        (import_dirs["transcripts"] / "5.json").write_text("")
        assert config.transcript_cache_exists(5) is False

        (import_dirs["transcripts"] / "5.json").write_text('{"segments": []}')
        assert config.transcript_cache_exists(5) is True


class TestImportJobConfig:
    """Tests for ImportJobConfig."""

    def test_default_values(self):
        """Test default stage limits."""
        config = ImportJobConfig()

        assert config.max_download_jobs == 4
        assert config.max_transcribe_jobs == 1
        assert config.max_convert_jobs == 4
        assert config.max_insert_jobs == 4
        assert config.transcribe_retry_seconds == 5
        assert config.reuse_transcript_cache is False

    def test_from_env(self):
        """Test loading configuration from environment variables."""
        with patch.dict(
            "os.environ",
            {
                "IMPORT_MAX_DOWNLOAD_JOBS": "8",
                "IMPORT_MAX_TRANSCRIBE_JOBS": "2",
                "IMPORT_REUSE_TRANSCRIPT_CACHE": "true",
            },
        ):
            config = ImportJobConfig.from_env()

            assert config.max_download_jobs == 8
            assert config.max_transcribe_jobs == 2
            assert config.reuse_transcript_cache is True
            # Other values should be defaults
            assert config.max_convert_jobs == 4
            assert config.transcribe_retry_seconds == 5

    def test_from_env_rejects_zero_limit(self):
        """Test that a stage limit of zero is rejected."""
        with patch.dict("os.environ", {"IMPORT_MAX_CONVERT_JOBS": "0"}):
            with pytest.raises(ValueError, match="IMPORT_MAX_CONVERT_JOBS"):
                ImportJobConfig.from_env()

    def test_from_env_rejects_non_integer(self):
        """Test that a non-numeric limit is rejected."""
        with patch.dict("os.environ", {"IMPORT_MAX_INSERT_JOBS": "many"}):
            with pytest.raises(ValueError, match="not a valid integer"):
                ImportJobConfig.from_env()

    def test_constructor_validates_limits(self):
        """Test that direct construction validates limits too."""
        with pytest.raises(ValueError, match="max_transcribe_jobs"):
            ImportJobConfig(max_transcribe_jobs=0)

        with pytest.raises(ValueError, match="transcribe_retry_seconds"):
            ImportJobConfig(transcribe_retry_seconds=-1)

    def test_get_int_env_bounds(self):
        """Test _get_int_env range checks."""
        with patch.dict("os.environ", {"SOME_LIMIT": "12"}):
            assert _get_int_env("SOME_LIMIT", 1, min_val=1, max_val=20) == 12
            with pytest.raises(ValueError, match="must be <= 10"):
                _get_int_env("SOME_LIMIT", 1, max_val=10)

        assert _get_int_env("UNSET_LIMIT_FOR_TEST", 3) == 3

"""
Pytest configuration and fixtures for podcast-importer tests.

This module runs before any test imports, setting up the test environment.
Environment variables are explicitly set to ensure deterministic test behavior
regardless of external environment configuration.
"""

import os

import pytest

# Pin everything Config and ImportJobConfig read so a developer's .env or
# shell cannot leak into the tests.
_PINNED_ENV = {
    "TRANSCRIBER_URL": "http://localhost:8080/inference",
    "FFMPEG_PATH": "ffmpeg",
    "DATABASE_URL": "sqlite:///:memory:",
    "HTTP_TIMEOUT": "0",
}
os.environ.update(_PINNED_ENV)

for _name in (
    "IMPORT_MAX_DOWNLOAD_JOBS",
    "IMPORT_MAX_TRANSCRIBE_JOBS",
    "IMPORT_MAX_CONVERT_JOBS",
    "IMPORT_MAX_INSERT_JOBS",
    "IMPORT_TRANSCRIBE_RETRY_SECONDS",
    "IMPORT_REUSE_TRANSCRIPT_CACHE",
):
    os.environ.pop(_name, None)


@pytest.fixture
def import_dirs(tmp_path, monkeypatch):
    """
    Point the import directories at a temporary tree and create it.

    Returns:
        dict: Paths of the download, wav and transcript directories.
    """
    dirs = {
        "IMPORT_DOWNLOAD_DIR": tmp_path / "mp3",
        "IMPORT_WAV_DIR": tmp_path / "wav",
        "IMPORT_TRANSCRIPT_DIR": tmp_path / "transcripts",
    }
    for name, path in dirs.items():
        path.mkdir()
        monkeypatch.setenv(name, str(path))
    return {
        "download": dirs["IMPORT_DOWNLOAD_DIR"],
        "wav": dirs["IMPORT_WAV_DIR"],
        "transcripts": dirs["IMPORT_TRANSCRIPT_DIR"],
    }

"""Configuration for the import job manager.

Provides environment-based configuration for per-stage concurrency limits,
the transcription retry backoff and transcript cache reuse.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _get_int_env(
    name: str,
    default: int,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """Parse an integer from an environment variable with validation.

    Args:
        name: Environment variable name.
        default: Default value if env var is not set.
        min_val: Minimum allowed value (inclusive), or None for no minimum.
        max_val: Maximum allowed value (inclusive), or None for no maximum.

    Returns:
        The parsed and validated integer value.

    Raises:
        ValueError: If the value cannot be parsed as an integer or is out of range.
    """
    raw = os.getenv(name)
    if raw is None:
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid value for {name}: '{raw}' is not a valid integer"
        )

    if min_val is not None and value < min_val:
        raise ValueError(
            f"Invalid value for {name}: {value} must be >= {min_val}"
        )

    if max_val is not None and value > max_val:
        raise ValueError(
            f"Invalid value for {name}: {value} must be <= {max_val}"
        )

    return value


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ImportJobConfig:
    """Configuration for a batch import run.

    All settings can be overridden via environment variables.
    """

    # Maximum concurrently executing operations per stage
    max_download_jobs: int = 4
    max_transcribe_jobs: int = 1
    max_convert_jobs: int = 4
    max_insert_jobs: int = 4

    # Fixed wait between failed transcription sends
    transcribe_retry_seconds: int = 5

    # Skip download/transcription when a cached transcript exists
    reuse_transcript_cache: bool = False

    def __post_init__(self):
        for name in (
            "max_download_jobs",
            "max_transcribe_jobs",
            "max_convert_jobs",
            "max_insert_jobs",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.transcribe_retry_seconds < 0:
            raise ValueError(
                f"transcribe_retry_seconds must be >= 0, got {self.transcribe_retry_seconds}"
            )

    @classmethod
    def from_env(cls) -> "ImportJobConfig":
        """Create configuration from environment variables.

        Returns:
            ImportJobConfig instance with values from environment or defaults.

        Raises:
            ValueError: If any environment variable has an invalid value.
        """
        return cls(
            max_download_jobs=_get_int_env("IMPORT_MAX_DOWNLOAD_JOBS", 4, min_val=1),
            max_transcribe_jobs=_get_int_env(
                "IMPORT_MAX_TRANSCRIBE_JOBS", 1, min_val=1
            ),
            max_convert_jobs=_get_int_env("IMPORT_MAX_CONVERT_JOBS", 4, min_val=1),
            max_insert_jobs=_get_int_env("IMPORT_MAX_INSERT_JOBS", 4, min_val=1),
            transcribe_retry_seconds=_get_int_env(
                "IMPORT_TRANSCRIBE_RETRY_SECONDS", 5, min_val=0
            ),
            reuse_transcript_cache=_get_bool_env(
                "IMPORT_REUSE_TRANSCRIPT_CACHE", False
            ),
        )

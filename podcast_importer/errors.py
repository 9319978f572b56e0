"""Errors raised by the import pipeline.

Every stage operation raises a subclass of ImportJobError. The exception
travels inside the stage's task and is re-raised by the JobManager when it
drains that stage.
"""

from typing import Optional


class ImportJobError(Exception):
    """Base class for import pipeline failures.

    Attributes:
        episode_id: The episode the failure belongs to, when known.
    """

    def __init__(self, message: str, episode_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.episode_id = episode_id

    def __str__(self) -> str:
        if self.episode_id is None:
            return self.message
        return f"Episode {self.episode_id}: {self.message}"


class EpisodeNotFoundError(ImportJobError):
    """The episode does not exist in the datastore."""


class NetworkError(ImportJobError):
    """HTTP transport failure or error status."""

    def __init__(
        self,
        message: str,
        episode_id: Optional[int] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message, episode_id)
        self.status = status


class FileSystemError(ImportJobError):
    """Reading or writing a local file failed."""


class NormalizerError(ImportJobError):
    """The external audio conversion process failed."""

    def __init__(
        self,
        message: str,
        episode_id: Optional[int] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message, episode_id)
        self.returncode = returncode


class DeserializationError(ImportJobError):
    """A transcription service response could not be parsed."""


class DatastoreError(ImportJobError):
    """The datastore rejected a read or write."""


class TaskJoinError(ImportJobError):
    """A stage task failed with an unexpected exception."""


class StageStateError(ImportJobError):
    """A stage's task queue was used after it had been drained."""

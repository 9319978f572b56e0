"""Batch import workflow.

This package runs a cohort of episodes through the import pipeline:
download → transcribe → convert → insert.
"""

from .config import ImportJobConfig
from .job_manager import ImportStats, JobManager
from .stage import StageExecutor, TaskHandle

__all__ = [
    "ImportJobConfig",
    "ImportStats",
    "JobManager",
    "StageExecutor",
    "TaskHandle",
]

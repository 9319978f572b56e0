"""Speech-to-text client and transcript representations."""

from .client import TranscriptionClient, parse_raw_transcript
from .models import (
    EpisodeTranscript,
    RawSegment,
    RawTranscript,
    Transcript,
    TranscriptSegment,
)

__all__ = [
    "TranscriptionClient",
    "parse_raw_transcript",
    "EpisodeTranscript",
    "RawSegment",
    "RawTranscript",
    "Transcript",
    "TranscriptSegment",
]

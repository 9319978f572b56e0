"""Transcript representations.

RawTranscript mirrors the speech-to-text service's `verbose_json` response.
Transcript is the internal, millisecond-based form that gets stored and
indexed. EpisodeTranscript pairs a Transcript with its episode.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RawSegment(BaseModel):
    """One timed segment as returned by the transcription service."""

    # Extra service fields (tokens, avg_logprob, ...) are kept for the cache file
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    start: float = Field(ge=0, description="Segment start in seconds")
    end: float = Field(ge=0, description="Segment end in seconds")
    text: str


class RawTranscript(BaseModel):
    """Transcription service response (whisper `verbose_json`)."""

    model_config = ConfigDict(extra="allow")

    task: Optional[str] = None
    language: Optional[str] = None
    duration: Optional[float] = None
    text: Optional[str] = None
    segments: List[RawSegment]

    @model_validator(mode="before")
    @classmethod
    def _wrap_segment_list(cls, data: Any) -> Any:
        # Some servers answer with the bare segment array
        if isinstance(data, list):
            return {"segments": data}
        return data


@dataclass(frozen=True)
class TranscriptSegment:
    start_ms: int
    end_ms: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"start_ms": self.start_ms, "end_ms": self.end_ms, "text": self.text}


@dataclass
class Transcript:
    """Ordered, timed transcript segments.

    Attributes:
        segments: Segments in the order the service produced them.
        language: Detected language, if the service reported one.
    """

    segments: List[TranscriptSegment] = field(default_factory=list)
    language: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: RawTranscript) -> "Transcript":
        """Convert a service response into the internal representation.

        Segment count and order are preserved; offsets are rounded to whole
        milliseconds and text is stripped of surrounding whitespace.
        """
        return cls(
            segments=[
                TranscriptSegment(
                    start_ms=_seconds_to_ms(segment.start),
                    end_ms=_seconds_to_ms(segment.end),
                    text=segment.text.strip(),
                )
                for segment in raw.segments
            ],
            language=raw.language,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transcript":
        return cls(
            segments=[
                TranscriptSegment(
                    start_ms=int(s["start_ms"]),
                    end_ms=int(s["end_ms"]),
                    text=s["text"],
                )
                for s in data.get("segments", [])
            ],
            language=data.get("language"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "segments": [segment.to_dict() for segment in self.segments],
        }

    @property
    def text(self) -> str:
        """Full transcript text with segments joined by spaces."""
        return " ".join(s.text for s in self.segments if s.text)


@dataclass
class EpisodeTranscript:
    """The unit persisted by the import pipeline."""

    episode_id: int
    transcript: Transcript


def _seconds_to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))

"""Stage workers for the import pipeline.

Each worker handles a single stage for one episode:
- DownloadWorker: Fetches episode audio and normalizes it with ffmpeg
- TranscriptionWorker: Sends normalized audio to the speech-to-text service
- ConvertWorker: Converts the service response to the stored transcript form
- InsertWorker: Writes the transcript to the datastore
"""

from .base import StageWorker
from .convert import ConvertWorker
from .download import DownloadWorker
from .insert import InsertWorker
from .transcription import TranscriptionWorker

__all__ = [
    "StageWorker",
    "ConvertWorker",
    "DownloadWorker",
    "InsertWorker",
    "TranscriptionWorker",
]

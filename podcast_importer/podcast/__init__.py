"""Episode audio retrieval."""

from .downloader import DownloadResult, EpisodeDownloader

__all__ = [
    "DownloadResult",
    "EpisodeDownloader",
]

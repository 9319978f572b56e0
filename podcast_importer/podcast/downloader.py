"""Episode audio downloader.

Streams an episode's source audio to `config.build_download_path(id)` through
a shared aiohttp session.
"""

import asyncio
import logging
import os
from dataclasses import dataclass

import aiohttp

from ..config import Config
from ..db.models import Episode
from ..errors import FileSystemError, NetworkError

logger = logging.getLogger(__name__)


@dataclass
class DownloadResult:
    """Result of a download operation."""

    episode_id: int
    local_path: str


class EpisodeDownloader:
    """Downloads episode audio files.

    Concurrency is bounded by the caller (the download stage's permits), so a
    single downloader can serve every download task of a run.

    Example:
        async with aiohttp.ClientSession() as session:
            downloader = EpisodeDownloader(session, Config())
            result = await downloader.download(episode)
    """

    def __init__(self, session: aiohttp.ClientSession, config: Config):
        """Initialize the episode downloader.

        Args:
            session: Shared aiohttp session
            config: Provides the output path and the streaming chunk size
        """
        self.session = session
        self.config = config

    async def download(self, episode: Episode) -> DownloadResult:
        """Download a single episode.

        Args:
            episode: Episode to download

        Returns:
            DownloadResult describing the written file

        Raises:
            NetworkError: On transport failures, timeouts or an error HTTP
                status.
            FileSystemError: If the file cannot be written.
            The partial file is removed in every case.
        """
        output_path = self.config.build_download_path(episode.id)
        logger.info(f"Downloading episode {episode.id}: {episode.title}")

        try:
            size = await self._stream_to_file(episode.download_url, output_path)
        except aiohttp.ClientResponseError as e:
            self._remove_partial(output_path)
            raise NetworkError(
                f"Download of {episode.download_url} failed with HTTP {e.status}",
                episode.id,
                status=e.status,
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            # TimeoutError is an OSError, so it must be handled first
            self._remove_partial(output_path)
            raise NetworkError(
                f"Download of {episode.download_url} failed: {type(e).__name__} {e}",
                episode.id,
            ) from e
        except OSError as e:
            self._remove_partial(output_path)
            raise FileSystemError(
                f"Could not write {output_path}: {e}", episode.id
            ) from e

        logger.info(f"Downloaded episode {episode.id} ({size / 1024 / 1024:.1f} MB)")
        return DownloadResult(episode_id=episode.id, local_path=output_path)

    async def _stream_to_file(self, url: str, output_path: str) -> int:
        written = 0
        async with self.session.get(url, allow_redirects=True) as response:
            response.raise_for_status()
            with open(output_path, "wb") as f:
                async for chunk in response.content.iter_chunked(
                    self.config.PODCAST_CHUNK_SIZE
                ):
                    f.write(chunk)
                    written += len(chunk)
        return written

    def _remove_partial(self, output_path: str) -> None:
        if os.path.exists(output_path):
            try:
                os.remove(output_path)
            except OSError:
                logger.warning(f"Could not remove partial download {output_path}")

import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class Config:
    def __init__(self, env_file=None):
        """
        Initialize configuration by loading environment variables and setting default attributes.

        Loads environment variables from the provided .env file path when `env_file` is given; otherwise loads from the default environment. After loading, sets the import directory layout, the transcription service endpoint, the ffmpeg location, HTTP download options and database connection parameters using environment values with sensible defaults.
        Parameters:
            env_file (str | None): Optional path to a .env file to load environment variables from. If omitted, the default environment or default .env discovery is used.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Import directories
        self.DOWNLOAD_DIR = os.getenv("IMPORT_DOWNLOAD_DIR", "audio/mp3")
        self.WAV_DIR = os.getenv("IMPORT_WAV_DIR", "audio/wav")
        self.TRANSCRIPT_DIR = os.getenv("IMPORT_TRANSCRIPT_DIR", "transcripts")

        # File naming
        self.DOWNLOAD_SUFFIX = ".mp3"
        self.WAV_SUFFIX = ".wav"
        self.TRANSCRIPT_CACHE_SUFFIX = ".json"

        # Speech-to-text service (whisper.cpp server compatible)
        transcriber_url = os.getenv(
            "TRANSCRIBER_URL", "http://localhost:8080/inference"
        )
        if not transcriber_url.lower().startswith(("http://", "https://")):
            raise ValueError(
                f"TRANSCRIBER_URL must start with http:// or https://, got: {transcriber_url}"
            )
        self.TRANSCRIBER_URL = transcriber_url

        # Audio normalization
        self.FFMPEG_PATH = os.getenv("FFMPEG_PATH", "ffmpeg")

        # HTTP options
        self.PODCAST_CHUNK_SIZE = int(os.getenv("PODCAST_CHUNK_SIZE", "8192"))
        self.PODCAST_USER_AGENT = os.getenv(
            "PODCAST_USER_AGENT", "PodcastImporter/0.1"
        )
        # 0 disables the client timeout
        self.HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", "0"))

        # Database configuration
        self.DATABASE_URL = os.getenv(
            "DATABASE_URL", "sqlite:///./podcast_importer.db"
        )
        self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
        self.DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
        self.DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

    @property
    def import_directories(self):
        return [self.DOWNLOAD_DIR, self.WAV_DIR, self.TRANSCRIPT_DIR]

    # Utility functions related to file paths and suffixes
    def build_download_path(self, episode_id):
        '''Path of the raw downloaded audio for an episode.'''
        return os.path.join(self.DOWNLOAD_DIR, f"{episode_id}{self.DOWNLOAD_SUFFIX}")

    def build_wav_path(self, episode_id):
        '''Path of the normalized audio that gets sent for transcription.'''
        return os.path.join(self.WAV_DIR, f"{episode_id}{self.WAV_SUFFIX}")

    def build_transcript_cache_path(self, episode_id):
        '''Path of the cached transcription service response.'''
        return os.path.join(
            self.TRANSCRIPT_DIR, f"{episode_id}{self.TRANSCRIPT_CACHE_SUFFIX}"
        )

    def transcript_cache_exists(self, episode_id):
        cache_path = self.build_transcript_cache_path(episode_id)
        return os.path.exists(cache_path) and os.path.getsize(cache_path) > 0

    def check_dirs(self):
        """
        Check that every import directory exists.

        Returns:
            bool: True if the download, wav and transcript directories all exist.
        """
        for directory in self.import_directories:
            logger.debug(f"Checking {directory}")
            if not os.path.isdir(directory):
                return False
        return True

    def ensure_dirs(self):
        '''Create any missing import directory.'''
        for directory in self.import_directories:
            os.makedirs(directory, exist_ok=True)

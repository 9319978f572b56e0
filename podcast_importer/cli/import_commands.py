"""CLI commands for episode imports.

Provides commands for:
- Running a batch import for a set of episode ids
- Checking or creating the import directories
- Creating the database tables
- Printing a stored transcript
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List

import aiohttp

from ..config import Config
from ..db.factory import create_repository_from_config
from ..errors import ImportJobError
from ..workflow.config import ImportJobConfig
from ..workflow.job_manager import ImportStats, JobManager

logger = logging.getLogger(__name__)


def _format_ms(ms: int) -> str:
    seconds, millis = divmod(ms, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


async def _import_episodes(
    config: Config,
    job_config: ImportJobConfig,
    repository,
    episode_ids: List[int],
) -> ImportStats:
    """Run one import cohort inside a shared HTTP session."""
    timeout = aiohttp.ClientTimeout(total=config.HTTP_TIMEOUT or None)
    async with aiohttp.ClientSession(
        timeout=timeout,
        headers={"User-Agent": config.PODCAST_USER_AGENT},
    ) as session:
        manager = JobManager(
            config=config,
            job_config=job_config,
            repository=repository,
            session=session,
        )
        for episode_id in episode_ids:
            manager.enqueue_download(episode_id)

        try:
            return await manager.run_to_completion()
        except ImportJobError as e:
            # Report first; settling abandoned work can take a while
            print(f"\nImport failed: {e}")
            await manager.wait_abandoned()
            raise


def run_import(args, config: Config):
    """
    Import the episodes given on the command line.

    Verifies the import directories (creating them when `args.create_dirs` is set), then downloads, transcribes and stores every episode in `args.episode_ids`. With `args.skip_existing`, episodes that already have a stored transcript are left out of the cohort. Exits with status 1 when the directories are missing or the import fails.
    """
    if args.create_dirs:
        config.ensure_dirs()
    if not config.check_dirs():
        print("Import directories are missing; run 'check-dirs --create' first")
        for directory in config.import_directories:
            print(f"  - {directory}")
        sys.exit(1)

    job_config = ImportJobConfig.from_env()
    if args.reuse_cache:
        job_config.reuse_transcript_cache = True

    repository = create_repository_from_config(config)

    try:
        episode_ids = list(dict.fromkeys(args.episode_ids))
        if args.skip_existing:
            existing = set(repository.list_transcribed_episode_ids())
            skipped = [i for i in episode_ids if i in existing]
            episode_ids = [i for i in episode_ids if i not in existing]
            if skipped:
                print(f"Skipping {len(skipped)} already imported episodes")

        if not episode_ids:
            print("Nothing to import")
            return

        try:
            stats = asyncio.run(
                _import_episodes(config, job_config, repository, episode_ids)
            )
        except ImportJobError:
            sys.exit(1)

        print(f"\nImport complete:")
        print(f"  Downloaded: {stats.downloaded}")
        print(f"  Transcribed: {stats.transcribed}")
        print(f"  Stored: {stats.inserted}")
        print(f"  Duration: {stats.duration_seconds:.1f}s")

    finally:
        repository.close()


def check_dirs(args, config: Config):
    """
    Report whether the download, wav and transcript directories exist.

    With `args.create`, missing directories are created first. Exits with status 1 if any directory is still missing.
    """
    if args.create:
        config.ensure_dirs()

    for directory in config.import_directories:
        status = "ok" if os.path.isdir(directory) else "missing"
        print(f"  {directory}: {status}")

    if not config.check_dirs():
        sys.exit(1)


def init_db(args, config: Config):
    """Create the episodes and transcripts tables if they don't exist."""
    repository = create_repository_from_config(config, create_tables=True)
    try:
        print("Database tables are ready")
    finally:
        repository.close()


def show_transcript(args, config: Config):
    """
    Print the stored transcript of `args.episode_id`, one timed segment per line.

    Exits with status 1 if the episode has no stored transcript.
    """
    repository = create_repository_from_config(config)

    try:
        record = repository.get_transcript(args.episode_id)
        if record is None:
            print(f"No transcript stored for episode {args.episode_id}")
            sys.exit(1)

        print(f"\nEpisode {record.episode_id} ({record.language or 'unknown language'}):")
        for segment in record.segments:
            print(
                f"[{_format_ms(segment['start_ms'])} --> {_format_ms(segment['end_ms'])}] "
                f"{segment['text']}"
            )

    finally:
        repository.close()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Podcast episode import CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        help="Path to .env file",
        default=None,
    )
    parser.add_argument(
        "-l",
        "--log-level",
        help="Set log level (DEBUG, INFO, WARNING, ERROR)",
        default="INFO",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Import episodes by id",
    )
    run_parser.add_argument(
        "episode_ids",
        nargs="+",
        type=int,
        metavar="EPISODE_ID",
        help="Episode ids to import",
    )
    run_parser.add_argument(
        "--reuse-cache",
        action="store_true",
        help="Use cached transcripts instead of downloading and transcribing again",
    )
    run_parser.add_argument(
        "--skip-existing",
        action="store_true",
        help="Skip episodes that already have a stored transcript",
    )
    run_parser.add_argument(
        "--create-dirs",
        action="store_true",
        help="Create missing import directories",
    )

    # check-dirs command
    dirs_parser = subparsers.add_parser(
        "check-dirs",
        help="Check the import directories",
    )
    dirs_parser.add_argument(
        "--create",
        action="store_true",
        help="Create missing directories",
    )

    # init-db command
    subparsers.add_parser(
        "init-db",
        help="Create database tables",
    )

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Print a stored transcript",
    )
    show_parser.add_argument("episode_id", type=int, help="Episode id")

    return parser


def main():
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Load configuration
    config = Config(env_file=args.env_file)

    # Route to appropriate command
    commands = {
        "run": run_import,
        "check-dirs": check_dirs,
        "init-db": init_db,
        "show": show_transcript,
    }

    command_func = commands.get(args.command)
    if command_func:
        command_func(args, config)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

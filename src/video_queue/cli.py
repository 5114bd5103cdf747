import argparse
import asyncio
import logging
import os
import sys

from databases import Database
from sqlalchemy import create_engine

from .api.db_models import Base
from .config import resolve_config
from .errors import VideoQueueError
from .models import AppConfig
from .queue.sql_backend import VideoStore
from .service import VideoQueueService


def init_db(config: AppConfig) -> None:
    """Create the videos table and its indexes if missing."""
    engine = create_engine(config.database.url)
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()


async def _with_service(config: AppConfig, fn):
    database = Database(config.database.url)
    await database.connect()
    try:
        service = VideoQueueService(VideoStore(database), config=config)
        await service.startup()
        return await fn(service)
    finally:
        await database.disconnect()


def run_scan(config: AppConfig) -> int:
    videos = asyncio.run(_with_service(config, lambda s: s.discover()))
    for video in videos:
        print(f"{video.originalSize:>14}  {video.path}")
    print(f"{len(videos)} unprocessed video(s) under {config.discovery.videos_dir}")
    return len(videos)


def run_queue(config: AppConfig, page=None, page_size=None, status=None) -> None:
    view = asyncio.run(
        _with_service(config, lambda s: s.get_queue(page, page_size, status))
    )
    p = view.pagination
    print("\n" + "=" * 60)
    print(f"QUEUE  page {p.page}/{p.pages}  ({p.total} total, {p.pageSize} per page)")
    print("=" * 60)
    for name in ("processing", "pending", "completed", "other"):
        videos = getattr(view.queue, name)
        if not videos:
            continue
        print(f"{name.capitalize()}:")
        for video in videos:
            print(f"  {video.id:<30} {video.path}")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(
        prog="video-queue", description="Video processing queue service"
    )
    parser.add_argument("--db", dest="database_url", type=str, help="Database URL override")
    parser.add_argument("--videos-dir", type=str, help="Directory to scan for videos")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # SERVE
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    # INIT-DB
    subparsers.add_parser("init-db", help="Create the videos table")

    # SCAN
    subparsers.add_parser("scan", help="List videos on disk that are not queued")

    # QUEUE
    queue_parser = subparsers.add_parser("queue", help="Show one page of the queue")
    queue_parser.add_argument("--page", type=int, help="Page number (1-based)")
    queue_parser.add_argument("--page-size", type=int, help="Items per page")
    queue_parser.add_argument("--status", type=str, help="Only this status")

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Convert args to dict, filtering None
    cli_dict = {k: v for k, v in vars(args).items() if v is not None}

    try:
        if args.command == "serve":
            import uvicorn

            config = resolve_config(cli_dict)
            # The app module resolves its own config at import time
            os.environ["DATABASE_URL"] = config.database.url
            os.environ["VIDEOS_DIR"] = config.discovery.videos_dir
            uvicorn.run(
                "video_queue.api.main:app",
                host=config.server.host,
                port=config.server.port,
                log_level=args.log_level.lower(),
            )

        elif args.command == "init-db":
            config = resolve_config(cli_dict)
            init_db(config)
            print("Tables created.")

        elif args.command == "scan":
            run_scan(resolve_config(cli_dict))

        elif args.command == "queue":
            run_queue(resolve_config(cli_dict), args.page, args.page_size, args.status)

        else:
            parser.print_help()

    except VideoQueueError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Operator commands.

    reelmeals-admin analyze-existing [--status failed] [--video-id ID ...]
    reelmeals-admin cleanup-failed
    reelmeals-admin cleanup-temp
    reelmeals-admin clear-cache VIDEO_ID
"""
import argparse
import asyncio
import sys
from typing import List, Optional

import httpx
import redis.asyncio as redis
import structlog

from shared.cache import AnalysisCache
from shared.config import BATCH_DELAY_SECONDS, REDIS_URL
from shared.database import VideoStore
from shared.log import configure_logging
from shared.models import VideoStatus
from shared.storage import BlobStorage

from .batch import BatchAnalyzer
from .main import build_pipeline
from .maintenance import cleanup_failed_videos, cleanup_temp_storage, clear_cached_analysis

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reelmeals-admin", description="ReelMeals video analysis tools")
    parser.add_argument("--redis-url", default=REDIS_URL)
    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser("analyze-existing", help="Re-analyze videos already in storage")
    analyze.add_argument("--video-id", action="append", dest="video_ids", help="Limit to this video (repeatable)")
    analyze.add_argument("--status", choices=[s.value for s in VideoStatus], help="Only videos in this status")
    analyze.add_argument("--delay", type=float, default=BATCH_DELAY_SECONDS, help="Seconds between videos")

    commands.add_parser("cleanup-failed", help="Delete video documents with status 'failed'")
    commands.add_parser("cleanup-temp", help="Delete temporary upload objects")

    clear = commands.add_parser("clear-cache", help="Drop the cached analysis for a video")
    clear.add_argument("video_id")
    return parser


async def run(args: argparse.Namespace) -> int:
    client = redis.from_url(args.redis_url, decode_responses=True)
    try:
        if args.command == "analyze-existing":
            async with httpx.AsyncClient(follow_redirects=True) as http_client:
                analyzer = BatchAnalyzer(build_pipeline(client, http_client), delay_seconds=args.delay)
                status = VideoStatus(args.status) if args.status else None
                report = await analyzer.run(video_ids=args.video_ids, status=status)
            for video_id, error in report.failed.items():
                print(f"FAILED  {video_id}: {error}")
            print(f"{len(report.succeeded)} succeeded, {len(report.failed)} failed, {len(report.skipped)} skipped")
            return 1 if report.failed else 0

        if args.command == "cleanup-failed":
            count = await cleanup_failed_videos(VideoStore(client))
            print(f"Deleted {count} failed videos")
        elif args.command == "cleanup-temp":
            count = await cleanup_temp_storage(BlobStorage())
            print(f"Deleted {count} temporary files")
        elif args.command == "clear-cache":
            removed = await clear_cached_analysis(AnalysisCache(client), args.video_id)
            print("Cleared" if removed else "No cache entry")
        return 0
    finally:
        await client.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())

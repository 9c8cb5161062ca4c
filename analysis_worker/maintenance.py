"""Housekeeping jobs for video documents, cache entries and scratch blobs."""
import structlog

from shared.cache import AnalysisCache
from shared.config import TEMP_PREFIX
from shared.database import VideoStore
from shared.models import VideoStatus
from shared.storage import BlobStorage

logger = structlog.get_logger(__name__)


async def cleanup_failed_videos(store: VideoStore) -> int:
    """Delete every video document whose status is ``failed``."""
    failed = await store.list_by_status(VideoStatus.FAILED)
    for video_id in failed:
        logger.info("Deleting failed video", video_id=video_id)
        await store.delete(video_id)
    logger.info("Cleaned up failed videos", count=len(failed))
    return len(failed)


async def cleanup_temp_storage(storage: BlobStorage, prefix: str = TEMP_PREFIX) -> int:
    """Delete temporary upload objects."""
    return await storage.delete_prefix(prefix)


async def clear_cached_analysis(cache: AnalysisCache, video_id: str) -> bool:
    """Drop a cached analysis so the next run recomputes it."""
    removed = await cache.delete(video_id)
    logger.info("Cleared cached analysis", video_id=video_id, removed=removed)
    return removed

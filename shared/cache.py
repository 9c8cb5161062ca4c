"""
Cache Module
Redis-backed cache of finished analyses, keyed by video id.

Entries never expire. Re-analysing a video whose file was replaced under the
same id keeps serving the old analysis until the entry is deleted.
"""

from typing import Optional

import redis.asyncio as redis
import structlog
from pydantic import ValidationError

from .models import RecipeAnalysis

logger = structlog.get_logger(__name__)


class AnalysisCache:
    """Analysis snapshots stored apart from the live video documents"""

    KEY_PREFIX = "analysis_cache"

    def __init__(self, client: redis.Redis):
        self.redis = client

    def _key(self, video_id: str) -> str:
        return f"{self.KEY_PREFIX}:{video_id}"

    async def get(self, video_id: str) -> Optional[RecipeAnalysis]:
        """Return the cached analysis, or None on a miss or unreadable entry"""
        try:
            data = await self.redis.get(self._key(video_id))
        except redis.RedisError as e:
            logger.warning("Cache get error", video_id=video_id, error=str(e))
            return None

        if not data:
            return None

        try:
            return RecipeAnalysis.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Discarding unreadable cache entry", video_id=video_id, error=str(e))
            return None

    async def put(self, video_id: str, analysis: RecipeAnalysis) -> None:
        """Store an analysis with no expiry"""
        await self.redis.set(self._key(video_id), analysis.model_dump_json(by_alias=True))

    async def delete(self, video_id: str) -> bool:
        """Remove an entry; True if one existed"""
        return bool(await self.redis.delete(self._key(video_id)))

"""
Database Module
Video documents stored as Redis hashes.

Each top-level document field is a hash field holding its JSON encoding, so an
update is a single atomic HSET on one key.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from .models import VideoStatus


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class VideoStore:
    """Video document store"""

    KEY_PREFIX = "video"

    def __init__(self, client: redis.Redis):
        self.redis = client

    def _key(self, video_id: str) -> str:
        return f"{self.KEY_PREFIX}:{video_id}"

    @staticmethod
    def _encode(fields: Dict[str, Any]) -> Dict[str, str]:
        return {name: json.dumps(value) for name, value in fields.items()}

    @staticmethod
    def _decode(raw: Dict[Any, Any]) -> Dict[str, Any]:
        decoded = {}
        for name, value in raw.items():
            if isinstance(name, bytes):
                name = name.decode()
            decoded[name] = json.loads(value)
        return decoded

    async def exists(self, video_id: str) -> bool:
        return bool(await self.redis.exists(self._key(video_id)))

    async def get(self, video_id: str) -> Optional[Dict[str, Any]]:
        """Get a video document, or None if it does not exist"""
        raw = await self.redis.hgetall(self._key(video_id))
        if not raw:
            return None
        document = self._decode(raw)
        document.setdefault("id", video_id)
        return document

    async def create(self, video_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create (or overwrite) a video document"""
        now = utcnow_iso()
        document = {
            "id": video_id,
            "status": VideoStatus.PENDING.value,
            "createdAt": now,
            "updatedAt": now,
            **fields,
        }
        key = self._key(video_id)
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            pipe.hset(key, mapping=self._encode(document))
            await pipe.execute()
        return document

    async def update(self, video_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into a document and stamp ``updatedAt``"""
        await self.redis.hset(
            self._key(video_id),
            mapping=self._encode({**fields, "updatedAt": utcnow_iso()}),
        )

    async def delete(self, video_id: str) -> bool:
        return bool(await self.redis.delete(self._key(video_id)))

    async def list_ids(self) -> List[str]:
        """All video ids, sorted"""
        ids = []
        async for key in self.redis.scan_iter(match=f"{self.KEY_PREFIX}:*"):
            if isinstance(key, bytes):
                key = key.decode()
            ids.append(key.split(":", 1)[1])
        return sorted(ids)

    async def list_by_status(self, status: VideoStatus) -> List[str]:
        """Ids of videos currently in ``status``"""
        matching = []
        for video_id in await self.list_ids():
            raw_status = await self.redis.hget(self._key(video_id), "status")
            if raw_status is not None and json.loads(raw_status) == status.value:
                matching.append(video_id)
        return matching

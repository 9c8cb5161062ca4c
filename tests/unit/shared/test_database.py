"""Unit tests for the video document store."""
import json
from unittest.mock import AsyncMock, MagicMock

from shared.database import VideoStore
from shared.models import VideoStatus


async def _keys(*keys):
    for key in keys:
        yield key


class TestVideoStore:
    """Tests for VideoStore."""

    async def test_get_missing(self, mock_redis_client):
        assert await VideoStore(mock_redis_client).get("vid") is None
        mock_redis_client.hgetall.assert_awaited_once_with("video:vid")

    async def test_get_decodes_fields(self, mock_redis_client):
        mock_redis_client.hgetall.return_value = {
            "status": '"active"',
            "ingredients": '[{"name": "salt"}]',
            "error": "null",
        }

        document = await VideoStore(mock_redis_client).get("vid")

        assert document == {"id": "vid", "status": "active", "ingredients": [{"name": "salt"}], "error": None}

    async def test_update_is_one_hset_with_timestamp(self, mock_redis_client):
        await VideoStore(mock_redis_client).update("vid", {"status": "failed", "error": "boom"})

        mock_redis_client.hset.assert_awaited_once()
        args, kwargs = mock_redis_client.hset.await_args
        assert args == ("video:vid",)
        mapping = kwargs["mapping"]
        assert json.loads(mapping["status"]) == "failed"
        assert json.loads(mapping["error"]) == "boom"
        assert "updatedAt" in mapping

    async def test_create_replaces_document(self, mock_redis_client):
        pipe = MagicMock()
        pipe.__aenter__ = AsyncMock(return_value=pipe)
        pipe.__aexit__ = AsyncMock(return_value=False)
        pipe.execute = AsyncMock(return_value=[1, 5])
        mock_redis_client.pipeline = MagicMock(return_value=pipe)

        document = await VideoStore(mock_redis_client).create("vid", {"storagePath": "videos/vid.mp4"})

        assert document["status"] == VideoStatus.PENDING.value
        assert document["storagePath"] == "videos/vid.mp4"
        pipe.delete.assert_called_once_with("video:vid")
        pipe.hset.assert_called_once()
        pipe.execute.assert_awaited_once()

    async def test_list_by_status(self, mock_redis_client):
        mock_redis_client.scan_iter = lambda match: _keys("video:b", "video:a", "video:c")
        statuses = {"video:a": '"failed"', "video:b": '"active"', "video:c": '"failed"'}
        mock_redis_client.hget = AsyncMock(side_effect=lambda key, field: statuses[key])

        store = VideoStore(mock_redis_client)

        assert await store.list_ids() == ["a", "b", "c"]
        assert await store.list_by_status(VideoStatus.FAILED) == ["a", "c"]

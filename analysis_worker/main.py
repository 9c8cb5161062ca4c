"""Analysis worker: runs the pipeline for new uploads announced on a Redis stream."""
import asyncio
import os
from typing import Optional

import httpx
import redis.asyncio as redis
import structlog
from pydantic import ValidationError

from shared.cache import AnalysisCache
from shared.config import REDIS_URL, TRACING_ENABLED, VIDEO_PREFIX
from shared.database import VideoStore
from shared.log import configure_logging
from shared.models import StorageEvent
from shared.storage import BlobStorage, video_id_from_object_path
from shared.tracing import setup_tracing

from .ai_providers import GeminiProvider
from .pipeline import VideoAnalysisPipeline
from .recipe_extractor import RecipeExtractor

logger = structlog.get_logger(__name__)

STORAGE_EVENTS_STREAM = "queue:storage_events"
VIDEO_EXTENSIONS = (".mp4", ".mov", ".m4v", ".webm")


def is_trackable_video(event: StorageEvent, prefix: str = VIDEO_PREFIX) -> bool:
    """Only finalized objects under the videos prefix that are actually videos."""
    if not event.name.startswith(prefix) or event.name.endswith("/"):
        return False
    if event.content_type:
        return event.content_type.startswith("video/")
    return event.name.lower().endswith(VIDEO_EXTENSIONS)


class AIWorker:
    """Consumes storage-finalize events and analyzes the uploaded videos."""

    def __init__(self, pipeline: VideoAnalysisPipeline, client: redis.Redis):
        self.pipeline = pipeline
        self.redis = client
        self.group_name = "analysis-workers"
        self.consumer_name = f"consumer-{os.getpid()}"

    async def ensure_group(self):
        """Create the consumer group if it is missing."""
        try:
            await self.redis.xgroup_create(
                STORAGE_EVENTS_STREAM,
                self.group_name,
                id="$",
                mkstream=True
            )
        except redis.ResponseError as e:
            if "already exists" not in str(e):
                raise

    async def run(self):
        """Main worker loop."""
        logger.info("Analysis worker started", consumer=self.consumer_name)
        await self.ensure_group()

        while True:
            try:
                processed = await self.process_next_event()
                if not processed:
                    await asyncio.sleep(1)
            except redis.RedisError as e:
                logger.error("Error in worker loop", error=str(e))
                await asyncio.sleep(5)

    async def process_next_event(self) -> bool:
        """Handle one stream message. Returns True if a message was read."""
        messages = await self.redis.xreadgroup(
            groupname=self.group_name,
            consumername=self.consumer_name,
            streams={STORAGE_EVENTS_STREAM: ">"},
            count=1,
            block=5000,
        )

        if not messages:
            return False

        stream_name, stream_messages = messages[0]
        message_id, fields = stream_messages[0]

        try:
            event = StorageEvent.model_validate(fields)
        except ValidationError as e:
            logger.warning("Invalid storage event", fields=fields, error=str(e))
            await self._ack_message(stream_name, message_id)
            return True

        try:
            await self.handle_event(event)
        except Exception as e:
            # the pipeline already recorded the failure on the video document
            logger.error("Storage event failed", object_name=event.name, error=str(e))
        finally:
            await self._ack_message(stream_name, message_id)

        return True

    async def handle_event(self, event: StorageEvent) -> None:
        """Run the pipeline for a finalized upload; non-video objects are ignored."""
        if not is_trackable_video(event):
            logger.debug("Ignoring non-video object", object_name=event.name)
            return

        video_id = video_id_from_object_path(event.name, VIDEO_PREFIX)
        logger.info("New video upload", video_id=video_id, object_name=event.name)
        await self.pipeline.process(video_id, object_path=event.name)

    async def _ack_message(self, stream: str, message_id: str):
        """Acknowledge message processing."""
        await self.redis.xack(stream, self.group_name, message_id)


def build_pipeline(client: redis.Redis, http_client: httpx.AsyncClient, ai_provider=None) -> VideoAnalysisPipeline:
    """Wire the pipeline from environment configuration."""
    return VideoAnalysisPipeline(
        store=VideoStore(client),
        cache=AnalysisCache(client),
        storage=BlobStorage(),
        extractor=RecipeExtractor(ai_provider or GeminiProvider()),
        http_client=http_client,
    )


async def main(redis_url: Optional[str] = None):
    """Main entry point."""
    configure_logging()
    if TRACING_ENABLED:
        setup_tracing("reelmeals-analysis-worker")
    client = redis.from_url(redis_url or REDIS_URL, decode_responses=True)

    async with httpx.AsyncClient(follow_redirects=True) as http_client:
        worker = AIWorker(build_pipeline(client, http_client), client)
        try:
            await worker.run()
        finally:
            await client.aclose()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()

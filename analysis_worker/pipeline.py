"""
Video Analysis Pipeline
cache lookup -> fetch video -> plan chunks -> analyze each chunk (with retry)
-> merge -> persist -> cache write

Status transitions on the video document:
    pending -> processing -> active
    processing -> failed   (error message recorded, exception re-raised)
"""
from typing import List, Optional

import httpx
import structlog
from opentelemetry import trace
from prometheus_client import Counter

from shared.cache import AnalysisCache
from shared.config import DOWNLOAD_TIMEOUT_SECONDS, MAX_RETRIES, RETRY_DELAY_SECONDS, VIDEO_PREFIX
from shared.database import VideoStore
from shared.errors import VideoFetchError, VideoNotFoundError
from shared.models import RecipeAnalysis, VideoStatus
from shared.storage import BlobStorage

from .backoff import retry_with_backoff
from .chunking import ChunkPlanner
from .merger import merge_analyses
from .parser import ResponseParser
from .recipe_extractor import RecipeExtractor
from .validation import score_cooking_content

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

ANALYSIS_COUNT = Counter(
    "reelmeals_video_analyses_total",
    "Video analysis pipeline runs",
    ["outcome"]
)
CHUNK_COUNT = Counter(
    "reelmeals_analysis_chunks_total",
    "Video chunks sent to the AI provider"
)


class VideoAnalysisPipeline:
    """Runs the full analysis for one video at a time. Collaborators are injected."""

    def __init__(
        self,
        store: VideoStore,
        cache: AnalysisCache,
        storage: BlobStorage,
        extractor: RecipeExtractor,
        http_client: httpx.AsyncClient,
        planner: Optional[ChunkPlanner] = None,
        parser: Optional[ResponseParser] = None,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY_SECONDS,
        video_prefix: str = VIDEO_PREFIX,
    ):
        self.store = store
        self.cache = cache
        self.storage = storage
        self.extractor = extractor
        self.http_client = http_client
        self.planner = planner or ChunkPlanner()
        self.parser = parser or ResponseParser()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.video_prefix = video_prefix

    async def process(self, video_id: str, object_path: Optional[str] = None) -> Optional[RecipeAnalysis]:
        """
        Analyze a video and write the result onto its document.

        Args:
            video_id: Video document id
            object_path: Object path of the binary; defaults to the document's
                         ``storagePath`` or ``videos/{video_id}.mp4``

        Returns:
            The analysis, or None when there is no document to update yet

        Raises:
            Any error raised after the status was set to ``processing``; the
            document is marked ``failed`` first.
        """
        log = logger.bind(video_id=video_id)

        with tracer.start_as_current_span("analyze_video") as span:
            span.set_attribute("video.id", video_id)

            cached = await self.cache.get(video_id)
            if cached is not None:
                log.info("Cache hit, skipping AI analysis")
                await self.store.update(video_id, {
                    **cached.to_document(),
                    "status": VideoStatus.ACTIVE.value,
                    "error": None,
                })
                ANALYSIS_COUNT.labels(outcome="cache_hit").inc()
                return cached

            video = await self.store.get(video_id)
            if video is None:
                log.info("No document for video yet, skipping")
                ANALYSIS_COUNT.labels(outcome="skipped").inc()
                return None

            await self.store.update(video_id, {"status": VideoStatus.PROCESSING.value})

            try:
                path = object_path or video.get("storagePath") or f"{self.video_prefix}{video_id}.mp4"
                data = await self.fetch_video(path)
                span.set_attribute("video.bytes", len(data))

                analysis = await self.analyze_bytes(data, video_id=video_id)
                validation = score_cooking_content(analysis)

                await self.store.update(video_id, {
                    **analysis.to_document(),
                    "validationDetails": validation.model_dump(by_alias=True),
                    "status": VideoStatus.ACTIVE.value,
                    "error": None,
                })
                await self.cache.put(video_id, analysis)
            except Exception as e:
                log.error("Video analysis failed", error=str(e), exc_info=True)
                await self.store.update(video_id, {
                    "status": VideoStatus.FAILED.value,
                    "error": str(e) or type(e).__name__,
                })
                ANALYSIS_COUNT.labels(outcome="failed").inc()
                raise

            log.info(
                "Video analysis complete",
                title=analysis.title,
                ingredients=len(analysis.ingredients),
                steps=len(analysis.instructions),
                validation_score=validation.score,
            )
            ANALYSIS_COUNT.labels(outcome="completed").inc()
            return analysis

    async def fetch_video(self, object_path: str) -> bytes:
        """Download a video through a short-lived presigned URL."""
        if not await self.storage.exists(object_path):
            raise VideoNotFoundError(f"Video file not found in storage: {object_path}")

        url = self.storage.get_read_url(object_path)
        try:
            response = await self.http_client.get(url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
        except httpx.TransportError as e:
            raise VideoFetchError(f"Failed to download video: {e}") from e
        if response.is_error:
            raise VideoFetchError(
                f"Failed to download video: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        data = response.content
        if not data:
            raise VideoFetchError("Failed to download video: empty body", status_code=response.status_code)
        return data

    async def analyze_bytes(self, data: bytes, video_id: Optional[str] = None) -> RecipeAnalysis:
        """Chunk, analyze sequentially and merge. No storage side effects."""
        ranges = self.planner.plan(len(data))
        log = logger.bind(video_id=video_id, total_bytes=len(data), chunks=len(ranges))
        if len(ranges) > 1:
            log.info("Video exceeds chunk limit, processing in chunks")

        analyses: List[RecipeAnalysis] = []
        for index, chunk_range in enumerate(ranges):
            chunk = data[chunk_range.start:chunk_range.end]
            is_first = index == 0
            is_last = index == len(ranges) - 1

            with tracer.start_as_current_span("analyze_chunk") as span:
                span.set_attribute("chunk.index", index)
                span.set_attribute("chunk.bytes", chunk_range.size)
                log.info("Processing chunk", chunk=index + 1, chunk_bytes=chunk_range.size)

                raw = await retry_with_backoff(
                    lambda: self.extractor.analyze_chunk(chunk, is_first, is_last),
                    max_retries=self.max_retries,
                    initial_delay=self.retry_delay,
                )
                CHUNK_COUNT.inc()
                analyses.append(self.parser.parse(raw))

        if len(analyses) == 1:
            return analyses[0]
        return merge_analyses(analyses)

"""
Batch re-analysis of videos that already exist in storage.

Each video is downloaded into a scratch directory owned by the run, analyzed,
and written back. A failure is recorded on that video and the run moves on.
The scratch directory is removed when the run ends, whatever happened.
"""
import asyncio
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from shared.config import BATCH_DELAY_SECONDS, VIDEO_PREFIX
from shared.errors import VideoNotFoundError
from shared.models import VideoStatus

from .pipeline import VideoAnalysisPipeline
from .validation import score_cooking_content

logger = structlog.get_logger(__name__)


@dataclass
class BatchReport:
    """Outcome of a batch run."""
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.skipped)


class BatchAnalyzer:
    """Re-runs the chunked analysis over existing videos, one at a time."""

    def __init__(
        self,
        pipeline: VideoAnalysisPipeline,
        delay_seconds: float = BATCH_DELAY_SECONDS,
        scratch_root: Optional[str] = None,
        sleep=asyncio.sleep,
    ):
        self.pipeline = pipeline
        self.store = pipeline.store
        self.cache = pipeline.cache
        self.storage = pipeline.storage
        self.delay_seconds = delay_seconds
        self.scratch_root = scratch_root
        self.sleep = sleep

    async def run(self, video_ids: Optional[List[str]] = None, status: Optional[VideoStatus] = None) -> BatchReport:
        """
        Analyze ``video_ids`` (default: every video, optionally only those in ``status``).
        """
        if video_ids is None:
            if status is not None:
                video_ids = await self.store.list_by_status(status)
            else:
                video_ids = await self.store.list_ids()

        logger.info("Starting batch analysis", videos=len(video_ids))
        report = BatchReport()
        scratch_dir = tempfile.mkdtemp(prefix="reelmeals-batch-", dir=self.scratch_root)

        try:
            for index, video_id in enumerate(video_ids):
                if index > 0 and self.delay_seconds:
                    await self.sleep(self.delay_seconds)
                await self._analyze_one(video_id, scratch_dir, report)
        finally:
            shutil.rmtree(scratch_dir, ignore_errors=True)

        logger.info(
            "Batch analysis finished",
            succeeded=len(report.succeeded),
            failed=len(report.failed),
            skipped=len(report.skipped),
        )
        return report

    async def _analyze_one(self, video_id: str, scratch_dir: str, report: BatchReport) -> None:
        log = logger.bind(video_id=video_id)

        video = await self.store.get(video_id)
        if video is None:
            log.info("No document for video, skipping")
            report.skipped.append(video_id)
            return

        await self.store.update(video_id, {"status": VideoStatus.PROCESSING.value})
        local_path = os.path.join(scratch_dir, f"{video_id}.mp4")

        try:
            object_path = video.get("storagePath") or f"{VIDEO_PREFIX}{video_id}.mp4"
            if not await self.storage.exists(object_path):
                raise VideoNotFoundError(f"Video file not found in storage: {object_path}")

            await self.storage.download_to(object_path, local_path)
            data = Path(local_path).read_bytes()

            analysis = await self.pipeline.analyze_bytes(data, video_id=video_id)
            await self.store.update(video_id, {
                **analysis.to_document(),
                "validationDetails": score_cooking_content(analysis).model_dump(by_alias=True),
                "status": VideoStatus.ACTIVE.value,
                "error": None,
            })
            await self.cache.put(video_id, analysis)
            report.succeeded.append(video_id)
            log.info("Analyzed video", title=analysis.title)
        except Exception as e:
            message = str(e) or type(e).__name__
            log.error("Failed to analyze video", error=message)
            await self.store.update(video_id, {"status": VideoStatus.FAILED.value, "error": message})
            report.failed[video_id] = message
        finally:
            if os.path.exists(local_path):
                os.remove(local_path)

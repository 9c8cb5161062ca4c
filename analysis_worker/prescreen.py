"""
Pre-screening Gate
A single cheap classification call that decides whether the full analysis
prompt is worth sending.
"""
import json
import re

import structlog
from pydantic import ValidationError

from shared.config import PRESCREEN_CONFIDENCE_THRESHOLD
from shared.errors import PreScreenError
from shared.models import PreScreenOutcome, PreScreenResult, RecipeAnalysis

from .ai_providers import AIProvider
from .prompts import FULL_ANALYSIS_PROMPT, PRESCREEN_PROMPT

logger = structlog.get_logger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*")


def clean_ai_response(text: str) -> str:
    """Strip markdown code fences the model sometimes wraps JSON in."""
    return _CODE_FENCE.sub("", text).strip()


class PreScreener:
    """Classifies a video and only runs the full analysis for confident cooking videos."""

    def __init__(
        self,
        ai_provider: AIProvider,
        confidence_threshold: float = PRESCREEN_CONFIDENCE_THRESHOLD,
    ):
        self.ai_provider = ai_provider
        self.confidence_threshold = confidence_threshold

    def passes(self, result: PreScreenResult) -> bool:
        return result.is_cooking_video and result.confidence >= self.confidence_threshold

    async def classify(self, video: bytes) -> PreScreenResult:
        text = await self.ai_provider.generate_from_video(PRESCREEN_PROMPT, video)
        try:
            return PreScreenResult.model_validate(json.loads(clean_ai_response(text)))
        except (ValueError, ValidationError) as e:
            raise PreScreenError(f"Invalid pre-screen response: {e}") from e

    async def analyze(self, video: bytes) -> RecipeAnalysis:
        text = await self.ai_provider.generate_from_video(FULL_ANALYSIS_PROMPT, video)
        try:
            return RecipeAnalysis.from_model_output(json.loads(clean_ai_response(text)))
        except (ValueError, ValidationError) as e:
            raise PreScreenError(f"Invalid analysis response: {e}") from e

    async def screen(self, video: bytes) -> PreScreenOutcome:
        """Classify ``video``; run the full analysis only when it passes the gate."""
        result = await self.classify(video)

        if not self.passes(result):
            logger.info(
                "Video rejected by pre-screen",
                is_cooking_video=result.is_cooking_video,
                confidence=result.confidence,
                threshold=self.confidence_threshold,
            )
            return PreScreenOutcome(**result.model_dump(), analysis=None)

        logger.info("Video passed pre-screen", confidence=result.confidence)
        analysis = await self.analyze(video)
        return PreScreenOutcome(**result.model_dump(), analysis=analysis)

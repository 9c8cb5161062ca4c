"""Chunk-level recipe analysis requests."""
from typing import Optional

import structlog

from .ai_providers import AIProvider
from .prompts import CHUNK_ANALYSIS_PROMPT, CONTINUATION_PREFIX, PARTIAL_VIDEO_PREFIX

logger = structlog.get_logger(__name__)


class RecipeExtractor:
    """Asks the AI provider to analyze one chunk of a cooking video."""

    def __init__(self, ai_provider: AIProvider, prompt_template: str = CHUNK_ANALYSIS_PROMPT):
        self.ai_provider = ai_provider
        self.prompt_template = prompt_template

    def build_prompt(
        self,
        is_first_chunk: bool,
        is_last_chunk: bool,
        prompt_template: Optional[str] = None,
    ) -> str:
        """Prefix the template with context about where the chunk sits in the video."""
        context_prefix = ""
        if not is_first_chunk:
            context_prefix = CONTINUATION_PREFIX
        if not is_last_chunk:
            context_prefix += PARTIAL_VIDEO_PREFIX
        return f"{context_prefix}{prompt_template or self.prompt_template}"

    async def analyze_chunk(
        self,
        chunk: bytes,
        is_first_chunk: bool,
        is_last_chunk: bool,
        prompt_template: Optional[str] = None,
    ) -> str:
        """Return the raw model text for one chunk. Provider errors propagate."""
        prompt = self.build_prompt(is_first_chunk, is_last_chunk, prompt_template)
        logger.info(
            "Analyzing video chunk",
            chunk_bytes=len(chunk),
            is_first_chunk=is_first_chunk,
            is_last_chunk=is_last_chunk,
        )
        return await self.ai_provider.generate_from_video(prompt, chunk)

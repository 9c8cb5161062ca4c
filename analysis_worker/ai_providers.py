"""AI provider implementations for video analysis."""
from abc import ABC, abstractmethod
from typing import Optional

import structlog
from google import genai
from google.genai import types

from shared.config import GEMINI_API_KEY, GEMINI_MODEL
from shared.errors import AIProviderError, EmptyResponseError

logger = structlog.get_logger(__name__)

VIDEO_MIME_TYPE = "video/mp4"


class AIProvider(ABC):
    """Abstract base class for AI providers."""

    @abstractmethod
    async def generate_from_video(
        self,
        prompt: str,
        video: bytes,
        mime_type: str = VIDEO_MIME_TYPE,
    ) -> str:
        """Send a text prompt plus inline video bytes and return the raw text answer."""
        pass


class GeminiProvider(AIProvider):
    """Google Gemini provider using inline video parts."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key or GEMINI_API_KEY
        self.model = model or GEMINI_MODEL
        if client is None:
            if not self.api_key:
                raise ValueError("GEMINI_API_KEY environment variable required")
            client = genai.Client(api_key=self.api_key)
        self.client = client

    async def generate_from_video(
        self,
        prompt: str,
        video: bytes,
        mime_type: str = VIDEO_MIME_TYPE,
    ) -> str:
        """Generate content from a prompt and an inline video payload."""
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part.from_bytes(data=video, mime_type=mime_type),
                ],
            )
        ]

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
            )
        except Exception as e:
            logger.error("Gemini API call failed", model=self.model, error=str(e))
            raise AIProviderError(f"Gemini API error: {e}") from e

        text = response.text
        if not text or not text.strip():
            raise EmptyResponseError("Gemini API error: Empty response from Gemini API")

        logger.debug("Gemini API call succeeded", model=self.model, response_chars=len(text))
        return text

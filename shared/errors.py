"""Error types raised by the video analysis core."""
from typing import Optional


class VideoAnalysisError(Exception):
    """Base class for analysis failures"""
    pass


class ChunkConfigurationError(VideoAnalysisError, ValueError):
    """Chunk sizing policy cannot produce a positive stride"""
    pass


class AIProviderError(VideoAnalysisError):
    """The generative model call failed"""
    pass


class EmptyResponseError(AIProviderError):
    """The generative model returned no text"""
    pass


class ResponseParseError(VideoAnalysisError):
    """Model output could not be turned into an analysis"""
    pass


class VideoFetchError(VideoAnalysisError):
    """Downloading the video binary failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class VideoNotFoundError(VideoAnalysisError):
    """The video binary does not exist in object storage"""
    pass


class PreScreenError(VideoAnalysisError):
    """The pre-screening response was not usable"""
    pass

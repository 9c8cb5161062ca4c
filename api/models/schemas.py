"""Pydantic models for API responses."""
from typing import Any, Dict, Optional

from pydantic import BaseModel

from shared.models import CamelModel


class AnalyzeResponse(CamelModel):
    """Result of an analyze or re-analyze request."""
    success: bool
    video_id: Optional[str] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response model"""
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    timestamp: str
    services: Dict[str, Any]

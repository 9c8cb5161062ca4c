"""Video analysis routes."""
from typing import Optional

import httpx
import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from api.config import ANALYZE_RATE_LIMIT, PRESCREEN_RATE_LIMIT
from api.models.schemas import AnalyzeResponse, ErrorResponse
from api.rate_limiter import limiter
from shared.config import DOWNLOAD_TIMEOUT_SECONDS
from shared.errors import AIProviderError, PreScreenError, VideoNotFoundError
from shared.models import AnalyzeVideoRequest, PreScreenRequest

logger = structlog.get_logger(__name__)

router = APIRouter()


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def _run_analysis(request: Request, video_id: str, object_path: Optional[str] = None):
    pipeline = request.app.state.pipeline
    try:
        analysis = await pipeline.process(video_id, object_path=object_path)
    except VideoNotFoundError as e:
        return _failure(404, str(e))
    except Exception as e:
        logger.error("Video analysis request failed", video_id=video_id, error=str(e))
        return _failure(500, str(e) or type(e).__name__)

    if analysis is None:
        return _failure(404, f"Video document not found: {video_id}")

    return AnalyzeResponse(success=True, video_id=video_id)


@router.post(
    "/videos/analyze",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    responses={400: {"model": AnalyzeResponse}, 404: {"model": AnalyzeResponse}, 500: {"model": AnalyzeResponse}},
)
@limiter.limit(ANALYZE_RATE_LIMIT)
async def analyze_video(request: Request, analyze_req: AnalyzeVideoRequest):
    """Analyze an uploaded video and write the recipe onto its document.

    - **videoId**: id of the video document
    - **videoUrl**: storage URL (or object path) of the uploaded binary
    """
    if not analyze_req.video_id or not analyze_req.video_url:
        return _failure(400, "Missing required fields: videoId and videoUrl")

    storage = request.app.state.storage
    object_path = storage.resolve_object_path(analyze_req.video_url)
    logger.info("Analyze request", video_id=analyze_req.video_id, object_path=object_path)
    return await _run_analysis(request, analyze_req.video_id, object_path)


@router.post(
    "/videos/{video_id}/reanalyze",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    responses={404: {"model": AnalyzeResponse}, 500: {"model": AnalyzeResponse}},
)
@limiter.limit(ANALYZE_RATE_LIMIT)
async def reanalyze_video(request: Request, video_id: str):
    """Drop the cached analysis and run the pipeline again."""
    if not await request.app.state.store.exists(video_id):
        return _failure(404, f"Video document not found: {video_id}")

    await request.app.state.cache.delete(video_id)
    return await _run_analysis(request, video_id)


@router.post(
    "/videos/prescreen",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(PRESCREEN_RATE_LIMIT)
async def prescreen_video(request: Request, prescreen_req: PreScreenRequest):
    """Classify a video and, for confident cooking videos, return the full analysis."""
    if not prescreen_req.video_url:
        return JSONResponse(status_code=400, content={"error": "Video URL is required"})

    try:
        response = await request.app.state.http_client.get(
            prescreen_req.video_url, timeout=DOWNLOAD_TIMEOUT_SECONDS
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Pre-screen fetch failed", video_url=prescreen_req.video_url, error=str(e))
        return JSONResponse(
            status_code=400,
            content={"error": "Failed to fetch video", "details": str(e)},
        )

    try:
        outcome = await request.app.state.prescreener.screen(response.content)
    except (AIProviderError, PreScreenError) as e:
        logger.error("Pre-screen failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"error": "AI Processing Error", "details": str(e)},
        )

    return outcome.model_dump(mode="json", by_alias=True)


@router.get("/videos/{video_id}")
async def get_video(request: Request, video_id: str):
    """Get a video document, including its analysis once processed."""
    video = await request.app.state.store.get(video_id)

    if not video:
        raise HTTPException(status_code=404, detail="Video not found")

    return video


@router.delete("/videos/{video_id}/analysis-cache")
async def clear_analysis_cache(request: Request, video_id: str):
    """Remove the cached analysis so the next run calls the AI again."""
    removed = await request.app.state.cache.delete(video_id)
    return {"success": True, "videoId": video_id, "removed": removed}

"""
FastAPI Application for ReelMeals video analysis
HTTP triggers for the analysis pipeline, pre-screening and maintenance.
"""

import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
import redis.asyncio as redis
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from analysis_worker.ai_providers import GeminiProvider
from analysis_worker.pipeline import VideoAnalysisPipeline
from analysis_worker.prescreen import PreScreener
from analysis_worker.recipe_extractor import RecipeExtractor
from shared import __version__
from shared.cache import AnalysisCache
from shared.database import VideoStore
from shared.log import configure_logging
from shared.storage import BlobStorage
from shared.tracing import setup_tracing

from .config import ALLOWED_HOSTS, ALLOWED_ORIGINS, API_HOST, API_PORT, DEBUG, REDIS_URL, TRACING_ENABLED
from .models.schemas import HealthResponse
from .rate_limiter import limiter
from .routes import videos

configure_logging("DEBUG" if DEBUG else None)

logger = structlog.get_logger()

VERSION = __version__

# Prometheus metrics
REQUEST_COUNT = Counter(
    'reelmeals_api_requests_total',
    'Total requests',
    ['method', 'endpoint', 'status']
)
REQUEST_DURATION = Histogram(
    'reelmeals_api_request_duration_seconds',
    'Request duration',
    ['method', 'endpoint']
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    logger.info("Starting ReelMeals analysis API")
    client = redis.from_url(REDIS_URL, decode_responses=True)
    http_client = httpx.AsyncClient(follow_redirects=True)
    ai_provider = GeminiProvider()

    app.state.redis = client
    app.state.http_client = http_client
    app.state.store = VideoStore(client)
    app.state.cache = AnalysisCache(client)
    app.state.storage = BlobStorage()
    app.state.pipeline = VideoAnalysisPipeline(
        store=app.state.store,
        cache=app.state.cache,
        storage=app.state.storage,
        extractor=RecipeExtractor(ai_provider),
        http_client=http_client,
    )
    app.state.prescreener = PreScreener(ai_provider)
    if TRACING_ENABLED:
        setup_tracing("reelmeals-analysis-api")
    yield
    # Shutdown
    logger.info("Shutting down ReelMeals analysis API")
    await http_client.aclose()
    await client.aclose()


app = FastAPI(
    title="ReelMeals Video Analysis API",
    description="AI recipe analysis for uploaded cooking videos",
    version=VERSION,
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add middlewares
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in ALLOWED_ORIGINS.split(",")],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=[host.strip() for host in ALLOWED_HOSTS.split(",")])


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with structured logging"""
    start_time = time.time()
    request_id = str(uuid.uuid4())

    # Add request ID to context
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_ip=get_remote_address(request)
    )

    try:
        response = await call_next(request)
        duration = time.time() - start_time

        # Record metrics against the route template, not the raw path
        endpoint = _endpoint_label(request)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code
        ).inc()
        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(duration)

        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration=duration
        )

        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        logger.error("Request failed", error=str(e))
        raise


if TRACING_ENABLED:
    FastAPIInstrumentor.instrument_app(app)

app.include_router(videos.router, prefix="/api", tags=["videos"])


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint"""
    try:
        redis_ok = bool(await request.app.state.redis.ping())
    except redis.RedisError:
        redis_ok = False

    return HealthResponse(
        status="healthy" if redis_ok else "degraded",
        version=VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        services={"redis": redis_ok}
    )


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def run():
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run()

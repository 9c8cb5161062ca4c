"""pytest configuration and fixtures."""
import json
import os
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

# Set test environment variables before imports
os.environ["REDIS_URL"] = "redis://localhost:6379/1"  # Use DB 1 for tests
os.environ["TESTING"] = "true"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["STORAGE_BUCKET"] = "reelmeals-test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TRACING_ENABLED"] = "false"

from analysis_worker.ai_providers import AIProvider  # noqa: E402
from analysis_worker.pipeline import VideoAnalysisPipeline  # noqa: E402
from analysis_worker.prescreen import PreScreener  # noqa: E402
from analysis_worker.recipe_extractor import RecipeExtractor  # noqa: E402
from shared.models import RecipeAnalysis, VideoStatus  # noqa: E402
from shared.storage import BlobStorage  # noqa: E402

MiB = 1024 * 1024


class FakeVideoStore:
    """In-memory stand-in for VideoStore."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.updates: List[tuple] = []

    async def exists(self, video_id: str) -> bool:
        return video_id in self.documents

    async def get(self, video_id: str) -> Optional[dict]:
        document = self.documents.get(video_id)
        if document is None:
            return None
        return {"id": video_id, **json.loads(json.dumps(document))}

    async def create(self, video_id: str, fields: dict) -> dict:
        self.documents[video_id] = {"status": VideoStatus.PENDING.value, **fields}
        return self.documents[video_id]

    async def update(self, video_id: str, fields: dict) -> None:
        self.updates.append((video_id, dict(fields)))
        self.documents.setdefault(video_id, {}).update(fields)

    async def delete(self, video_id: str) -> bool:
        return self.documents.pop(video_id, None) is not None

    async def list_ids(self) -> List[str]:
        return sorted(self.documents)

    async def list_by_status(self, status: VideoStatus) -> List[str]:
        return sorted(i for i, doc in self.documents.items() if doc.get("status") == status.value)

    def statuses(self, video_id: str) -> List[str]:
        return [fields["status"] for vid, fields in self.updates if vid == video_id and "status" in fields]


class FakeAnalysisCache:
    """In-memory stand-in for AnalysisCache."""

    def __init__(self):
        self.entries: Dict[str, RecipeAnalysis] = {}

    async def get(self, video_id: str) -> Optional[RecipeAnalysis]:
        return self.entries.get(video_id)

    async def put(self, video_id: str, analysis: RecipeAnalysis) -> None:
        self.entries[video_id] = analysis

    async def delete(self, video_id: str) -> bool:
        return self.entries.pop(video_id, None) is not None


class FakeBlobStorage(BlobStorage):
    """BlobStorage over a dict of object path -> bytes."""

    def __init__(self):
        super().__init__(client=MagicMock(), bucket="reelmeals-test")
        self.objects: Dict[str, bytes] = {}

    async def exists(self, object_path: str) -> bool:
        return object_path in self.objects

    def get_read_url(self, object_path: str, expires_in: int = 900) -> str:
        return f"https://storage.test/{self.bucket}/{object_path}?X-Amz-Expires={expires_in}"

    async def download_to(self, object_path: str, destination: str) -> str:
        Path(destination).write_bytes(self.objects[object_path])
        return destination

    async def list_objects(self, prefix: str) -> List[str]:
        return sorted(key for key in self.objects if key.startswith(prefix))

    async def delete(self, object_path: str) -> None:
        self.objects.pop(object_path, None)


class FakeAIProvider(AIProvider):
    """Returns canned responses in order and records every call."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls: List[tuple] = []

    async def generate_from_video(self, prompt: str, video: bytes, mime_type: str = "video/mp4") -> str:
        self.calls.append((prompt, len(video)))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def storage_transport(storage: FakeBlobStorage) -> httpx.MockTransport:
    """Serves presigned URLs of ``storage`` like the blob store would."""

    def handler(request: httpx.Request) -> httpx.Response:
        prefix = f"/{storage.bucket}/"
        path = request.url.path
        key = path[len(prefix):] if path.startswith(prefix) else path.lstrip("/")
        if key not in storage.objects:
            return httpx.Response(403, text="Forbidden")
        return httpx.Response(200, content=storage.objects[key])

    return httpx.MockTransport(handler)


def make_chunk_response(title: str, ingredients: List[str], steps: List[str], **extra) -> str:
    """Model output for one chunk, wrapped in chatter like the real model does."""
    payload = {
        "title": title,
        "ingredients": [{"name": name, "amount": 1, "unit": "cup"} for name in ingredients],
        "instructions": [{"step": i, "description": text} for i, text in enumerate(steps, start=1)],
        **extra,
    }
    return f"Here is the analysis:\n```json\n{json.dumps(payload)}\n```"


@pytest.fixture
def sample_analysis_data():
    """Return a complete analysis as the model would return it."""
    return {
        "title": "Garlic Butter Pasta",
        "description": "Weeknight pasta tossed in garlic butter",
        "cuisine": "Italian",
        "difficulty": "Easy",
        "cookingTime": 20,
        "ingredients": [
            {"name": "spaghetti", "amount": 200, "unit": "g", "estimatedPrice": 150},
            {"name": "butter", "amount": 2, "unit": "tbsp"},
            {"name": "garlic", "amount": 3, "unit": "cloves", "notes": "minced"},
        ],
        "instructions": [
            {"step": 1, "description": "Boil the spaghetti in salted water", "timestamp": 5, "duration": 600},
            {"step": 2, "description": "Melt butter in a pan and fry the garlic", "timestamp": 40},
            {"step": 3, "description": "Toss the pasta in the garlic butter", "timestamp": 75},
        ],
        "nutrition": {"servings": 2, "calories": 540, "protein": 14, "carbs": 80, "fat": 18, "fiber": 4},
        "tags": ["pasta", "quick"],
        "aiMetadata": {
            "detectedIngredients": ["spaghetti", "butter", "garlic"],
            "detectedTechniques": ["boiling", "frying"],
            "confidenceScore": 0.9,
            "suggestedHashtags": ["#pasta"],
            "equipmentNeeded": ["pot", "pan"],
            "skillLevel": "beginner",
            "totalTime": 20,
            "prepTime": 5,
            "cookTime": 15,
            "estimatedCost": {"min": 300, "max": 500, "currency": "USD"},
        },
    }


@pytest.fixture
def sample_analysis(sample_analysis_data) -> RecipeAnalysis:
    return RecipeAnalysis.model_validate(sample_analysis_data)


@pytest.fixture
def fake_store():
    return FakeVideoStore()


@pytest.fixture
def fake_cache():
    return FakeAnalysisCache()


@pytest.fixture
def fake_storage():
    return FakeBlobStorage()


@pytest.fixture
def mock_ai_provider(sample_analysis_data):
    """AI provider answering every call with the sample analysis."""
    return FakeAIProvider([json.dumps(sample_analysis_data)])


@pytest_asyncio.fixture
async def http_client(fake_storage) -> AsyncGenerator:
    async with httpx.AsyncClient(transport=storage_transport(fake_storage)) as client:
        yield client


@pytest.fixture
def pipeline(fake_store, fake_cache, fake_storage, mock_ai_provider, http_client):
    """Pipeline over in-memory collaborators, without backoff delays."""
    return VideoAnalysisPipeline(
        store=fake_store,
        cache=fake_cache,
        storage=fake_storage,
        extractor=RecipeExtractor(mock_ai_provider),
        http_client=http_client,
        retry_delay=0,
    )


@pytest.fixture
def mock_redis_client():
    """Create a mock Redis client."""
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.exists = AsyncMock(return_value=1)
    client.hgetall = AsyncMock(return_value={})
    client.hget = AsyncMock(return_value=None)
    client.hset = AsyncMock(return_value=1)
    client.ping = AsyncMock(return_value=True)
    client.xack = AsyncMock(return_value=1)
    client.xreadgroup = AsyncMock(return_value=[])
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def api_app(pipeline, fake_store, fake_cache, fake_storage, mock_ai_provider, http_client, mock_redis_client):
    """The FastAPI app with its state wired to the in-memory fakes."""
    from api.main import app

    app.state.redis = mock_redis_client
    app.state.http_client = http_client
    app.state.store = fake_store
    app.state.cache = fake_cache
    app.state.storage = fake_storage
    app.state.pipeline = pipeline
    app.state.prescreener = PreScreener(mock_ai_provider)
    return app


@pytest_asyncio.fixture
async def test_app(api_app) -> AsyncGenerator:
    """Create a test client for the FastAPI application."""
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

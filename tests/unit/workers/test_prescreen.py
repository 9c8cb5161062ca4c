"""Unit tests for the pre-screening gate."""
import json

import pytest

from analysis_worker.prescreen import PreScreener, clean_ai_response
from shared.errors import PreScreenError
from shared.models import PreScreenResult

from tests.conftest import FakeAIProvider


def classification(is_cooking=True, confidence=0.9):
    return "```json\n" + json.dumps({
        "isCookingVideo": is_cooking,
        "confidence": confidence,
        "reason": "Shows a pan and ingredients",
        "detectedContent": {
            "hasCookingInstructions": True,
            "hasIngredients": True,
            "hasRecipeSteps": True,
            "identifiedDish": "pasta",
            "cookingTechniquesShown": ["boiling"],
        },
    }) + "\n```"


class TestPreScreener:
    """Tests for PreScreener.screen."""

    async def test_below_threshold_skips_full_analysis(self, sample_analysis_data):
        provider = FakeAIProvider([classification(confidence=0.80), json.dumps(sample_analysis_data)])

        outcome = await PreScreener(provider).screen(b"video")

        assert outcome.analysis is None
        assert outcome.confidence == 0.80
        assert len(provider.calls) == 1

    async def test_at_threshold_runs_full_analysis(self, sample_analysis_data):
        provider = FakeAIProvider([classification(confidence=0.85), "```json\n" + json.dumps(sample_analysis_data) + "\n```"])

        outcome = await PreScreener(provider).screen(b"video")

        assert len(provider.calls) == 2
        assert outcome.is_cooking_video is True
        assert outcome.detected_content.identified_dish == "pasta"
        assert outcome.analysis.title == "Garlic Butter Pasta"

    async def test_not_cooking_video_is_rejected(self):
        provider = FakeAIProvider([classification(is_cooking=False, confidence=0.99)])

        outcome = await PreScreener(provider).screen(b"video")

        assert outcome.analysis is None
        assert len(provider.calls) == 1

    async def test_invalid_classification(self):
        provider = FakeAIProvider(["This looks like a cat video."])

        with pytest.raises(PreScreenError):
            await PreScreener(provider).screen(b"video")

    def test_custom_threshold(self):
        screener = PreScreener(FakeAIProvider(["{}"]), confidence_threshold=0.5)

        assert screener.passes(PreScreenResult(is_cooking_video=True, confidence=0.6))
        assert not screener.passes(PreScreenResult(is_cooking_video=True, confidence=0.4))

    def test_clean_ai_response(self):
        assert clean_ai_response('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert clean_ai_response('```\n{"a": 1}```') == '{"a": 1}'
        assert clean_ai_response('{"a": 1}') == '{"a": 1}'

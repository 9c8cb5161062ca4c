"""Unit tests for shared models."""
import pytest
from pydantic import ValidationError

from shared.models import (
    AIMetadata,
    Ingredient,
    RecipeAnalysis,
    coerce_minutes,
    coerce_number,
)


@pytest.mark.parametrize("value,expected", [
    (2, 2),
    ("2.5", 2.5),
    ("1/2", 0.5),
    ("1 1/2", 1.5),
    ("to taste", None),
    ("", None),
    (None, None),
    (True, None),
])
def test_coerce_number(value, expected):
    assert coerce_number(value) == expected


@pytest.mark.parametrize("value,expected", [
    (30, 30),
    ("30", 30),
    ("45 minutes", 45),
    ("about an hour", None),
    (None, None),
])
def test_coerce_minutes(value, expected):
    assert coerce_minutes(value) == expected


class TestRecipeAnalysis:
    """Tests for RecipeAnalysis validation and serialization."""

    def test_defaults(self):
        analysis = RecipeAnalysis()

        assert analysis.ai_metadata.confidence_score == 0.8
        assert analysis.ai_metadata.skill_level == "beginner"
        assert analysis.ai_metadata.estimated_cost.currency == "USD"
        assert analysis.difficulty is None

    def test_document_uses_camel_case(self, sample_analysis):
        document = sample_analysis.to_document()

        assert document["cookingTime"] == 20
        assert document["aiMetadata"]["confidenceScore"] == 0.9
        assert document["ingredients"][0]["estimatedPrice"] == 150
        assert document["difficulty"] == "Easy"

    def test_accepts_snake_case(self):
        analysis = RecipeAnalysis(cooking_time=15, ai_metadata={"confidence_score": 0.5})

        assert analysis.cooking_time == 15
        assert analysis.ai_metadata.confidence_score == 0.5

    @pytest.mark.parametrize("value,expected", [
        (95, 0.95),
        ("87", 0.87),
        (250, 1.0),
        (-0.2, 0.0),
        (None, 0.8),
        ("unsure", 0.8),
    ])
    def test_confidence_is_rescaled_and_clamped(self, value, expected):
        assert AIMetadata(confidence_score=value).confidence_score == pytest.approx(expected)

    def test_cost_and_currency_default_when_missing(self):
        metadata = AIMetadata(estimated_cost=None)
        assert metadata.estimated_cost.model_dump() == {"min": 0, "max": 0, "currency": "USD"}

        metadata = AIMetadata(estimated_cost={"min": "4", "max": 9, "currency": None})
        assert metadata.estimated_cost.model_dump() == {"min": 4, "max": 9, "currency": "USD"}

    def test_ingredient_name_required(self):
        with pytest.raises(ValidationError):
            Ingredient(name="")

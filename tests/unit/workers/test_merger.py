"""Unit tests for merging chunk analyses."""
import pytest

from analysis_worker.merger import merge_analyses, merge_pair
from shared.models import RecipeAnalysis


def analysis(title="", ingredients=(), steps=(), tags=(), confidence=0.8, techniques=()):
    return RecipeAnalysis.model_validate({
        "title": title,
        "ingredients": [{"name": name} for name in ingredients],
        "instructions": [{"step": i, "description": text} for i, text in enumerate(steps, start=1)],
        "tags": list(tags),
        "aiMetadata": {"confidenceScore": confidence, "detectedTechniques": list(techniques)},
    })


class TestMergeAnalyses:
    """Tests for merge_analyses."""

    def test_single_analysis_passes_through(self, sample_analysis):
        assert merge_analyses([sample_analysis]) == sample_analysis

    def test_empty_list_rejected(self):
        with pytest.raises(ValueError):
            merge_analyses([])

    def test_duplicate_ingredient_keeps_first(self):
        first = RecipeAnalysis.model_validate({"ingredients": [{"name": "salt", "amount": 1, "unit": "tsp"}]})
        second = RecipeAnalysis.model_validate({"ingredients": [{"name": "salt", "amount": 2, "unit": "tbsp"}]})

        merged = merge_analyses([first, second])

        assert len(merged.ingredients) == 1
        assert merged.ingredients[0].amount == 1
        assert merged.ingredients[0].unit == "tsp"

    def test_ingredient_dedup_is_case_sensitive(self):
        merged = merge_analyses([analysis(ingredients=["Salt"]), analysis(ingredients=["salt"])])
        assert [i.name for i in merged.ingredients] == ["Salt", "salt"]

    def test_steps_are_renumbered(self):
        first = analysis(steps=["boil", "salt", "drain"])
        second = analysis(steps=["toss", "serve"])

        merged = merge_analyses([first, second])

        assert [s.step for s in merged.instructions] == [1, 2, 3, 4, 5]
        assert [s.description for s in merged.instructions] == ["boil", "salt", "drain", "toss", "serve"]

    def test_scalar_fields_come_from_first_chunk(self):
        merged = merge_analyses([analysis(title="Pasta"), analysis(title="Something else")])
        assert merged.title == "Pasta"

    def test_tags_and_metadata_lists_are_unioned(self):
        first = analysis(tags=["pasta", "quick"], techniques=["boiling"])
        second = analysis(tags=["quick", "dinner"], techniques=["boiling", "sauteing"])

        merged = merge_analyses([first, second])

        assert merged.tags == ["pasta", "quick", "dinner"]
        assert merged.ai_metadata.detected_techniques == ["boiling", "sauteing"]

    def test_confidence_is_averaged_pairwise(self):
        merged = merge_analyses([analysis(confidence=0.9), analysis(confidence=0.5), analysis(confidence=0.7)])

        # ((0.9 + 0.5) / 2 + 0.7) / 2
        assert merged.ai_metadata.confidence_score == pytest.approx(0.7)

    def test_inputs_are_not_mutated(self):
        first = analysis(ingredients=["pasta"], steps=["boil"], tags=["a"])
        second = analysis(ingredients=["salt"], steps=["season"], tags=["b"])
        first_before = first.model_dump()
        second_before = second.model_dump()

        merge_analyses([first, second])

        assert first.model_dump() == first_before
        assert second.model_dump() == second_before

    def test_merge_pair_continues_after_highest_step(self):
        merged = analysis(steps=["a", "b"])
        current = RecipeAnalysis.model_validate({"instructions": [{"step": 7, "description": "c"}]})

        result = merge_pair(merged, current)

        assert [s.step for s in result.instructions] == [1, 2, 3]

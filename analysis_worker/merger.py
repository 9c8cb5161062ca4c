"""Combine per-chunk analyses into one record."""
from functools import reduce
from typing import Iterable, List, Sequence

from shared.models import AIMetadata, InstructionStep, RecipeAnalysis


def _union(first: Iterable[str], second: Iterable[str]) -> List[str]:
    """Order-preserving set union."""
    return list(dict.fromkeys([*first, *second]))


def renumber_steps(steps: Sequence[InstructionStep], start: int = 1) -> List[InstructionStep]:
    """Copy steps with consecutive numbers beginning at ``start``."""
    return [step.model_copy(update={"step": start + i}) for i, step in enumerate(steps)]


def merge_pair(merged: RecipeAnalysis, current: RecipeAnalysis) -> RecipeAnalysis:
    """
    One fold step: add ``current`` (a later chunk) onto ``merged``.

    - ingredients whose exact name is already present are dropped
    - instructions are renumbered to continue after the highest step so far
    - tags and metadata lists are unioned
    - confidence is the mean of the two scores being combined

    Neither argument is modified.
    """
    known_names = {ingredient.name for ingredient in merged.ingredients}
    ingredients = [ingredient.model_copy() for ingredient in merged.ingredients]
    for ingredient in current.ingredients:
        if ingredient.name not in known_names:
            known_names.add(ingredient.name)
            ingredients.append(ingredient.model_copy())

    last_step = max((step.step for step in merged.instructions), default=0)
    instructions = [step.model_copy() for step in merged.instructions]
    instructions.extend(renumber_steps(current.instructions, start=last_step + 1))

    base_meta = merged.ai_metadata
    next_meta = current.ai_metadata
    ai_metadata: AIMetadata = base_meta.model_copy(
        update={
            "detected_ingredients": _union(base_meta.detected_ingredients, next_meta.detected_ingredients),
            "detected_techniques": _union(base_meta.detected_techniques, next_meta.detected_techniques),
            "suggested_hashtags": _union(base_meta.suggested_hashtags, next_meta.suggested_hashtags),
            "equipment_needed": _union(base_meta.equipment_needed, next_meta.equipment_needed),
            # Pairwise, so later chunks weigh more when there are 3+ chunks
            "confidence_score": (base_meta.confidence_score + next_meta.confidence_score) / 2,
        },
        deep=True,
    )

    return merged.model_copy(
        update={
            "ingredients": ingredients,
            "instructions": instructions,
            "tags": _union(merged.tags, current.tags),
            "ai_metadata": ai_metadata,
        },
        deep=True,
    )


def merge_analyses(analyses: Sequence[RecipeAnalysis]) -> RecipeAnalysis:
    """Left-fold chunk analyses (in chunk order) into one, starting from the first."""
    if not analyses:
        raise ValueError("Cannot merge an empty list of analyses")

    first = analyses[0]
    base = first.model_copy(update={"instructions": renumber_steps(first.instructions)}, deep=True)
    return reduce(merge_pair, analyses[1:], base)

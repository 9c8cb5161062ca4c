"""Heuristic score of how much an analysis looks like a real recipe."""
from shared.models import RecipeAnalysis, ValidationDetails

REQUIRED_SCORE = 3

COOKING_TECHNIQUE_KEYWORDS = ("cook", "bake", "fry", "chop", "mix", "prep")
COOKING_EQUIPMENT_KEYWORDS = ("pan", "pot", "knife", "oven", "stove", "bowl", "utensil")


def _mentions_any(values, keywords) -> bool:
    return any(keyword in value.lower() for value in values for keyword in keywords)


def score_cooking_content(analysis: RecipeAnalysis) -> ValidationDetails:
    """One point each for measured ingredients, steps, techniques, equipment and structure."""
    measured = [i for i in analysis.ingredients if i.amount is not None or i.unit is not None]

    has_valid_ingredients = len(measured) >= 2
    has_valid_instructions = len(analysis.instructions) >= 2
    has_valid_techniques = _mentions_any(analysis.ai_metadata.detected_techniques, COOKING_TECHNIQUE_KEYWORDS)
    has_valid_equipment = _mentions_any(analysis.ai_metadata.equipment_needed, COOKING_EQUIPMENT_KEYWORDS)
    has_valid_structure = bool(
        analysis.title
        and (analysis.cooking_time or 0) > 0
        and analysis.difficulty
        and analysis.cuisine
    )

    checks = [
        has_valid_ingredients,
        has_valid_instructions,
        has_valid_techniques,
        has_valid_equipment,
        has_valid_structure,
    ]
    return ValidationDetails(
        score=sum(checks),
        required_score=REQUIRED_SCORE,
        confidence=analysis.ai_metadata.confidence_score,
        has_valid_ingredients=has_valid_ingredients,
        has_valid_instructions=has_valid_instructions,
        has_valid_techniques=has_valid_techniques,
        has_valid_equipment=has_valid_equipment,
        has_valid_structure=has_valid_structure,
    )

"""Shared Pydantic models for the ReelMeals video analysis service."""
import re
from enum import Enum
from fractions import Fraction
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, as stored in video documents."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoStatus(str, Enum):
    """Video processing status."""
    PENDING = "pending"
    PROCESSING = "processing"
    ACTIVE = "active"
    FAILED = "failed"


class Difficulty(str, Enum):
    """Recipe difficulty."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


_LEADING_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def coerce_number(value: Any) -> Optional[float]:
    """Turn model output like 2, "2.5", "1/2" or "1 1/2" into a float, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        pass
    try:
        return float(sum(Fraction(part) for part in text.split()))
    except (ValueError, ZeroDivisionError):
        return None


def coerce_minutes(value: Any) -> Optional[int]:
    """Read a leading integer from values like 30, "30" or "30 minutes"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip())
        if match:
            return int(float(match.group()))
    return None


def _text_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _valid_items(model, items: Any) -> list:
    """Validate list entries one by one, dropping the ones that fail."""
    if not isinstance(items, list):
        return []
    valid = []
    for item in items:
        try:
            valid.append(item if isinstance(item, model) else model.model_validate(item))
        except ValidationError:
            continue
    return valid


class Ingredient(CamelModel):
    """Recipe ingredient. ``name`` is the dedup key when merging chunks."""
    name: str = Field(..., min_length=1)
    amount: Optional[float] = None
    unit: Optional[str] = None
    estimated_price: Optional[int] = Field(None, description="Estimated price in minor currency units")
    notes: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return coerce_number(v)

    @field_validator("unit", "notes", mode="before")
    @classmethod
    def _optional_text(cls, v):
        return _text_or_none(v)

    @field_validator("estimated_price", mode="before")
    @classmethod
    def _price(cls, v):
        number = coerce_number(v)
        return None if number is None else int(round(number))


class InstructionStep(CamelModel):
    """Recipe instruction step."""
    step: int = Field(..., ge=1)
    description: str
    timestamp: Optional[float] = Field(None, description="Seconds into the source video")
    duration: Optional[float] = Field(None, description="Step duration in seconds")

    @field_validator("timestamp", "duration", mode="before")
    @classmethod
    def _seconds(cls, v):
        return coerce_number(v)


class Nutrition(CamelModel):
    """Per-serving nutrition values."""
    servings: Optional[float] = None
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _numbers(cls, v):
        return coerce_number(v)


class EstimatedCost(CamelModel):
    """Cost range in minor currency units."""
    min: int = 0
    max: int = 0
    currency: str = "USD"

    @field_validator("min", "max", mode="before")
    @classmethod
    def _minor_units(cls, v):
        number = coerce_number(v)
        return 0 if number is None else int(round(number))

    @field_validator("currency", mode="before")
    @classmethod
    def _currency(cls, v):
        return v if isinstance(v, str) and v else "USD"


class AIMetadata(CamelModel):
    """Model-derived metadata attached to an analysis."""
    detected_ingredients: List[str] = Field(default_factory=list)
    detected_techniques: List[str] = Field(default_factory=list)
    confidence_score: float = Field(0.8, ge=0, le=1)
    suggested_hashtags: List[str] = Field(default_factory=list)
    equipment_needed: List[str] = Field(default_factory=list)
    skill_level: str = "beginner"
    total_time: int = 0
    prep_time: int = 0
    cook_time: int = 0
    estimated_cost: EstimatedCost = Field(default_factory=EstimatedCost)

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _confidence(cls, v):
        number = coerce_number(v)
        if number is None:
            return 0.8
        # models sometimes answer in percent
        if number > 1:
            number = number / 100
        return min(max(number, 0.0), 1.0)

    @field_validator("total_time", "prep_time", "cook_time", mode="before")
    @classmethod
    def _minutes(cls, v):
        minutes = coerce_minutes(v)
        return 0 if minutes is None else minutes

    @field_validator("skill_level", mode="before")
    @classmethod
    def _skill_level(cls, v):
        return str(v) if v else "beginner"

    @field_validator("estimated_cost", mode="before")
    @classmethod
    def _cost(cls, v):
        return v if isinstance(v, (dict, EstimatedCost)) else {}

    @field_validator(
        "detected_ingredients", "detected_techniques", "suggested_hashtags", "equipment_needed",
        mode="before",
    )
    @classmethod
    def _string_lists(cls, v):
        return _string_list(v)


class RecipeAnalysis(CamelModel):
    """Structured recipe extracted from a cooking video."""
    title: str = ""
    description: str = ""
    cuisine: str = ""
    difficulty: Optional[Difficulty] = None
    cooking_time: Optional[int] = Field(None, description="Minutes")
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[InstructionStep] = Field(default_factory=list)
    nutrition: Nutrition = Field(default_factory=Nutrition)
    tags: List[str] = Field(default_factory=list)
    ai_metadata: AIMetadata = Field(default_factory=AIMetadata)

    @classmethod
    def from_model_output(cls, data: Any) -> "RecipeAnalysis":
        """
        Build an analysis from decoded model JSON.

        Entries and fields that cannot be used are dropped (falling back to
        their defaults) so one bad value never discards the whole answer.
        """
        if not isinstance(data, dict):
            raise ValueError("Model output is not a JSON object")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            bad = {str(error["loc"][0]) for error in e.errors() if error["loc"]}

        dropped = set()
        for name, info in cls.model_fields.items():
            if name in bad or info.alias in bad:
                dropped.update({name, info.alias})
        return cls.model_validate({key: value for key, value in data.items() if key not in dropped})

    @field_validator("title", "description", "cuisine", mode="before")
    @classmethod
    def _text(cls, v):
        return "" if v is None else str(v)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, v):
        if isinstance(v, str):
            normalized = v.strip().capitalize()
            return normalized if normalized in {d.value for d in Difficulty} else None
        return None

    @field_validator("cooking_time", mode="before")
    @classmethod
    def _cooking_time(cls, v):
        return coerce_minutes(v)

    @field_validator("ingredients", mode="before")
    @classmethod
    def _named_ingredients(cls, v):
        return _valid_items(Ingredient, v)

    @field_validator("instructions", mode="before")
    @classmethod
    def _numbered_steps(cls, v):
        if not isinstance(v, list):
            return []
        steps = []
        for item in v:
            if isinstance(item, dict) and not item.get("step"):
                item = {**item, "step": len(steps) + 1}
            steps.extend(_valid_items(InstructionStep, [item]))
        if len(steps) < len(v):
            # close the gaps left by dropped steps
            steps = [step.model_copy(update={"step": i}) for i, step in enumerate(steps, start=1)]
        return steps

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return _string_list(v)

    @field_validator("nutrition", "ai_metadata", mode="before")
    @classmethod
    def _nested_defaults(cls, v):
        return v if isinstance(v, (dict, BaseModel)) else {}

    def to_document(self) -> dict:
        """Fields written onto a video document."""
        return self.model_dump(mode="json", by_alias=True)


class ValidationDetails(CamelModel):
    """How strongly an analysis looks like a real recipe."""
    score: int
    required_score: int
    confidence: float
    has_valid_ingredients: bool
    has_valid_instructions: bool
    has_valid_techniques: bool
    has_valid_equipment: bool
    has_valid_structure: bool


class DetectedContent(CamelModel):
    """What the pre-screen saw in the video."""
    has_cooking_instructions: bool = False
    has_ingredients: bool = False
    has_recipe_steps: bool = False
    identified_dish: Optional[str] = None
    cooking_techniques_shown: List[str] = Field(default_factory=list)


class PreScreenResult(CamelModel):
    """Classification of a video as cooking content."""
    is_cooking_video: bool
    confidence: float = Field(..., ge=0, le=1)
    reason: str = ""
    detected_content: DetectedContent = Field(default_factory=DetectedContent)


class PreScreenOutcome(PreScreenResult):
    """Pre-screen result plus the full analysis when the video passed the gate."""
    analysis: Optional[RecipeAnalysis] = None


class StorageEvent(CamelModel):
    """Object-finalize notification from the blob store."""
    bucket: str
    name: str
    content_type: Optional[str] = None


class AnalyzeVideoRequest(CamelModel):
    """Request to analyze an uploaded video."""
    video_id: Optional[str] = Field(None, description="Video document id")
    video_url: Optional[str] = Field(None, description="Storage URL or object path of the video")


class PreScreenRequest(CamelModel):
    """Request to pre-screen a video by URL."""
    video_url: Optional[str] = Field(None, description="Fetchable URL of the video")

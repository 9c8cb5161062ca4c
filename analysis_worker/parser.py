"""
Response Parser
Turns raw Gemini text into a RecipeAnalysis.

The model is asked for JSON but does not always comply, so parsing has two
tiers: the JSON object between the outermost braces (kept even when some of
its values are unusable), then a best-effort reader for the labelled
plain-text layout the model falls back to when it writes no JSON at all.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Union

import structlog
from pydantic import ValidationError

from shared.errors import ResponseParseError
from shared.models import RecipeAnalysis

logger = structlog.get_logger(__name__)

TITLE_SECTION_HEADER = "Title and Brief Description"

# label -> RecipeAnalysis field
TITLE_SECTION_FIELDS = {
    "Recipe name:": "title",
    "Brief description:": "description",
    "Type of cuisine:": "cuisine",
    "Difficulty level:": "difficulty",
    "Total cooking time:": "cooking_time",
}


@dataclass(frozen=True)
class ParsedJson:
    analysis: RecipeAnalysis


@dataclass(frozen=True)
class ParsedStructured:
    analysis: RecipeAnalysis


@dataclass(frozen=True)
class ParseFailure:
    error: Exception


ParseResult = Union[ParsedJson, ParsedStructured, ParseFailure]


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the substring from the first ``{`` to the last ``}``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ValueError("No JSON object found in response")
    data = json.loads(text[start:end + 1])
    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data


def parse_structured_text(text: str) -> RecipeAnalysis:
    """Read labelled fields from the "Title and Brief Description" section."""
    fields: Dict[str, Any] = {}

    for section in text.split("\n\n"):
        if TITLE_SECTION_HEADER not in section:
            continue
        for line in section.split("\n"):
            for label, field in TITLE_SECTION_FIELDS.items():
                if label in line:
                    _, _, value = line.partition(":")
                    fields[field] = value.strip()

    return RecipeAnalysis(**fields)


def parse_response(text: str) -> ParseResult:
    """Classify and parse raw model output."""
    try:
        data = extract_json_object(text)
    except (ValueError, AttributeError, TypeError) as e:
        logger.info("Direct JSON parsing failed, falling back to structured parsing", error=str(e))
    else:
        try:
            return ParsedJson(RecipeAnalysis.from_model_output(data))
        except (ValueError, ValidationError) as e:
            return ParseFailure(e)

    try:
        return ParsedStructured(parse_structured_text(text))
    except Exception as e:
        return ParseFailure(e)


class ResponseParser:
    """Always yields a well-typed analysis unless nothing in the answer is usable."""

    def parse(self, text: str) -> RecipeAnalysis:
        result = parse_response(text)

        if isinstance(result, ParsedJson):
            return result.analysis
        if isinstance(result, ParsedStructured):
            logger.warning("Used structured-text fallback", title=result.analysis.title or None)
            return result.analysis
        if isinstance(result, ParseFailure):
            logger.error("Error parsing AI response", error=str(result.error))
            raise ResponseParseError("Failed to parse AI response") from result.error
        raise TypeError(f"Unexpected parse result: {result!r}")

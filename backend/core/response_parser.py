"""
Response parser — pulls a candidate query or a MISSING explanation out of raw
model output. Lenient cleanup only; the caller runs the safety gate.
"""
import json
import re

from core.errors import GeneratedSuggestionsInvalid
from models.generation import GenerateResponse, QuestionCategory

MISSING_MARKER = "MISSING:"
MISSING_PLACEHOLDER = "the request cannot be answered from the available schema"

_LEADING_FENCE = re.compile(r"^```(?:sql)?", re.IGNORECASE)
_LEADING_JSON_FENCE = re.compile(r"^```(?:json)?", re.IGNORECASE)


def _strip_fences(text: str, leading=_LEADING_FENCE) -> str:
    text = leading.sub("", text, count=1)
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_response(raw: str) -> GenerateResponse:
    trimmed = (raw or "").strip()
    if trimmed.upper().startswith(MISSING_MARKER):
        explanation = trimmed[len(MISSING_MARKER):].strip()
        return GenerateResponse(missing=explanation or MISSING_PLACEHOLDER)
    return GenerateResponse(sql=_strip_fences(trimmed))


def parse_suggestions(raw: str) -> list[QuestionCategory]:
    """Parse the question-discovery JSON array."""
    payload = _strip_fences((raw or "").strip(), leading=_LEADING_JSON_FENCE)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise GeneratedSuggestionsInvalid(f"model did not return JSON: {e}") from e
    if isinstance(data, dict):
        # Some models wrap the array in an object.
        data = next((v for v in data.values() if isinstance(v, list)), None)
    if not isinstance(data, list):
        raise GeneratedSuggestionsInvalid("expected a JSON array of categories")
    try:
        return [QuestionCategory.model_validate(item) for item in data]
    except ValueError as e:
        raise GeneratedSuggestionsInvalid(f"malformed category: {e}") from e

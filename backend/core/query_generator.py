"""
Query generator — natural language in, validated candidate SQL out.

    prompt -> schema text -> instruction -> provider -> parser
           -> MISSING returned as-is
           -> candidate -> safety gate -> accepted | GeneratedQueryInvalid

Linear, no retries: every request ends in one outcome.
"""
import logging
from typing import TYPE_CHECKING, Optional

from core.errors import EmptyPrompt, GeneratedQueryInvalid, GenerationUnavailable, QueryServiceError
from core.response_parser import parse_suggestions
from core.safety_gate import validate_select_query
from core.schema_cache import SchemaCache
from models.generation import GenerateRequest, GenerateResponse, QuestionCategory
from prompts.sql_generation import (
    SUGGESTIONS_USER_MESSAGE,
    build_instruction,
    build_suggestions_instruction,
    dialect_label,
)

if TYPE_CHECKING:
    from integrations.llm_provider import GenerationProvider

logger = logging.getLogger(__name__)

SUGGESTIONS_MAX_TOKENS = 2048


def _require_provider(provider: Optional["GenerationProvider"]) -> "GenerationProvider":
    if provider is None:
        raise GenerationUnavailable("no LLM provider configured")
    return provider


def generate_query(
    prompt: str,
    cache: SchemaCache,
    provider: Optional["GenerationProvider"],
    max_tokens: Optional[int] = None,
) -> GenerateResponse:
    """
    Returns a response carrying either a gated `sql` or a `missing`
    explanation. Raises GeneratedQueryInvalid when the model's candidate
    fails the safety gate; the candidate is not returned in that case.
    """
    provider = _require_provider(provider)
    prompt = (prompt or "").strip()
    if not prompt:
        raise EmptyPrompt("prompt is required")

    schema_text = cache.to_text()
    request = GenerateRequest(
        prompt=prompt,
        schema_text=schema_text,
        max_tokens=max_tokens,
        system=build_instruction(schema_text, dialect_label(cache.dialect())),
    )
    response = provider.generate(request)

    if response.is_missing:
        logger.info("%s reported missing capability for prompt: %s", provider.name, prompt[:80])
        return response

    try:
        sql = validate_select_query(response.sql)
    except QueryServiceError as e:
        logger.warning("%s produced a rejected query (%s)", provider.name, e.reason)
        raise GeneratedQueryInvalid(f"generated query rejected: {e.message}") from e

    return response.model_copy(update={"sql": sql})


def suggest_questions(
    cache: SchemaCache,
    provider: Optional["GenerationProvider"],
    max_tokens: Optional[int] = None,
) -> tuple[list[QuestionCategory], int]:
    """Ask the model which questions the current schema can answer."""
    provider = _require_provider(provider)
    instruction = build_suggestions_instruction(cache.to_text(), dialect_label(cache.dialect()))
    completion = provider.complete(
        instruction, SUGGESTIONS_USER_MESSAGE, max_tokens or SUGGESTIONS_MAX_TOKENS,
    )
    categories = parse_suggestions(completion.text)
    logger.info("%s suggested %d question categories", provider.name, len(categories))
    return categories, completion.tokens

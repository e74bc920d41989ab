"""POST /api/generate and /api/suggestions — natural language to SQL."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_provider, get_schema_cache
from core.query_generator import generate_query, suggest_questions
from core.schema_cache import SchemaCache
from integrations.llm_provider import GenerationProvider
from models.generation import GenerateQueryRequest, GenerateQueryResponse, SuggestionsResponse
from models.query import ErrorResponse

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 422, 502, 503, 504)
}


@router.post("/generate", response_model=GenerateQueryResponse, responses=ERROR_RESPONSES)
def generate(
    req: GenerateQueryRequest,
    cache: SchemaCache = Depends(get_schema_cache),
    provider: Optional[GenerationProvider] = Depends(get_provider),
):
    result = generate_query(req.prompt, cache, provider, max_tokens=req.max_tokens)
    return GenerateQueryResponse(
        sql=result.sql,
        missing=result.missing,
        tokens=result.tokens,
        provider=provider.name,
    )


@router.post("/suggestions", response_model=SuggestionsResponse, responses=ERROR_RESPONSES)
def suggestions(
    cache: SchemaCache = Depends(get_schema_cache),
    provider: Optional[GenerationProvider] = Depends(get_provider),
):
    categories, tokens = suggest_questions(cache, provider)
    return SuggestionsResponse(categories=categories, tokens=tokens, provider=provider.name)

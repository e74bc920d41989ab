"""FastAPI dependencies — resources owned by the app, built in main.lifespan."""
from typing import Optional

from fastapi import Request
from sqlalchemy.engine import Engine

from core.schema_cache import SchemaCache
from integrations.llm_provider import GenerationProvider


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_schema_cache(request: Request) -> SchemaCache:
    return request.app.state.schema_cache


def get_provider(request: Request) -> Optional[GenerationProvider]:
    return getattr(request.app.state, "provider", None)

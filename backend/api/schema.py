"""GET /api/schema, /api/schema/text and POST /api/schema/refresh — schema cache access."""
import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.engine import Engine

from api.deps import get_engine, get_schema_cache
from config import settings
from core.schema_cache import SchemaCache
from models.table import RefreshResponse, SchemaSnapshot

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/schema", response_model=SchemaSnapshot)
def get_schema(cache: SchemaCache = Depends(get_schema_cache)):
    return cache.snapshot()


@router.get("/schema/text", response_class=PlainTextResponse)
def get_schema_text(cache: SchemaCache = Depends(get_schema_cache)):
    return cache.to_text()


@router.post("/schema/refresh", response_model=RefreshResponse)
def refresh_schema(
    cache: SchemaCache = Depends(get_schema_cache),
    engine: Engine = Depends(get_engine),
):
    t0 = time.monotonic()
    snapshot = cache.load(engine, timeout_seconds=settings.SCHEMA_TIMEOUT_SECONDS)
    return RefreshResponse(
        tables=len(snapshot.tables),
        last_refresh=snapshot.captured_at,
        duration_ms=int((time.monotonic() - t0) * 1000),
    )

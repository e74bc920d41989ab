"""GET /api/health — database, schema cache and LLM provider status."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from api.deps import get_engine, get_provider, get_schema_cache
from core.schema_cache import SchemaCache
from integrations.llm_provider import GenerationProvider

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(
    engine: Engine = Depends(get_engine),
    cache: SchemaCache = Depends(get_schema_cache),
    provider: Optional[GenerationProvider] = Depends(get_provider),
):
    db_status = _check_database(engine)
    llm_status = _check_provider(provider)
    overall = "ok" if db_status["status"] == "up" and llm_status["status"] == "up" else "degraded"
    last_refresh = cache.last_refresh()
    return {
        "status": overall,
        "services": {
            "database": db_status,
            "llm": llm_status,
        },
        "schema": {
            "tables": cache.table_count(),
            "last_refresh": last_refresh.isoformat() if last_refresh else None,
        },
    }


def _check_database(engine: Engine) -> dict:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "up", "dialect": engine.dialect.name}
    except SQLAlchemyError as e:
        return {"status": "down", "error": str(e)}


def _check_provider(provider: Optional[GenerationProvider]) -> dict:
    if provider is None:
        return {"status": "disabled", "error": "no LLM provider configured"}
    is_healthy = getattr(provider, "is_healthy", None)
    if is_healthy is not None:
        ok, detail = is_healthy()
        if not ok:
            return {"status": "down", "provider": provider.name, "error": detail}
    return {"status": "up", "provider": provider.name, "model": provider.model}

"""
DB Reader — read-only SQL console with natural-language query generation.
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import generate, health, query, schema
from config import settings
from core.db_connector import create_engine_from_url
from core.errors import QueryServiceError, RefreshFailed
from core.schema_cache import SchemaCache
from integrations.provider_factory import build_provider

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("dbreader")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("DB Reader starting up (dialect=%s)", settings.DB_URL.split(":", 1)[0])
    engine = create_engine_from_url(settings.DB_URL)
    cache = SchemaCache(schema=settings.DB_SCHEMA)
    try:
        cache.load(engine, timeout_seconds=settings.SCHEMA_TIMEOUT_SECONDS)
    except RefreshFailed as e:
        # Query execution does not depend on the cache; start anyway.
        logger.warning("Initial schema load failed: %s", e)

    try:
        provider = build_provider(settings)
    except ValueError as e:
        logger.error("LLM provider misconfigured, generation disabled: %s", e)
        provider = None

    app.state.engine = engine
    app.state.schema_cache = cache
    app.state.provider = provider
    yield
    if provider is not None:
        provider.close()
    engine.dispose()
    logger.info("DB Reader shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="DB Reader",
    description="Run safety-gated, read-only SQL and generate queries from plain language.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Errors ────────────────────────────────────────────────────────────────────
@app.exception_handler(QueryServiceError)
async def query_service_error_handler(request: Request, exc: QueryServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "reason": exc.reason},
    )


# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router,   prefix="/api")
app.include_router(query.router,    prefix="/api")
app.include_router(generate.router, prefix="/api")
app.include_router(schema.router,   prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)

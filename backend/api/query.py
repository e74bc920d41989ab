"""POST /api/query and /api/export — gated read-only execution."""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.engine import Engine
from starlette.background import BackgroundTask

from api.deps import get_engine
from config import settings
from core.query_executor import execute_bounded_query, export_query
from models.query import ErrorResponse, ExportRequest, QueryRequest, QueryResult

router = APIRouter()
logger = logging.getLogger(__name__)

EXPORT_FILENAME = "export.csv"
ERROR_RESPONSES = {400: {"model": ErrorResponse}, 504: {"model": ErrorResponse}}


@router.post("/query", response_model=QueryResult, responses=ERROR_RESPONSES)
def run_query(req: QueryRequest, engine: Engine = Depends(get_engine)):
    return execute_bounded_query(
        engine,
        req.query,
        limit=req.limit,
        timeout_seconds=settings.QUERY_TIMEOUT_SECONDS,
    )


@router.post("/export", responses=ERROR_RESPONSES)
def export_csv(req: ExportRequest, engine: Engine = Depends(get_engine)):
    stream = export_query(engine, req.query, timeout_seconds=settings.QUERY_TIMEOUT_SECONDS)
    return StreamingResponse(
        stream,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
        # Releases the connection even if the client went away before the body was read.
        background=BackgroundTask(stream.close),
    )

"""Pydantic schemas for query execution and export."""
from typing import Any, Optional

from pydantic import BaseModel


class QueryRequest(BaseModel):
    query: str = ""
    limit: Optional[int] = None        # None or <= 0 means "use the default"


class ExportRequest(BaseModel):
    query: str = ""


class QueryResult(BaseModel):
    columns: list[str]
    rows: list[list[Any]] = []
    count: int = 0
    more: bool = False                 # True when rows were cut at the limit
    duration_ms: int = 0


class ErrorResponse(BaseModel):
    error: str
    reason: str

"""
Query executor — runs gated, read-only SQL under a deadline and hands the
cursor to the result shaper.

Connections and cursors are released on every exit path: `with` blocks for
bounded queries, an ExitStack owned by CsvStream for exports.
"""
import csv
import io
import logging
import time
from contextlib import ExitStack
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from core.db_connector import is_timeout_error, statement_deadline
from core.errors import CursorFailed, ExecutionFailed, QueryTimeout, ScanFailed
from core.result_shaper import clamp_limit, format_csv_value, shape_rows
from core.safety_gate import validate_select_query
from models.query import QueryResult

logger = logging.getLogger(__name__)

CSV_CHUNK_BYTES = 64 * 1024


def _driver_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).strip()


def _connect(engine: Engine) -> Connection:
    try:
        return engine.connect()
    except SQLAlchemyError as e:
        raise ExecutionFailed(f"database unavailable: {_driver_message(e)}") from e


def _execute(conn: Connection, query: str) -> CursorResult:
    try:
        return conn.execute(text(query), execution_options={"stream_results": True})
    except DBAPIError as e:
        if is_timeout_error(e):
            raise QueryTimeout("query exceeded its time limit") from e
        raise ExecutionFailed(_driver_message(e)) from e
    except SQLAlchemyError as e:
        raise ExecutionFailed(_driver_message(e)) from e


def _columns(result: CursorResult) -> list[str]:
    if not result.returns_rows:
        raise CursorFailed("statement returned no result set")
    try:
        return list(result.keys())
    except SQLAlchemyError as e:
        raise CursorFailed(_driver_message(e)) from e


def _translate_read_error(e: Exception) -> Exception:
    if isinstance(e, DBAPIError):
        if is_timeout_error(e):
            return QueryTimeout("query exceeded its time limit")
        return CursorFailed(_driver_message(e))
    if isinstance(e, SQLAlchemyError):
        return CursorFailed(_driver_message(e))
    return ScanFailed(str(e))


def execute_bounded_query(
    engine: Engine,
    raw_query: str,
    limit: Optional[int] = None,
    timeout_seconds: Optional[float] = None,
) -> QueryResult:
    """Validate, execute and read at most `limit` (clamped) rows."""
    query = validate_select_query(raw_query)
    limit = clamp_limit(limit)

    with _connect(engine) as conn, statement_deadline(conn, timeout_seconds):
        t0 = time.monotonic()
        result = _execute(conn, query)
        try:
            columns = _columns(result)
            try:
                rows, more = shape_rows(result, limit)
            except (SQLAlchemyError, ValueError, TypeError) as e:
                raise _translate_read_error(e) from e
        finally:
            result.close()
        duration_ms = int((time.monotonic() - t0) * 1000)

    logger.info("Query returned %d rows (more=%s) in %d ms", len(rows), more, duration_ms)
    return QueryResult(
        columns=columns,
        rows=rows,
        count=len(rows),
        more=more,
        duration_ms=duration_ms,
    )


class CsvStream:
    """
    Iterable of CSV text chunks (header row first) that owns the connection
    and cursor it reads from. Iterating to the end, failing mid-stream, or
    calling close() all release them.
    """

    def __init__(self, stack: ExitStack, result: CursorResult, columns: list[str]):
        self._stack = stack
        self._result = result
        self.columns = columns
        self.rows_written = 0

    def __iter__(self) -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.writer(buf)
        try:
            writer.writerow(self.columns)
            try:
                for row in self._result:
                    writer.writerow([format_csv_value(v) for v in row])
                    self.rows_written += 1
                    if buf.tell() >= CSV_CHUNK_BYTES:
                        yield _drain(buf)
            except (SQLAlchemyError, ValueError, TypeError) as e:
                logger.warning("CSV export aborted after %d rows: %s", self.rows_written, e)
                raise _translate_read_error(e) from e
            yield _drain(buf)
            logger.info("CSV export wrote %d rows", self.rows_written)
        finally:
            self.close()

    def close(self) -> None:
        self._stack.close()


def _drain(buf: io.StringIO) -> str:
    chunk = buf.getvalue()
    buf.seek(0)
    buf.truncate(0)
    return chunk


def export_query(
    engine: Engine,
    raw_query: str,
    timeout_seconds: Optional[float] = None,
) -> CsvStream:
    """
    Validate and execute eagerly so gate and execution errors surface before
    any output is produced; rows are read lazily while the stream is consumed.
    No row limit applies.
    """
    query = validate_select_query(raw_query)
    with ExitStack() as stack:
        conn = stack.enter_context(_connect(engine))
        stack.enter_context(statement_deadline(conn, timeout_seconds))
        result = _execute(conn, query)
        stack.callback(result.close)
        columns = _columns(result)
        owned = stack.pop_all()
    return CsvStream(owned, result, columns)

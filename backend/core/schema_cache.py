"""
Schema cache — introspects the live database into an immutable snapshot and
serves it to concurrent readers.

Five catalog reads feed a refresh: table names, columns, primary keys,
foreign keys and row estimates. The first four are required; a failed row
estimate read only leaves estimates unknown.

Readers take the current snapshot reference without locking. A refresh
builds a complete new snapshot first and publishes it with one reference
swap under the writer lock, so a reader sees either the old snapshot or the
new one, never a mix. Concurrent refreshes are not serialized against each
other; the last swap wins.
"""
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.db_connector import default_schema, statement_deadline
from core.errors import RefreshFailed
from models.table import ColumnMetadata, ForeignKeyMetadata, SchemaSnapshot, TableMetadata

logger = logging.getLogger(__name__)

NO_TABLES_TEXT = "(no tables found)"


# ── Catalog reads ─────────────────────────────────────────────────────────────

def _load_columns(insp, schema: Optional[str]) -> dict[str, list[dict]]:
    return {table: cols for (_, table), cols in insp.get_multi_columns(schema=schema).items()}


def _load_primary_keys(insp, schema: Optional[str]) -> dict[str, set[str]]:
    return {
        table: set(pk.get("constrained_columns") or [])
        for (_, table), pk in insp.get_multi_pk_constraint(schema=schema).items()
    }


def _load_foreign_keys(insp, schema: Optional[str]) -> dict[str, list[ForeignKeyMetadata]]:
    result: dict[str, list[ForeignKeyMetadata]] = {}
    for (_, table), fks in insp.get_multi_foreign_keys(schema=schema).items():
        edges = []
        for fk in fks:
            for local_col, ref_col in zip(fk["constrained_columns"], fk["referred_columns"]):
                edges.append(ForeignKeyMetadata(
                    column=local_col,
                    foreign_table=fk["referred_table"],
                    foreign_column=ref_col,
                ))
        result[table] = edges
    return result


_PG_ROW_ESTIMATES = """
    SELECT relname, reltuples::bigint
    FROM pg_class
    WHERE relnamespace = to_regnamespace(:schema)
      AND relkind = 'r'
"""

_SQLITE_ROW_ESTIMATES = "SELECT tbl, stat FROM sqlite_stat1"


def _query_row_estimates(conn, schema: Optional[str]) -> dict[str, int]:
    dialect = conn.dialect.name
    estimates: dict[str, int] = {}
    if dialect == "postgresql":
        for name, count in conn.execute(text(_PG_ROW_ESTIMATES), {"schema": schema or "public"}):
            estimates[name] = max(int(count or 0), 0)
    elif dialect == "sqlite":
        # Only present after ANALYZE. The first stat integer is the row count.
        for tbl, stat in conn.execute(text(_SQLITE_ROW_ESTIMATES)):
            count = int(str(stat).split()[0])
            estimates[tbl] = max(estimates.get(tbl, 0), count)
    else:
        logger.debug("No row estimate query for dialect %s", dialect)
    return estimates


def _load_row_estimates(engine: Engine, schema: Optional[str], timeout_seconds: Optional[float]) -> dict[str, int]:
    """Separate connection so a failure here cannot poison the catalog reads."""
    try:
        with engine.connect() as conn, statement_deadline(conn, timeout_seconds):
            return _query_row_estimates(conn, schema)
    except (SQLAlchemyError, ValueError, IndexError) as e:
        logger.warning("Row estimates unavailable, continuing without them: %s", e)
        return {}


def _column_type(col: dict) -> str:
    return str(col["type"]).lower()


def introspect_schema(
    engine: Engine,
    schema: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> SchemaSnapshot:
    """Read the catalog and assemble a complete snapshot. Raises RefreshFailed."""
    try:
        with engine.connect() as conn, statement_deadline(conn, timeout_seconds):
            insp = inspect(conn)
            table_names = sorted(insp.get_table_names(schema=schema))
            columns = _load_columns(insp, schema)
            primary_keys = _load_primary_keys(insp, schema)
            foreign_keys = _load_foreign_keys(insp, schema)
    except SQLAlchemyError as e:
        raise RefreshFailed(f"schema introspection failed: {e}") from e

    estimates = _load_row_estimates(engine, schema, timeout_seconds)

    tables = []
    for name in table_names:
        pk_cols = primary_keys.get(name, set())
        tables.append(TableMetadata(
            table_name=name,
            columns=tuple(
                ColumnMetadata(
                    name=col["name"],
                    data_type=_column_type(col),
                    is_nullable=bool(col.get("nullable", True)),
                    is_primary_key=col["name"] in pk_cols,
                    comment=col.get("comment") or "",
                )
                for col in columns.get(name, [])
            ),
            foreign_keys=tuple(foreign_keys.get(name, [])),
            row_estimate=estimates.get(name, 0),
        ))

    return SchemaSnapshot(
        tables=tuple(tables),
        captured_at=datetime.now(timezone.utc),
        dialect=engine.dialect.name,
    )


# ── Text form ─────────────────────────────────────────────────────────────────

def table_to_text(table: TableMetadata) -> str:
    header = f"TABLE: {table.table_name}"
    if table.row_estimate > 0:
        header += f" (~{table.row_estimate} rows)"
    lines = [header]

    for col in table.columns:
        line = f"  - {col.name}: {col.data_type}"
        attrs = []
        if col.is_primary_key:
            attrs.append("PK")
        if not col.is_nullable:
            attrs.append("NOT NULL")
        if attrs:
            line += ", " + ", ".join(attrs)
        fk = table.foreign_key_for(col.name)
        if fk:
            line += f" -> {fk.foreign_table}.{fk.foreign_column}"
        if col.comment:
            line += f" // {col.comment}"
        lines.append(line)

    return "\n".join(lines) + "\n"


def snapshot_to_text(snapshot: SchemaSnapshot) -> str:
    if not snapshot.tables:
        return NO_TABLES_TEXT
    return "\n".join(table_to_text(t) for t in snapshot.tables)


# ── Cache ─────────────────────────────────────────────────────────────────────

class SchemaCache:
    """Owned holder of the current SchemaSnapshot; inject one per app/test."""

    def __init__(self, schema: Optional[str] = None):
        self._schema = schema
        self._snapshot = SchemaSnapshot()
        self._write_lock = threading.Lock()

    def load(self, engine: Engine, timeout_seconds: Optional[float] = None) -> SchemaSnapshot:
        """Full refresh. On failure the previous snapshot stays current."""
        t0 = time.monotonic()
        snapshot = introspect_schema(
            engine,
            schema=default_schema(engine, self._schema),
            timeout_seconds=timeout_seconds,
        )
        with self._write_lock:
            self._snapshot = snapshot
        logger.info(
            "Schema loaded: %d tables in %d ms",
            len(snapshot.tables), int((time.monotonic() - t0) * 1000),
        )
        return snapshot

    def snapshot(self) -> SchemaSnapshot:
        return self._snapshot

    def to_text(self) -> str:
        return snapshot_to_text(self._snapshot)

    def table_count(self) -> int:
        return len(self._snapshot.tables)

    def last_refresh(self) -> Optional[datetime]:
        return self._snapshot.captured_at

    def dialect(self) -> str:
        """Dialect of the last loaded database, empty before the first load."""
        return self._snapshot.dialect

    def has_table(self, name: str) -> bool:
        lower = name.lower()
        return any(t.table_name.lower() == lower for t in self._snapshot.tables)

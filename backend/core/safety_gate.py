"""
Safety gate — classifies raw query text as executable read-only or rejects it.

This is a lexical prefix check, not a parser. It does not detect statement
chaining (`SELECT 1; DROP TABLE t`), comments hiding a second statement, or
other payloads behind a leading SELECT/WITH token. The database credential
the service runs with must be read-only; that is the real enforcement
boundary.
"""
from core.errors import EmptyQuery, NotReadOnly

READ_ONLY_PREFIXES = ("select", "with")


def validate_select_query(raw: str) -> str:
    """Return the trimmed query, or raise EmptyQuery / NotReadOnly."""
    query = (raw or "").strip()
    if not query:
        raise EmptyQuery("query is required")
    if not query.lower().startswith(READ_ONLY_PREFIXES):
        raise NotReadOnly("only SELECT / CTE queries are allowed")
    return query

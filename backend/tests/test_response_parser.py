import pytest

from core.errors import GeneratedSuggestionsInvalid
from core.response_parser import MISSING_PLACEHOLDER, parse_response, parse_suggestions


@pytest.mark.parametrize("raw, sql", [
    ("SELECT 1", "SELECT 1"),
    ("```sql\nSELECT 1\n```", "SELECT 1"),
    ("```SQL\nSELECT id FROM t\n```", "SELECT id FROM t"),
    ("```\nSELECT 2\n```", "SELECT 2"),
    ("  \n SELECT 3;  \n", "SELECT 3;"),
])
def test_sql_is_cleaned(raw, sql):
    resp = parse_response(raw)
    assert resp.sql == sql
    assert resp.missing == ""
    assert not resp.is_missing


def test_missing_marker():
    resp = parse_response("MISSING: no weather table")
    assert resp.is_missing
    assert resp.missing == "no weather table"
    assert resp.sql == ""


def test_missing_marker_case_insensitive():
    resp = parse_response("  missing:   need an invoices table ")
    assert resp.missing == "need an invoices table"


def test_bare_missing_marker_gets_placeholder():
    resp = parse_response("MISSING:")
    assert resp.is_missing
    assert resp.missing == MISSING_PLACEHOLDER


def test_fence_only_is_empty_sql():
    resp = parse_response("```sql\n```")
    assert resp.sql == ""
    assert resp.missing == ""


def test_suggestions_array():
    raw = '[{"domain": "Sales", "description": "orders", "questions": ["How many orders?"]}]'
    categories = parse_suggestions(raw)
    assert len(categories) == 1
    assert categories[0].domain == "Sales"
    assert categories[0].questions == ["How many orders?"]


def test_suggestions_fenced_and_wrapped():
    raw = '```json\n{"categories": [{"domain": "Customers"}]}\n```'
    categories = parse_suggestions(raw)
    assert categories[0].domain == "Customers"
    assert categories[0].questions == []


@pytest.mark.parametrize("raw", [
    "not json",
    '{"domain": "x"}',
    '[{"description": "no domain"}]',
    "",
])
def test_suggestions_rejects_bad_output(raw):
    with pytest.raises(GeneratedSuggestionsInvalid):
        parse_suggestions(raw)

import csv
import io
from unittest.mock import patch

from api.deps import get_provider
from main import app


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["services"]["database"] == {"status": "up", "dialect": "sqlite"}
    assert body["services"]["llm"]["status"] == "up"
    assert body["services"]["llm"]["provider"] == "stub"
    assert body["schema"]["tables"] == 2
    assert body["schema"]["last_refresh"] is not None


def test_health_degraded_without_provider(client):
    app.dependency_overrides[get_provider] = lambda: None
    body = client.get("/api/health").json()
    assert body["status"] == "degraded"
    assert body["services"]["llm"]["status"] == "disabled"


# ── Query ─────────────────────────────────────────────────────────────────────

def test_query(client):
    response = client.post("/api/query", json={"query": "SELECT id, email FROM customers ORDER BY id", "limit": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["columns"] == ["id", "email"]
    assert body["rows"] == [[1, "ada@example.com"], [2, "grace@example.com"]]
    assert body["count"] == 2
    assert body["more"] is True
    assert "duration_ms" in body


def test_query_null_limit_uses_default(client):
    response = client.post("/api/query", json={"query": "SELECT id FROM customers", "limit": None})
    assert response.status_code == 200
    assert response.json()["count"] == 3


def test_query_rejects_writes(client):
    response = client.post("/api/query", json={"query": "DELETE FROM customers"})
    assert response.status_code == 400
    assert response.json() == {"error": "only SELECT / CTE queries are allowed", "reason": "not_read_only"}


def test_query_requires_text(client):
    response = client.post("/api/query", json={"query": "  "})
    assert response.status_code == 400
    assert response.json()["reason"] == "empty_query"


def test_query_execution_error(client):
    response = client.post("/api/query", json={"query": "SELECT * FROM nope"})
    assert response.status_code == 400
    body = response.json()
    assert body["reason"] == "execution_failed"
    assert "nope" in body["error"]


# ── Export ────────────────────────────────────────────────────────────────────

def test_export_csv(client):
    response = client.post("/api/export", json={"query": "SELECT id, email FROM customers ORDER BY id"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == "attachment; filename=export.csv"
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["id", "email"]
    assert len(rows) == 4


def test_export_rejects_before_streaming(client):
    response = client.post("/api/export", json={"query": "DROP TABLE customers"})
    assert response.status_code == 400
    assert response.json()["reason"] == "not_read_only"


# ── Generation ────────────────────────────────────────────────────────────────

def test_generate(client, stub_provider):
    stub_provider.reply = "SELECT email FROM customers"
    response = client.post("/api/generate", json={"prompt": "customer emails"})
    assert response.status_code == 200
    assert response.json() == {
        "sql": "SELECT email FROM customers",
        "missing": "",
        "tokens": 42,
        "provider": "stub",
    }
    assert "TABLE: orders" in stub_provider.calls[0]["system"]


def test_generate_missing(client, stub_provider):
    stub_provider.reply = "MISSING: no weather tables"
    body = client.post("/api/generate", json={"prompt": "weather"}).json()
    assert body["sql"] == ""
    assert body["missing"] == "no weather tables"


def test_generate_rejected_candidate_is_not_returned(client, stub_provider):
    stub_provider.reply = "DROP TABLE customers"
    response = client.post("/api/generate", json={"prompt": "drop it"})
    assert response.status_code == 422
    body = response.json()
    assert body["reason"] == "generated_query_invalid"
    assert "sql" not in body


def test_generate_without_provider(client):
    app.dependency_overrides[get_provider] = lambda: None
    response = client.post("/api/generate", json={"prompt": "count customers"})
    assert response.status_code == 503
    assert response.json()["reason"] == "generation_unavailable"


def test_suggestions(client, stub_provider):
    stub_provider.reply = '[{"domain": "Orders", "questions": ["Total revenue?"]}]'
    response = client.post("/api/suggestions")
    assert response.status_code == 200
    body = response.json()
    assert body["categories"][0]["domain"] == "Orders"
    assert body["provider"] == "stub"


# ── Schema ────────────────────────────────────────────────────────────────────

def test_schema(client):
    body = client.get("/api/schema").json()
    assert [t["table_name"] for t in body["tables"]] == ["customers", "orders"]


def test_schema_text(client):
    response = client.get("/api/schema/text")
    assert response.status_code == 200
    assert response.text.startswith("TABLE: customers\n")
    assert "  - customer_id: integer, NOT NULL -> customers.id" in response.text


def test_schema_refresh(client):
    response = client.post("/api/schema/refresh")
    assert response.status_code == 200
    body = response.json()
    assert body["tables"] == 2
    assert body["last_refresh"] is not None


def test_schema_refresh_failure(client):
    from core.errors import RefreshFailed

    with patch("core.schema_cache.introspect_schema", side_effect=RefreshFailed("schema introspection failed: boom")):
        response = client.post("/api/schema/refresh")
    assert response.status_code == 502
    assert response.json()["reason"] == "refresh_failed"

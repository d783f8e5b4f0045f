"""Tests for POST /api/analyses/generate: cache first, then one credit per generated report."""
import json

import httpx
from conftest import auth_headers, make_analysis, make_user
from sqlmodel import select

from stock_reports.db.models import AnalysisHistory, User

REQUEST = {
    "market": "KOSPI",
    "symbol": "005930",
    "name": "삼성전자",
    "compare_periods": ["2024.06", "2024.09"],
}


def _credits(db) -> int:
    db.expire_all()
    return db.exec(select(User)).one().analysis_count


def test_generate_requires_session(client, backend):
    """Test anonymous callers cannot spend credits."""
    assert client.post("/api/analyses/generate", json=REQUEST).status_code == 401
    assert backend.requests == []


def test_generate_new_report(client, db, backend):
    """Test a cache miss calls the backend, stores the report and uses one credit."""
    make_user(db)
    r = client.post("/api/analyses/generate", json=REQUEST, headers=auth_headers())
    assert r.status_code == 200
    body = r.json()
    assert body["fromCache"] is False
    assert body["data"]["sector"] == "Semiconductors"
    assert body["data"]["model"] == "sonar-pro"
    assert body["data"]["compare_periods"] == ["2024.06", "2024.09"]

    assert len(backend.requests) == 1
    sent = json.loads(backend.requests[0].content)
    assert sent["symbol"] == "005930"
    assert backend.requests[0].url.path == "/api/analyze"

    assert _credits(db) == 9
    assert len(db.exec(select(AnalysisHistory)).all()) == 1


def test_generate_cache_hit_is_free(client, db, backend):
    """Test a fresh cached analysis is served without the backend or a credit."""
    make_user(db)
    stored = make_analysis(db)
    r = client.post("/api/analyses/generate", json=REQUEST, headers=auth_headers())
    assert r.json()["fromCache"] is True
    assert r.json()["data"]["id"] == stored.id
    assert backend.requests == []
    assert _credits(db) == 10


def test_generate_without_credits(client, db, backend):
    """Test a cache miss with an empty balance is refused before the backend is called."""
    make_user(db, credits=0)
    r = client.post("/api/analyses/generate", json=REQUEST, headers=auth_headers())
    assert r.status_code == 403
    assert backend.requests == []
    assert _credits(db) == 0


def test_generate_backend_failure_refunds(client, db, backend):
    """Test a failed generation returns the credit and reports an upstream error."""
    make_user(db)
    backend.handler = lambda request: httpx.Response(502, json={"error": "model overloaded"})
    r = client.post("/api/analyses/generate", json=REQUEST, headers=auth_headers())
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Analysis backend failed to generate a report"}
    assert _credits(db) == 10


def test_generate_backend_malformed_reply(client, db, backend):
    """Test a reply without a report is treated as a failed generation."""
    make_user(db)
    backend.handler = lambda request: httpx.Response(200, json={"sector": "Semiconductors"})
    r = client.post("/api/analyses/generate", json=REQUEST, headers=auth_headers())
    assert r.status_code == 500
    assert _credits(db) == 10

"""Tests for /api/analyses routes."""
from datetime import timedelta

from conftest import ADMIN_KEY, auth_headers, make_analysis, make_user
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from stock_reports.db.models import AnalysisHistory, StockAnalysis
from stock_reports.repositories import CACHE_TTL, AnalysisRepository
from stock_reports.utils import utcnow

SAMSUNG = {
    "market": "KOSPI",
    "symbol": "005930",
    "name": "삼성전자",
    "report": "# 삼성전자 분석\n\nHBM 공급 확대.",
    "compare_periods": ["2024.06", "2024.09"],
}


def _history(db):
    db.expire_all()
    return db.exec(select(AnalysisHistory)).all()


def test_create_then_replay_from_cache(client, db):
    """Test an identical create within the window returns the stored record."""
    r = client.post("/api/analyses", json=SAMSUNG)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["fromCache"] is False
    assert body["data"]["name"] == "삼성전자"
    assert body["data"]["compare_periods"] == ["2024.06", "2024.09"]

    replay = client.post("/api/analyses", json=SAMSUNG)
    assert replay.status_code == 200
    assert replay.json()["fromCache"] is True
    assert replay.json()["data"]["id"] == body["data"]["id"]
    # anonymous requests leave no history
    assert _history(db) == []


def test_create_after_window_is_a_new_record(client, db):
    """Test a replay whose only match is older than 7 days stores a fresh analysis."""
    first = client.post("/api/analyses", json=SAMSUNG).json()["data"]

    stale = db.get(StockAnalysis, first["id"])
    stale.created_at = utcnow() - CACHE_TTL - timedelta(days=1)
    db.add(stale)
    db.commit()

    replay = client.post("/api/analyses", json=SAMSUNG)
    assert replay.status_code == 200
    assert replay.json()["fromCache"] is False
    assert replay.json()["data"]["id"] != first["id"]

    again = client.post("/api/analyses", json=SAMSUNG).json()
    assert again["fromCache"] is True
    assert again["data"]["id"] == replay.json()["data"]["id"]


def test_create_records_history_when_signed_in(client, db):
    """Test a signed-in create is appended to the user's history."""
    make_user(db)
    r = client.post("/api/analyses", json=SAMSUNG, headers=auth_headers())
    assert r.status_code == 200
    assert r.json()["warnings"] == []
    history = _history(db)
    assert len(history) == 1
    assert history[0].analysis_id == r.json()["data"]["id"]


def test_create_signed_in_without_account_warns(client):
    """Test a valid session for a missing account still stores the analysis."""
    r = client.post("/api/analyses", json=SAMSUNG, headers=auth_headers("nobody@example.com"))
    assert r.status_code == 200
    assert r.json()["fromCache"] is False
    assert r.json()["warnings"] == ["User not found: nobody@example.com"]


def test_create_history_failure_is_a_warning(client, db, monkeypatch):
    """Test a failed history insert does not fail the request."""
    make_user(db)

    def _fail(*_args, **_kwargs):
        raise OperationalError("INSERT", {}, Exception("history table locked"))

    monkeypatch.setattr(AnalysisRepository, "add_history", _fail)
    r = client.post("/api/analyses", json=SAMSUNG, headers=auth_headers())
    assert r.status_code == 200
    assert r.json()["data"]["id"] > 0
    assert r.json()["warnings"][0].startswith("Failed to record analysis history")


def test_create_missing_fields(client):
    """Test missing or empty required fields are rejected with 400."""
    r = client.post("/api/analyses", json={"market": "KOSPI", "symbol": "", "name": "삼성전자"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"].startswith("Missing required fields:")
    assert "symbol" in body["error"]
    assert "report" in body["error"]


def test_check_cache(client, db):
    """Test check-cache reports misses and hits, recording history on a hit."""
    make_user(db)
    query = {k: v for k, v in SAMSUNG.items() if k != "report"}

    miss = client.post("/api/analyses/check-cache", json=query, headers=auth_headers())
    assert miss.json() == {"success": True, "cached": False, "data": None}

    stored = make_analysis(db)
    hit = client.post("/api/analyses/check-cache", json=query, headers=auth_headers())
    assert hit.json()["cached"] is True
    assert hit.json()["data"]["id"] == stored.id
    assert len(_history(db)) == 1


def test_save_history(client, db):
    """Test explicit history recording requires a session and an existing analysis."""
    make_user(db)
    stored = make_analysis(db)

    assert client.post("/api/analyses/save-history", json={"analysisId": stored.id}).status_code == 401

    r = client.post(
        "/api/analyses/save-history", json={"analysisId": stored.id}, headers=auth_headers()
    )
    assert r.status_code == 200
    assert r.json()["data"]["analysis_id"] == stored.id

    missing = client.post(
        "/api/analyses/save-history", json={"analysisId": 9999}, headers=auth_headers()
    )
    assert missing.status_code == 404
    assert missing.json()["success"] is False


def test_list_get_and_latest(client, db):
    """Test browsing endpoints need no login."""
    kospi = make_analysis(db)
    nasdaq = make_analysis(db, market="NASDAQ", symbol="AAPL", name="Apple")

    listing = client.get("/api/analyses", params={"market": "NASDAQ"}).json()
    assert listing["count"] == 1
    assert listing["data"][0]["id"] == nasdaq.id

    assert client.get(f"/api/analyses/{kospi.id}").json()["data"]["symbol"] == "005930"
    assert client.get("/api/analyses/latest/AAPL").json()["data"]["id"] == nasdaq.id
    assert client.get("/api/analyses/9999").status_code == 404
    assert client.get("/api/analyses/latest/XXXX").status_code == 404


def test_list_search(client, db):
    """Test `q` matches symbol or company name, case-insensitively."""
    samsung = make_analysis(db)
    apple = make_analysis(db, market="NASDAQ", symbol="AAPL", name="Apple")

    def ids(**params):
        return [a["id"] for a in client.get("/api/analyses", params=params).json()["data"]]

    assert ids(q="삼성") == [samsung.id]
    assert ids(q="aapl") == [apple.id]
    assert ids(q="apple", market="KOSPI") == []
    assert ids(q="%") == []


def test_list_rejects_bad_paging(client):
    """Test out-of-range paging parameters are a 400."""
    r = client.get("/api/analyses", params={"limit": 0})
    assert r.status_code == 400
    assert r.json()["error"].startswith("Invalid request")


def test_delete_requires_admin_key(client, db):
    """Test soft delete is guarded by the admin key and hides the analysis."""
    stored = make_analysis(db)

    assert client.delete(f"/api/analyses/{stored.id}").status_code == 403
    assert client.delete(
        f"/api/analyses/{stored.id}", headers={"X-Admin-Key": "wrong"}
    ).status_code == 403

    r = client.delete(f"/api/analyses/{stored.id}", headers={"X-Admin-Key": ADMIN_KEY})
    assert r.status_code == 200
    assert client.get(f"/api/analyses/{stored.id}").status_code == 404
    # a deleted analysis no longer serves as cache
    assert client.post("/api/analyses", json=SAMSUNG).json()["fromCache"] is False


def test_health(client):
    """Test the health check."""
    assert client.get("/").json() == {"status": "ok"}

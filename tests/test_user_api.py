"""Tests for /api/user routes."""
from conftest import auth_headers, make_analysis, make_user
from sqlmodel import select

from stock_reports.db.models import AnalysisHistory, User, UserProvider
from stock_reports.repositories import AnalysisRepository


def test_requires_session(client):
    """Test every user route rejects anonymous and forged sessions."""
    assert client.get("/api/user/profile").status_code == 401
    r = client.get("/api/user/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Unauthorized - login required"}


def test_profile(client, db):
    """Test the profile exposes account fields without internal ids."""
    make_user(db)
    r = client.get("/api/user/profile", headers=auth_headers())
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["email"] == "user@example.com"
    assert user["analysis_count"] == 10
    assert user["plan"] == "free"
    assert "id" not in user


def test_profile_from_cookie(client, db):
    """Test the session can also come from the session cookie."""
    make_user(db)
    token = auth_headers()["Authorization"].removeprefix("Bearer ")
    client.cookies.set("session_token", token)
    assert client.get("/api/user/profile").status_code == 200


def test_profile_missing_account(client):
    """Test a valid session without an account is a 404."""
    assert client.get("/api/user/profile", headers=auth_headers("gone@example.com")).status_code == 404


def test_decrement_until_exhausted(client, db):
    """Test each decrement uses one credit and the empty balance is refused."""
    make_user(db, credits=2)
    counts = [
        client.post("/api/user/decrement-analysis", headers=auth_headers()).json()["analysis_count"]
        for _ in range(2)
    ]
    assert counts == [1, 0]

    r = client.post("/api/user/decrement-analysis", headers=auth_headers())
    assert r.status_code == 403
    assert r.json()["error"] == "No analysis credits remaining"
    db.expire_all()
    assert db.exec(select(User)).one().analysis_count == 0


def test_history(client, db):
    """Test the history inlines each analysis, newest first."""
    user = make_user(db)
    first = make_analysis(db)
    second = make_analysis(db, symbol="000660", name="SK하이닉스")
    repo = AnalysisRepository(db)
    repo.add_history(user.id, first.id)
    repo.add_history(user.id, second.id)

    r = client.get("/api/user/analyses-history", headers=auth_headers())
    body = r.json()
    assert body["count"] == 2
    assert body["data"][0]["stock_analyses"]["name"] == "SK하이닉스"
    assert body["data"][1]["analysis_id"] == first.id


def test_providers_and_unlink(client, db):
    """Test listing providers and the last-provider rule."""
    make_user(db, providers=(("kakao", "kakao-1"), ("naver", "naver-1")))
    headers = auth_headers()

    listed = client.get("/api/user/providers", headers=headers).json()["providers"]
    assert {p["provider"] for p in listed} == {"kakao", "naver"}

    r = client.request("DELETE", "/api/user/providers", json={"provider": "naver"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Provider unlinked successfully"

    last = client.request("DELETE", "/api/user/providers", json={"provider": "kakao"}, headers=headers)
    assert last.status_code == 400
    assert last.json()["error"] == "Cannot remove the last login method"

    remaining = client.get("/api/user/providers", headers=headers).json()["providers"]
    assert [p["provider"] for p in remaining] == ["kakao"]


def test_unlink_requires_provider(client, db):
    """Test the unlink body must name a provider."""
    make_user(db)
    r = client.request("DELETE", "/api/user/providers", json={}, headers=auth_headers())
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: provider"


def test_delete_account(client, db):
    """Test account deletion removes the user, links and history."""
    user = make_user(db, providers=(("kakao", "kakao-1"), ("naver", "naver-1")))
    user_id = user.id
    AnalysisRepository(db).add_history(user_id, make_analysis(db).id)

    r = client.delete("/api/user/account", headers=auth_headers())
    assert r.status_code == 200
    assert r.json()["success"] is True

    db.expire_all()
    assert db.exec(select(User)).all() == []
    assert db.exec(select(UserProvider).where(UserProvider.user_id == user_id)).all() == []
    assert db.exec(select(AnalysisHistory).where(AnalysisHistory.user_id == user_id)).all() == []
    assert client.get("/api/user/profile", headers=auth_headers()).status_code == 404

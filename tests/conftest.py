"""Shared fixtures: in-memory SQLite, the app under TestClient, mocked upstream HTTP."""
from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from stock_reports.auth import create_session_token
from stock_reports.clients import AnalysisBackendClient, TossPaymentsClient
from stock_reports.db.models import StockAnalysis, User
from stock_reports.db.sessions import create_db_engine, init_db
from stock_reports.main import create_app
from stock_reports.repositories import AnalysisRepository, UserRepository

AUTH_SECRET = "test-auth-secret"
ADMIN_KEY = "test-admin-key"
TOSS_SECRET_KEY = "test_sk_123"


class FakeUpstream:
    """Routes httpx.MockTransport requests to a swappable handler and records them."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def _default_report(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "report": "# 삼성전자\n\nMemory recovery continues.",
            "sector": "Semiconductors",
            "financial_table": "| period | revenue |",
            "citations": ["https://dart.fss.or.kr"],
            "model": "sonar-pro",
        },
    )


def _default_payment(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "paymentKey": "pk_test_1",
            "orderId": "order-1",
            "status": "DONE",
            "totalAmount": 500,
            "method": "카드",
        },
    )


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def users(session) -> UserRepository:
    return UserRepository(session)


@pytest.fixture
def analyses(session) -> AnalysisRepository:
    return AnalysisRepository(session)


@pytest.fixture
def backend() -> FakeUpstream:
    return FakeUpstream(_default_report)


@pytest.fixture
def toss() -> FakeUpstream:
    return FakeUpstream(_default_payment)


@pytest.fixture
def client(monkeypatch, backend, toss):
    """TestClient over a fresh in-memory database with mocked upstream services."""
    monkeypatch.setenv("AUTH_SHARED_SECRET", AUTH_SECRET)
    monkeypatch.setenv("ADMIN_API_KEY", ADMIN_KEY)
    app = create_app(
        database_url="sqlite://",
        analysis_backend=AnalysisBackendClient(
            client=httpx.AsyncClient(
                transport=httpx.MockTransport(backend), base_url="http://backend.test"
            )
        ),
        payments_client=TossPaymentsClient(
            secret_key=TOSS_SECRET_KEY,
            client=httpx.AsyncClient(
                transport=httpx.MockTransport(toss), base_url=TossPaymentsClient.BASE_URL
            ),
        ),
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client):
    """Session on the running app's database, for arranging and inspecting rows."""
    with Session(client.app.state.engine) as session:
        yield session


def make_user(
    session: Session,
    email: str = "user@example.com",
    providers: tuple[tuple[str, str], ...] = (("kakao", "kakao-1"),),
    credits: int | None = None,
) -> User:
    repo = UserRepository(session)
    user = repo.create(email, name="Test User")
    for provider, account_id in providers:
        repo.link_provider(user.id, provider, account_id)
    if credits is not None:
        user.analysis_count = credits
        session.add(user)
        session.commit()
        session.refresh(user)
    return user


def make_analysis(session: Session, **overrides) -> StockAnalysis:
    fields = {
        "market": "KOSPI",
        "symbol": "005930",
        "name": "삼성전자",
        "report": "report body",
        "compare_periods": ["2024.06", "2024.09"],
    }
    fields.update(overrides)
    return AnalysisRepository(session).create(StockAnalysis(**fields))


def auth_headers(email: str = "user@example.com", provider: str = "kakao") -> dict[str, str]:
    token = create_session_token(email, provider, f"{provider}-1")
    return {"Authorization": f"Bearer {token}"}

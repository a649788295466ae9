import json
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from wrapntrack.core.config import get_settings
from wrapntrack.database import get_session
from wrapntrack.main import app
from wrapntrack.models.inventory import AvailableInventory, InventoryItem
from wrapntrack.routers import otp as otp_router
from wrapntrack.services.otp_service import OtpService
from wrapntrack.storefront.api_client import ApiClient
from wrapntrack.storefront.session import SessionManager

CUSTOMER_EMAIL = "bea@gmail.com"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_token(role: str = "customer", email: str = CUSTOMER_EMAIL, sub: str | None = None) -> str:
    settings = get_settings()
    claims = {"sub": sub or str(uuid.uuid4()), "email": email, "role": role}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sent_codes():
    return []


@pytest.fixture(autouse=True)
def otp_service(monkeypatch, clock, sent_codes):
    """Fresh in-memory OTP store per test; codes are captured, not mailed."""
    service = OtpService(
        ttl_seconds=300,
        resend_cooldown_seconds=30,
        max_attempts=5,
        clock=clock,
        mailer=lambda email, code, ttl: sent_codes.append((email, code)),
    )
    monkeypatch.setattr(otp_router, "service", service)
    return service


@pytest.fixture
def seed(session):
    items = [
        InventoryItem(sku="BC123", name="Gift Box Classic", category="packaging", unit_price=150.0, quantity=10),
        InventoryItem(sku="PKG-010", name="Kraft Box", category="packaging", unit_price=45.0, quantity=50),
        InventoryItem(sku="BEV-010", name="Sparkling Juice", category="beverages", unit_price=120.0, quantity=20),
        InventoryItem(sku="FOOD-010", name="Butter Cookies", category="food", unit_price=85.5, quantity=30),
        InventoryItem(sku="KIT-010", name="Enamel Mug", category="kitchenware", unit_price=200.0, quantity=5),
    ]
    session.add_all(items)
    session.commit()
    session.add_all(
        [
            AvailableInventory(category="packaging", sku="PKG-010"),
            AvailableInventory(category="beverages", sku="BEV-010"),
            AvailableInventory(category="food", sku="FOOD-010"),
        ]
    )
    session.commit()
    return {item.sku: item for item in items}


@pytest.fixture
def customer_token():
    return make_token("customer")


@pytest.fixture
def employee_token():
    return make_token("employee", email="staff@wrapntrack.ph")


@pytest.fixture
def customer_headers(customer_token):
    return {"Authorization": f"Bearer {customer_token}"}


@pytest.fixture
def employee_headers(employee_token):
    return {"Authorization": f"Bearer {employee_token}"}


@pytest.fixture
def storefront_session(customer_token):
    session = SessionManager()
    session.login_customer(customer_token, {"email": CUSTOMER_EMAIL, "name": "Bea"})
    return session


@pytest.fixture
def api(client, storefront_session):
    return ApiClient(storefront_session, http=client)


@pytest.fixture
def auth_headers():
    def _headers(role: str = "customer", email: str = CUSTOMER_EMAIL) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(role, email=email)}"}

    return _headers


class FakeBackend:
    """
    httpx.MockTransport handler that records every request.

    Responses are looked up by (method, path); unknown routes answer
    200 {"success": true}.
    """

    def __init__(self):
        self.calls: list[tuple[str, str, object]] = []
        self.routes: dict[tuple[str, str], tuple[int, object]] = {}

    def reply(self, method: str, path: str, status: int, body: object) -> None:
        self.routes[(method, path)] = (status, body)

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.calls if (m, p) == (method, path))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, request.url.path, body))
        status, payload = self.routes.get((request.method, request.url.path), (200, {"success": True}))
        return httpx.Response(status, json=payload)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def fake_api(backend, storefront_session):
    http = httpx.Client(transport=httpx.MockTransport(backend), base_url="http://api.test")
    yield ApiClient(storefront_session, http=http)
    http.close()

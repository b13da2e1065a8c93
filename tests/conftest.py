"""Pytest fixtures: test client (in-memory SQLite + demo seed), servis katmanı için in-memory store'lar."""
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

# Test ortamında in-memory SQLite (app import edilmeden önce set edilmeli)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SEED_DEMO_DATA", "true")
os.environ.setdefault("STORAGE_BACKEND", "sql")
# Rate limit yüksek olsun ki tüm testler geçebilsin
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")
os.environ.setdefault("RATE_LIMIT_LOGIN_PER_MINUTE", "10000")

from app.core.database import build_engine, init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Category, GiftProduct, Merchant  # noqa: E402
from app.schemas import CreateGiftOrderRequest  # noqa: E402
from app.services.ledger import InMemoryRedemptionLedger  # noqa: E402
from app.services.order_factory import OrderFactory  # noqa: E402
from app.services.order_store import InMemoryOrderStore  # noqa: E402
from app.services.redemption import RedemptionService  # noqa: E402
from app.services.seed import DEMO_PASSWORD  # noqa: E402
from app.services.sql_store import SqlOrderStore, SqlRedemptionLedger  # noqa: E402


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def merchants():
    return {
        "m1": Merchant(
            id="m1",
            name="Roastery",
            credit_is_enabled=True,
            credit_min_amount=100000,
            credit_max_amount=2000000,
            credit_preset_amounts="250000,500000",
        ),
        "m2": Merchant(id="m2", name="Florist", credit_is_enabled=False),
        "m3": Merchant(id="m3", name="Unbounded", credit_is_enabled=True),
    }


@pytest.fixture
def products():
    return {
        "p1": GiftProduct(id="p1", merchant_id="m1", title="Latte", price=Decimal("4.50"), currency="USD", category=Category.COFFEE),
        "p2": GiftProduct(id="p2", merchant_id="m2", title="Roses", price=Decimal("30.00"), currency="USD", category=Category.FLOWERS),
    }


@pytest.fixture(params=["memory", "sql"])
def backend(request):
    """Aynı testi iki depolama uygulamasıyla çalıştırır."""
    if request.param == "memory":
        return InMemoryOrderStore(), InMemoryRedemptionLedger()
    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    return SqlOrderStore(engine), SqlRedemptionLedger(engine)


@pytest.fixture
def store(backend):
    return backend[0]


@pytest.fixture
def ledger(backend):
    return backend[1]


@pytest.fixture
def factory(store, merchants, products, clock):
    return OrderFactory(store, merchants.get, products.get, clock)


@pytest.fixture
def redemption(store, ledger, clock):
    return RedemptionService(store, ledger, clock)


@pytest.fixture
def order_request():
    """CreateGiftOrderRequest üretir; alanlar keyword ile değiştirilebilir."""

    def make(**overrides) -> CreateGiftOrderRequest:
        data = {
            "sender_name": "Rami",
            "receiver_name": "Lea",
            "receiver_contact": "+9613000000",
            "delivery_channel": "whatsapp",
            "merchant_id": "m1",
            "message": "Happy birthday!",
            "product_id": "p1",
        }
        data.update(overrides)
        return CreateGiftOrderRequest(**data)

    return make


@pytest.fixture(scope="function")
def client():
    """TestClient; lifespan ile in-memory DB, tablolar ve demo verisi hazır olur."""
    with TestClient(app) as c:
        yield c


def _login(email: str) -> str:
    with TestClient(app) as c:
        r = c.post("/api/merchant/login", json={"email": email, "password": DEMO_PASSWORD})
        assert r.status_code == 200, f"Login failed: {r.status_code} {r.text}"
        return r.json()["token"]


@pytest.fixture(scope="session")
def _beans_token():
    return _login("staff@beansandco.com")


@pytest.fixture(scope="session")
def _bloom_token():
    return _login("staff@bloomatelier.com")


@pytest.fixture
def beans_headers(_beans_token):
    return {"Authorization": f"Bearer {_beans_token}"}


@pytest.fixture
def bloom_headers(_bloom_token):
    return {"Authorization": f"Bearer {_bloom_token}"}

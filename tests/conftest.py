"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date, datetime, timezone
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from gold_ledger.api.main import create_app
from gold_ledger.api.dependencies import get_gold_price_service, get_sync_client
from gold_ledger.infrastructure.database.models import Base
from gold_ledger.infrastructure.database.session import get_db
from gold_ledger.domain.models import Debt, GoldQuote, Installment, Unit
from gold_ledger.utils.date_utils import add_months


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DAILY_GOLD_PRICE = 5000.0


class FixedPriceService:
    """Price collaborator stand-in serving a constant daily quote"""

    def __init__(self, price: float = DAILY_GOLD_PRICE):
        self.price = price
        self.calls = 0

    async def current_quote(self, force_refresh: bool = False) -> GoldQuote:
        self.calls += 1
        return GoldQuote(
            price=self.price,
            fetched_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            source_url="https://prices.example/gold",
            is_from_cache=not force_refresh,
        )


class RecordingSyncClient:
    """Captures change events instead of posting them"""

    def __init__(self):
        self.events = []

    async def publish(self, payload):
        self.events.append(payload)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def price_service() -> FixedPriceService:
    return FixedPriceService()


@pytest.fixture
def sync_client() -> RecordingSyncClient:
    return RecordingSyncClient()


@pytest.fixture
def client(db: Session, price_service: FixedPriceService, sync_client: RecordingSyncClient) -> TestClient:
    """Create FastAPI test client with test database and stub collaborators"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gold_price_service] = lambda: price_service
    app.dependency_overrides[get_sync_client] = lambda: sync_client
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_debt(amounts, unit=Unit.CASH, rate=None, start=date(2026, 1, 15)) -> Debt:
    """Debt with hand-picked installment amounts, due monthly from February"""
    installments = tuple(
        Installment(id=f"i{n + 1}", due_date=add_months(start, n + 1), amount=a)
        for n, a in enumerate(amounts)
    )
    total = sum(amounts)
    return Debt(
        id="d1",
        label="Test invoice",
        unit=unit,
        principal_cash=total * rate if unit == Unit.GOLD else total,
        term_months=len(amounts),
        start_date=datetime(start.year, start.month, start.day, tzinfo=timezone.utc),
        installments=installments,
        gold_price_at_registration=rate,
        gold_grams=total if unit == Unit.GOLD else None,
    )


@pytest.fixture
def cash_debt() -> Debt:
    """CASH debt of three 100 EGP installments"""
    return make_debt([100.0, 100.0, 100.0])


@pytest.fixture
def gold_debt() -> Debt:
    """GOLD debt of 3 g registered at 4000 EGP/g, 1 g per month"""
    return make_debt([1.0, 1.0, 1.0], unit=Unit.GOLD, rate=4000.0)


@pytest.fixture
def debt_factory():
    return make_debt

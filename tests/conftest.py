"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before any module builds the database engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from aid_risk_gateway.api.main import create_app
from aid_risk_gateway.api.dependencies import get_clock, get_ledger_client, get_limit_client
from aid_risk_gateway.domain.exceptions import LedgerAPIError
from aid_risk_gateway.domain.interfaces import CategoryLimitProvider, TransactionLogReader
from aid_risk_gateway.domain.models import CategoryLimit, Transaction
from aid_risk_gateway.infrastructure.database.models import Base
from aid_risk_gateway.infrastructure.database.session import get_db, init_db
from aid_risk_gateway.utils.amounts import from_units


# Mid-afternoon UTC, inside business hours
NOW = datetime(2026, 3, 10, 14, 0, tzinfo=timezone.utc)

BENEFICIARY = "0x" + "b" * 40
VENDOR = "0x" + "v" * 40
OTHER_VENDOR = "0x" + "w" * 40

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_tx(
    units: int | str = 10,
    category: str = "Food",
    ago: timedelta = timedelta(hours=2),
    sender: str = BENEFICIARY,
    recipient: str = VENDOR,
    now: datetime = NOW,
    tx_hash: Optional[str] = None,
) -> Transaction:
    """Confirmed spending transaction `ago` before `now`"""
    return Transaction(
        sender=sender,
        recipient=recipient,
        category=category,
        amount=from_units(units),
        timestamp=now - ago,
        status="confirmed",
        tx_hash=tx_hash,
    )


class FakeLedger(TransactionLogReader):
    """In-memory transaction log"""

    def __init__(self, transactions: Optional[List[Transaction]] = None, error: Optional[Exception] = None):
        self.transactions = list(transactions or [])
        self.error = error
        self.calls = []

    async def find_transactions(self, sender, category, since, type="spending", status="confirmed"):
        self.calls.append({"sender": sender, "category": category, "since": since})
        if self.error is not None:
            raise self.error
        return sorted(
            (
                tx
                for tx in self.transactions
                if (sender is None or tx.sender == sender)
                and (category is None or tx.category == category)
                and tx.timestamp >= since
                and tx.status == status
            ),
            key=lambda tx: tx.timestamp,
        )


class FakeLimits(CategoryLimitProvider):
    """In-memory category limit store"""

    def __init__(self, limits: Optional[List[CategoryLimit]] = None, error: Optional[Exception] = None):
        self.limits = {limit.category: limit for limit in limits or []}
        self.error = error

    async def get_active_limit(self, category):
        if self.error is not None:
            raise self.error
        return self.limits.get(category)


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def fake_limits() -> FakeLimits:
    return FakeLimits()


@pytest.fixture
def unreachable_ledger() -> FakeLedger:
    return FakeLedger(error=LedgerAPIError("Ledger API timeout after 2.0s"))


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    init_db(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session, fake_ledger: FakeLedger, fake_limits: FakeLimits) -> TestClient:
    """Create FastAPI test client with test database, fake ledger and a frozen clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger_client] = lambda: fake_ledger
    app.dependency_overrides[get_limit_client] = lambda: fake_limits
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    return TestClient(app)

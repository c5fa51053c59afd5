"""Pytest fixtures for testing"""

import itertools
import pytest
from datetime import date, time
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from cycle_ledger.api.main import create_app
from cycle_ledger.infrastructure.database.models import Base
from cycle_ledger.infrastructure.database.session import get_db
from cycle_ledger.domain.models import (
    Account,
    AlertSettings,
    BillingCycleConfig,
    LedgerSnapshot,
    SubAccount,
    Transaction,
    TransactionType,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Reference date used across tests: cycle Feb 27 - Mar 26 2024 is current
TODAY = date(2024, 3, 10)


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_txn():
    """Factory for transactions on the card sub-account (sa-card) by default"""
    ids = itertools.count(1)

    def _make(
        day: date | None,
        amount_cents: int,
        type: TransactionType = TransactionType.EXPENSE,
        account_ref: str = "sa-card",
        counter_account_ref: str | None = None,
        at: time | None = time(12, 0),
        transaction_id: str | None = None,
        category_id: str | None = None,
        sub_category_id: str | None = None,
    ) -> Transaction:
        return Transaction(
            transaction_id=transaction_id or f"tx-{next(ids)}",
            date=day,
            time=at,
            amount_cents=amount_cents,
            type=type,
            account_ref=account_ref,
            counter_account_ref=counter_account_ref,
            category_id=category_id,
            sub_category_id=sub_category_id,
        )

    return _make


@pytest.fixture
def cycle_config() -> BillingCycleConfig:
    """Statement opens on the 27th, payment due 15 days after it closes"""
    return BillingCycleConfig(enabled=True, start_day=27, due_days_after_end=15, alert_days_before=3)


@pytest.fixture
def accounts(cycle_config: BillingCycleConfig) -> list[Account]:
    """A bank account funding a card account with one cycle-tracked card"""
    return [
        Account(id="acc-bank", name="Bank", sub_accounts=[SubAccount(id="sa-bank", name="Main Account")]),
        Account(
            id="acc-cards",
            name="Cards",
            sub_accounts=[
                SubAccount(id="sa-card", name="Visa", billing_cycle=cycle_config),
                SubAccount(id="sa-debit", name="Debit"),
            ],
        ),
    ]


@pytest.fixture
def card_snapshot(accounts: list[Account], make_txn) -> LedgerSnapshot:
    """
    1000.00 spent in the Jan 27 - Feb 26 statement, 400.00 paid on Mar 5 by
    transfer from the bank account. 600.00 is still owed.
    """
    return LedgerSnapshot(
        accounts=accounts,
        transactions=[
            make_txn(date(2024, 2, 10), 100000, transaction_id="tx-groceries"),
            make_txn(
                date(2024, 3, 5),
                40000,
                type=TransactionType.TRANSFER,
                account_ref="sa-bank",
                counter_account_ref="sa-card",
                transaction_id="tx-payment",
            ),
        ],
        settings=AlertSettings(budget_alert_enabled=False),
    )

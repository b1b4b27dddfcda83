"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import datetime
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from debt_ledger.api.dependencies import get_clock
from debt_ledger.api.main import create_app
from debt_ledger.domain.models import LoanCategory, LoanPlan
from debt_ledger.infrastructure.database.models import Base
from debt_ledger.infrastructure.database.repositories import (
    BankRepository,
    LedgerQueries,
    LoanTransactionRepository,
    PaymentRepository,
)
from debt_ledger.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Mid-January 2024; reports in tests are computed against this instant
FIXED_NOW = datetime(2024, 1, 15, 10, 0, 0)


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
def store(db: Session) -> LedgerQueries:
    return LedgerQueries(db)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def client(db: Session, now: datetime) -> TestClient:
    """Create FastAPI test client with test database and a frozen clock"""
    app = create_app(create_tables=False)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: now)
    return TestClient(app)


@pytest.fixture
def make_bank(db: Session):
    """Insert a bank directly through the repository"""

    def _make(
        name: str = "Test Bank",
        credit_limit: str = "10000000",
        category: LoanCategory = LoanCategory.KTA,
        billing_day: int | None = None,
        due_day: int = 15,
    ):
        db_bank = BankRepository(db).create_bank(
            name=name,
            credit_limit=Decimal(credit_limit),
            plan=LoanPlan(category=category, billing_day=billing_day),
            due_day=due_day,
        )
        db.commit()
        return db_bank

    return _make


@pytest.fixture
def make_transaction(db: Session):
    """Insert a loan transaction without running validation rules"""

    def _make(
        bank_id: int,
        amount: str = "5000000",
        transaction_date: datetime = datetime(2024, 1, 10, 12, 0),
        description: str = "Test loan transaction",
        is_installment: bool = False,
    ):
        db_transaction = LoanTransactionRepository(db).create_transaction(
            bank_id=bank_id,
            transaction_date=transaction_date,
            description=description,
            amount=Decimal(amount),
            is_installment=is_installment,
        )
        db.commit()
        return db_transaction

    return _make


@pytest.fixture
def make_payment(db: Session):
    """Insert a payment without running validation rules"""

    def _make(
        bank_id: int,
        loan_transaction_id: int,
        amount: str = "1000000",
        payment_date: datetime = datetime(2024, 1, 12, 12, 0),
    ):
        db_payment = PaymentRepository(db).create_payment(
            bank_id=bank_id,
            loan_transaction_id=loan_transaction_id,
            payment_date=payment_date,
            amount=Decimal(amount),
        )
        db.commit()
        return db_payment

    return _make

"""SQLAlchemy ORM models for banks, loan transactions and payments"""

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from debt_ledger.domain.models import LoanCategory

Base = declarative_base()

MONEY = Numeric(15, 2)


class BankRecord(Base):
    """Lending institution with its credit limit and billing schedule"""

    __tablename__ = "banks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    credit_limit = Column(MONEY, nullable=False)
    category = Column(Enum(LoanCategory, name="loan_type"), nullable=False)
    billing_day = Column(Integer, nullable=True)  # Credit cards only
    due_day = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    loan_transactions = relationship("LoanTransactionRecord", back_populates="bank")
    payments = relationship("PaymentRecord", back_populates="bank")


class LoanTransactionRecord(Base):
    """Charge drawn against a bank"""

    __tablename__ = "loan_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_id = Column(Integer, ForeignKey("banks.id"), nullable=False, index=True)
    transaction_date = Column(DateTime, nullable=False, index=True)  # Naive local time
    description = Column(Text, nullable=False)
    amount = Column(MONEY, nullable=False)
    is_installment = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    bank = relationship("BankRecord", back_populates="loan_transactions")
    payments = relationship("PaymentRecord", back_populates="loan_transaction", cascade="all, delete-orphan")


class PaymentRecord(Base):
    """Repayment toward a loan transaction"""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_id = Column(Integer, ForeignKey("banks.id"), nullable=False, index=True)
    loan_transaction_id = Column(
        Integer, ForeignKey("loan_transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_date = Column(DateTime, nullable=False, index=True)  # Naive local time
    amount = Column(MONEY, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    bank = relationship("BankRecord", back_populates="payments")
    loan_transaction = relationship("LoanTransactionRecord", back_populates="payments")

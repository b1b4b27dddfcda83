"""Data access layer for ledger entities"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from debt_ledger.domain.models import (
    Bank,
    LoanCategory,
    LoanPlan,
    LoanTransaction,
    Payment,
    Totals,
)
from debt_ledger.infrastructure.database.models import BankRecord, LoanTransactionRecord, PaymentRecord


def bank_to_domain(record: BankRecord) -> Bank:
    return Bank(
        id=record.id,
        name=record.name,
        credit_limit=Decimal(record.credit_limit),
        plan=LoanPlan(category=LoanCategory(record.category), billing_day=record.billing_day),
        due_day=record.due_day,
    )


def loan_transaction_to_domain(record: LoanTransactionRecord) -> LoanTransaction:
    return LoanTransaction(
        id=record.id,
        bank_id=record.bank_id,
        transaction_date=record.transaction_date,
        description=record.description,
        amount=Decimal(record.amount),
        is_installment=record.is_installment,
    )


def payment_to_domain(record: PaymentRecord) -> Payment:
    return Payment(
        id=record.id,
        bank_id=record.bank_id,
        loan_transaction_id=record.loan_transaction_id,
        payment_date=record.payment_date,
        amount=Decimal(record.amount),
    )


def _to_totals(row) -> Totals:
    amount, count = row
    return Totals(amount=Decimal(str(amount)), count=int(count))


class BankRepository:
    """Repository for banks"""

    def __init__(self, db: Session):
        self.db = db

    def create_bank(self, name: str, credit_limit: Decimal, plan: LoanPlan, due_day: int) -> BankRecord:
        """Persist a new bank; the plan has already been validated"""
        db_bank = BankRecord(
            name=name,
            credit_limit=credit_limit,
            category=plan.category,
            billing_day=plan.billing_day,
            due_day=due_day,
        )
        self.db.add(db_bank)
        self.db.flush()
        self.db.refresh(db_bank)
        return db_bank

    def get_bank(self, bank_id: int) -> Optional[BankRecord]:
        return self.db.query(BankRecord).filter(BankRecord.id == bank_id).first()

    def list_banks(self) -> List[BankRecord]:
        return self.db.query(BankRecord).order_by(BankRecord.id).all()

    def save_bank(self, db_bank: BankRecord, bank: Bank) -> BankRecord:
        """Write a merged domain bank back onto its record"""
        db_bank.name = bank.name
        db_bank.credit_limit = bank.credit_limit
        db_bank.category = bank.category
        db_bank.billing_day = bank.billing_day
        db_bank.due_day = bank.due_day
        self.db.flush()
        self.db.refresh(db_bank)
        return db_bank

    def delete_bank(self, db_bank: BankRecord) -> None:
        self.db.delete(db_bank)
        self.db.flush()


class LoanTransactionRepository:
    """Repository for loan transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        bank_id: int,
        transaction_date: datetime,
        description: str,
        amount: Decimal,
        is_installment: bool,
    ) -> LoanTransactionRecord:
        db_transaction = LoanTransactionRecord(
            bank_id=bank_id,
            transaction_date=transaction_date,
            description=description,
            amount=amount,
            is_installment=is_installment,
        )
        self.db.add(db_transaction)
        self.db.flush()
        self.db.refresh(db_transaction)
        return db_transaction

    def get_transaction(self, transaction_id: int) -> Optional[LoanTransactionRecord]:
        return (
            self.db.query(LoanTransactionRecord)
            .filter(LoanTransactionRecord.id == transaction_id)
            .first()
        )

    def list_transactions(self, bank_id: Optional[int] = None) -> List[LoanTransactionRecord]:
        """Fetch transactions, newest transaction date first"""
        query = self.db.query(LoanTransactionRecord)
        if bank_id is not None:
            query = query.filter(LoanTransactionRecord.bank_id == bank_id)
        return query.order_by(LoanTransactionRecord.transaction_date.desc(), LoanTransactionRecord.id.desc()).all()

    def save_transaction(self, db_transaction: LoanTransactionRecord, transaction: LoanTransaction) -> LoanTransactionRecord:
        db_transaction.bank_id = transaction.bank_id
        db_transaction.transaction_date = transaction.transaction_date
        db_transaction.description = transaction.description
        db_transaction.amount = transaction.amount
        db_transaction.is_installment = transaction.is_installment
        self.db.flush()
        self.db.refresh(db_transaction)
        return db_transaction

    def delete_transaction(self, db_transaction: LoanTransactionRecord) -> None:
        """Delete a transaction together with its payments"""
        self.db.delete(db_transaction)
        self.db.flush()


class PaymentRepository:
    """Repository for payments"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(
        self,
        bank_id: int,
        loan_transaction_id: int,
        payment_date: datetime,
        amount: Decimal,
    ) -> PaymentRecord:
        db_payment = PaymentRecord(
            bank_id=bank_id,
            loan_transaction_id=loan_transaction_id,
            payment_date=payment_date,
            amount=amount,
        )
        self.db.add(db_payment)
        self.db.flush()
        self.db.refresh(db_payment)
        return db_payment

    def get_payment(self, payment_id: int) -> Optional[PaymentRecord]:
        return self.db.query(PaymentRecord).filter(PaymentRecord.id == payment_id).first()

    def list_payments(
        self,
        bank_id: Optional[int] = None,
        loan_transaction_id: Optional[int] = None,
    ) -> List[PaymentRecord]:
        """Fetch payments, newest payment date first"""
        query = self.db.query(PaymentRecord)
        if bank_id is not None:
            query = query.filter(PaymentRecord.bank_id == bank_id)
        if loan_transaction_id is not None:
            query = query.filter(PaymentRecord.loan_transaction_id == loan_transaction_id)
        return query.order_by(PaymentRecord.payment_date.desc(), PaymentRecord.id.desc()).all()

    def save_payment(self, db_payment: PaymentRecord, payment: Payment) -> PaymentRecord:
        db_payment.bank_id = payment.bank_id
        db_payment.loan_transaction_id = payment.loan_transaction_id
        db_payment.payment_date = payment.payment_date
        db_payment.amount = payment.amount
        self.db.flush()
        self.db.refresh(db_payment)
        return db_payment

    def delete_payment(self, payment_id: int) -> bool:
        """Delete a payment; False when it did not exist"""
        db_payment = self.get_payment(payment_id)
        if not db_payment:
            return False
        self.db.delete(db_payment)
        self.db.flush()
        return True


class LedgerQueries:
    """Read access used by validation rules and reports"""

    def __init__(self, db: Session):
        self.db = db

    def get_bank(self, bank_id: int) -> Optional[Bank]:
        db_bank = BankRepository(self.db).get_bank(bank_id)
        return bank_to_domain(db_bank) if db_bank else None

    def list_banks(self) -> List[Bank]:
        return [bank_to_domain(b) for b in BankRepository(self.db).list_banks()]

    def get_loan_transaction(self, transaction_id: int) -> Optional[LoanTransaction]:
        db_transaction = LoanTransactionRepository(self.db).get_transaction(transaction_id)
        return loan_transaction_to_domain(db_transaction) if db_transaction else None

    def transaction_totals(
        self,
        bank_id: Optional[int] = None,
        category: Optional[LoanCategory] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        exclude_id: Optional[int] = None,
    ) -> Totals:
        """Sum and count of loan transactions matching every supplied filter"""
        query = self.db.query(
            func.coalesce(func.sum(LoanTransactionRecord.amount), 0),
            func.count(LoanTransactionRecord.id),
        ).select_from(LoanTransactionRecord)

        if category is not None:
            query = query.join(BankRecord, LoanTransactionRecord.bank_id == BankRecord.id).filter(
                BankRecord.category == category
            )
        if bank_id is not None:
            query = query.filter(LoanTransactionRecord.bank_id == bank_id)
        if start is not None:
            query = query.filter(LoanTransactionRecord.transaction_date >= start)
        if end is not None:
            query = query.filter(LoanTransactionRecord.transaction_date <= end)
        if exclude_id is not None:
            query = query.filter(LoanTransactionRecord.id != exclude_id)

        return _to_totals(query.one())

    def payment_totals(
        self,
        bank_id: Optional[int] = None,
        category: Optional[LoanCategory] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        loan_transaction_id: Optional[int] = None,
    ) -> Totals:
        """Sum and count of payments matching every supplied filter"""
        query = self.db.query(
            func.coalesce(func.sum(PaymentRecord.amount), 0),
            func.count(PaymentRecord.id),
        ).select_from(PaymentRecord)

        if category is not None:
            query = query.join(BankRecord, PaymentRecord.bank_id == BankRecord.id).filter(
                BankRecord.category == category
            )
        if bank_id is not None:
            query = query.filter(PaymentRecord.bank_id == bank_id)
        if start is not None:
            query = query.filter(PaymentRecord.payment_date >= start)
        if end is not None:
            query = query.filter(PaymentRecord.payment_date <= end)
        if loan_transaction_id is not None:
            query = query.filter(PaymentRecord.loan_transaction_id == loan_transaction_id)

        return _to_totals(query.one())

"""Report assembly - monthly, per-category and due-date summaries"""

from datetime import datetime
from typing import List

from debt_ledger.domain.aggregation import (
    category_totals,
    days_until_due,
    month_window,
    outstanding_balance,
    windowed_totals,
)
from debt_ledger.domain.models import CategoryReport, DueDateRow, LoanCategory, MonthlyReport
from debt_ledger.domain.store import LedgerReader


def monthly_aggregate(year: int, month: int, store: LedgerReader) -> MonthlyReport:
    """Loans and payments dated within one calendar month"""
    start, end = month_window(year, month)
    loans, payments = windowed_totals(store, start, end)

    return MonthlyReport(
        year=year,
        month=month,
        total_loans=loans.amount,
        total_payments=payments.amount,
        net_debt=loans.amount - payments.amount,
        transaction_count=loans.count,
        payment_count=payments.count,
    )


def category_aggregate(category: LoanCategory, store: LedgerReader) -> CategoryReport:
    """All-time totals for every bank of one loan category"""
    category = LoanCategory(category)
    loans, payments = category_totals(store, category)

    return CategoryReport(
        category=category,
        total_loans=loans.amount,
        total_payments=payments.amount,
        outstanding_amount=loans.amount - payments.amount,
        transaction_count=loans.count,
        payment_count=payments.count,
    )


def all_category_aggregates(store: LedgerReader) -> List[CategoryReport]:
    """One report per loan category, zero-filled when a category has no activity"""
    return [category_aggregate(category, store) for category in LoanCategory]


def due_date_rows(now: datetime, store: LedgerReader) -> List[DueDateRow]:
    """
    Due-date proximity and outstanding balance for every bank.

    Args:
        now: Reference instant for days-until-due
    """
    return [
        DueDateRow(
            bank_id=bank.id,
            bank_name=bank.name,
            category=bank.category,
            due_day=bank.due_day,
            days_until_due=days_until_due(bank.due_day, now),
            outstanding_amount=outstanding_balance(store, bank_id=bank.id),
        )
        for bank in store.list_banks()
    ]


def upcoming_due_dates(now: datetime, store: LedgerReader, days: int = 7) -> List[DueDateRow]:
    """Banks with a positive balance due within the next `days` days (today included)"""
    return [
        row
        for row in due_date_rows(now, store)
        if 0 <= row.days_until_due <= days and row.outstanding_amount > 0
    ]


def overdue_due_dates(now: datetime, store: LedgerReader) -> List[DueDateRow]:
    """Banks with a positive balance whose due day has already passed this month"""
    return [
        row
        for row in due_date_rows(now, store)
        if row.days_until_due < 0 and row.outstanding_amount > 0
    ]

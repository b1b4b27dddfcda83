"""Aggregation engine - sums, counts, balances and due-date proximity"""

import math
from datetime import datetime, time
from decimal import Decimal
from typing import Optional, Tuple

from debt_ledger.domain.models import LoanCategory, Totals
from debt_ledger.domain.store import LedgerReader
from debt_ledger.utils.date_utils import day_in_month, month_bounds


def month_window(year: int, month: int) -> Tuple[datetime, datetime]:
    """Inclusive bounds covering a calendar month"""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return month_bounds(year, month)


def windowed_totals(store: LedgerReader, start: datetime, end: datetime) -> Tuple[Totals, Totals]:
    """Transaction and payment totals whose business date falls within [start, end]"""
    return (
        store.transaction_totals(start=start, end=end),
        store.payment_totals(start=start, end=end),
    )


def category_totals(store: LedgerReader, category: LoanCategory) -> Tuple[Totals, Totals]:
    """All-time transaction and payment totals for banks of one category"""
    return (
        store.transaction_totals(category=category),
        store.payment_totals(category=category),
    )


def outstanding_balance(
    store: LedgerReader,
    bank_id: Optional[int] = None,
    category: Optional[LoanCategory] = None,
) -> Decimal:
    """
    Loans minus payments for one bank, one category, or every bank.

    Negative when more has been paid than borrowed (credit on the account).
    """
    loans = store.transaction_totals(bank_id=bank_id, category=category)
    payments = store.payment_totals(bank_id=bank_id, category=category)
    return loans.amount - payments.amount


def days_until_due(due_day: int, now: datetime) -> int:
    """
    Whole days from now until this month's due day, rounded up.

    The due date is midnight of `due_day` in the month of `now`, so the result
    is 0 on the due day itself and negative once it has passed. It does not
    roll forward to next month.
    """
    due_date = datetime.combine(day_in_month(now.year, now.month, due_day), time.min)
    if now.tzinfo is not None:
        due_date = due_date.replace(tzinfo=now.tzinfo)

    seconds = (due_date - now).total_seconds()
    return math.ceil(seconds / 86400)

"""/v1/reports - monthly, per-category and due-date summaries"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from debt_ledger.api.dependencies import Clock, get_clock, get_ledger_queries
from debt_ledger.api.v1.schemas import CategoryReportResponse, DueDateRowResponse, MonthlyReportResponse
from debt_ledger.config import settings
from debt_ledger.domain.models import LoanCategory
from debt_ledger.domain.reports import (
    all_category_aggregates,
    category_aggregate,
    due_date_rows,
    monthly_aggregate,
    overdue_due_dates,
    upcoming_due_dates,
)
from debt_ledger.infrastructure.database.repositories import LedgerQueries
from debt_ledger.infrastructure.observability.metrics import report_counter

router = APIRouter(prefix="/reports")


@router.get("/monthly", response_model=MonthlyReportResponse)
def get_monthly_report(
    year: int = Query(..., ge=2000),
    month: int = Query(..., ge=1, le=12),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    """
    Loans and payments dated within one calendar month.

    Returns:
        Totals, net debt change (loans - payments) and row counts
    """
    report_counter.labels(report="monthly").inc()
    return MonthlyReportResponse.model_validate(monthly_aggregate(year, month, store))


@router.get("/categories", response_model=List[CategoryReportResponse])
def get_all_category_reports(store: LedgerQueries = Depends(get_ledger_queries)):
    """One entry per loan category, zero-filled when a category has no activity"""
    report_counter.labels(report="category").inc()
    return [CategoryReportResponse.model_validate(r) for r in all_category_aggregates(store)]


@router.get("/categories/{category}", response_model=CategoryReportResponse)
def get_category_report(
    category: LoanCategory,
    store: LedgerQueries = Depends(get_ledger_queries),
):
    report_counter.labels(report="category").inc()
    return CategoryReportResponse.model_validate(category_aggregate(category, store))


@router.get("/due-dates", response_model=List[DueDateRowResponse])
def get_due_date_report(
    clock: Clock = Depends(get_clock),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    """Every bank with days until its due day (negative if passed) and outstanding balance"""
    report_counter.labels(report="due_date").inc()
    return [DueDateRowResponse.model_validate(r) for r in due_date_rows(clock(), store)]


@router.get("/due-dates/upcoming", response_model=List[DueDateRowResponse])
def get_upcoming_due_dates(
    days: Optional[int] = Query(None, gt=0, description="Look-ahead window in days"),
    clock: Clock = Depends(get_clock),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    report_counter.labels(report="due_date").inc()
    window = days if days is not None else settings.upcoming_due_days
    return [DueDateRowResponse.model_validate(r) for r in upcoming_due_dates(clock(), store, days=window)]


@router.get("/due-dates/overdue", response_model=List[DueDateRowResponse])
def get_overdue_due_dates(
    clock: Clock = Depends(get_clock),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    report_counter.labels(report="due_date").inc()
    return [DueDateRowResponse.model_validate(r) for r in overdue_due_dates(clock(), store)]

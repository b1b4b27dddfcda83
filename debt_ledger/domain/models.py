"""Domain models - pure Python dataclasses representing business entities"""

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from debt_ledger.domain.exceptions import InvalidBillingConfigError


class LoanCategory(str, enum.Enum):
    """Lending product types tracked by the ledger"""

    KARTU_KREDIT = "KARTU_KREDIT"  # credit card
    PAYLATER = "PAYLATER"
    KTA = "KTA"  # unsecured personal loan
    KUR = "KUR"  # government-subsidized micro-loan


class _Unset:
    """Marker for patch fields the caller did not supply"""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class LoanPlan:
    """Loan category together with its billing print day.

    Only credit cards carry a billing day; every other category carries None.
    Construction fails for any other combination.
    """

    category: LoanCategory
    billing_day: Optional[int] = None

    def __post_init__(self) -> None:
        if self.category == LoanCategory.KARTU_KREDIT:
            if self.billing_day is None:
                raise InvalidBillingConfigError("Billing print day is required for credit card banks")
            if not 1 <= self.billing_day <= 31:
                raise InvalidBillingConfigError(
                    f"Billing print day must be between 1 and 31, got {self.billing_day}"
                )
        elif self.billing_day is not None:
            raise InvalidBillingConfigError("Billing print day is only allowed for credit card banks")

    @property
    def is_credit_card(self) -> bool:
        return self.category == LoanCategory.KARTU_KREDIT


@dataclass
class Bank:
    """Lending institution or credit line"""

    id: int
    name: str
    credit_limit: Decimal
    plan: LoanPlan
    due_day: int

    @property
    def category(self) -> LoanCategory:
        return self.plan.category

    @property
    def billing_day(self) -> Optional[int]:
        return self.plan.billing_day


@dataclass
class LoanTransaction:
    """Charge drawn against a bank"""

    id: int
    bank_id: int
    transaction_date: datetime
    description: str
    amount: Decimal
    is_installment: bool


@dataclass
class Payment:
    """Repayment toward a loan transaction"""

    id: int
    bank_id: int
    loan_transaction_id: int
    payment_date: datetime
    amount: Decimal


@dataclass
class BankPatch:
    """Partial bank update - fields left as UNSET are not changed"""

    name: Any = UNSET
    credit_limit: Any = UNSET
    category: Any = UNSET
    billing_day: Any = UNSET
    due_day: Any = UNSET


@dataclass
class LoanTransactionPatch:
    """Partial loan transaction update"""

    bank_id: Any = UNSET
    transaction_date: Any = UNSET
    description: Any = UNSET
    amount: Any = UNSET
    is_installment: Any = UNSET


@dataclass
class PaymentPatch:
    """Partial payment update"""

    bank_id: Any = UNSET
    loan_transaction_id: Any = UNSET
    payment_date: Any = UNSET
    amount: Any = UNSET


@dataclass
class Totals:
    """Sum and row count of a filtered set of transactions or payments"""

    amount: Decimal = Decimal("0")
    count: int = 0


@dataclass
class LimitCheck:
    """Outcome of a successful credit limit check"""

    current_total: Decimal
    new_total: Decimal
    limit: Decimal


@dataclass
class MonthlyReport:
    year: int
    month: int
    total_loans: Decimal
    total_payments: Decimal
    net_debt: Decimal
    transaction_count: int
    payment_count: int


@dataclass
class CategoryReport:
    category: LoanCategory
    total_loans: Decimal
    total_payments: Decimal
    outstanding_amount: Decimal
    transaction_count: int
    payment_count: int


@dataclass
class DueDateRow:
    """Due-date proximity and balance for a single bank"""

    bank_id: int
    bank_name: str
    category: LoanCategory
    due_day: int
    days_until_due: int  # Negative once the due day has passed this month
    outstanding_amount: Decimal

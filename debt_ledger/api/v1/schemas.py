"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from debt_ledger.domain.models import BankPatch, LoanCategory, LoanTransactionPatch, PaymentPatch


class _PatchRequest(BaseModel):
    """Base for partial updates: omitted fields stay unchanged, nulls only where allowed"""

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_fields(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} cannot be null")
        return self

    def supplied(self) -> dict:
        return self.model_dump(exclude_unset=True)


# Banks


class BankCreate(BaseModel):
    """Request body for POST /v1/banks"""

    name: str = Field(..., min_length=1, description="Bank display name")
    credit_limit: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    category: LoanCategory
    billing_day: Optional[int] = Field(None, ge=1, le=31, description="Credit cards only")
    due_day: int = Field(..., ge=1, le=31)


class BankUpdate(_PatchRequest):
    """Request body for PATCH /v1/banks/{bank_id}"""

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"billing_day"})

    name: Optional[str] = Field(None, min_length=1)
    credit_limit: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=2)
    category: Optional[LoanCategory] = None
    billing_day: Optional[int] = Field(None, ge=1, le=31)
    due_day: Optional[int] = Field(None, ge=1, le=31)

    def to_patch(self) -> BankPatch:
        return BankPatch(**self.supplied())


class BankResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    credit_limit: Decimal
    category: LoanCategory
    billing_day: Optional[int]
    due_day: int
    created_at: datetime
    updated_at: datetime


# Loan transactions


class LoanTransactionCreate(BaseModel):
    """Request body for POST /v1/loan-transactions"""

    bank_id: int
    transaction_date: datetime
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    is_installment: bool = False


class LoanTransactionUpdate(_PatchRequest):
    """Request body for PATCH /v1/loan-transactions/{transaction_id}"""

    bank_id: Optional[int] = None
    transaction_date: Optional[datetime] = None
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=2)
    is_installment: Optional[bool] = None

    def to_patch(self) -> LoanTransactionPatch:
        return LoanTransactionPatch(**self.supplied())


class LoanTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bank_id: int
    transaction_date: datetime
    description: str
    amount: Decimal
    is_installment: bool
    created_at: datetime
    updated_at: datetime


# Payments


class PaymentCreate(BaseModel):
    """Request body for POST /v1/payments"""

    bank_id: int
    loan_transaction_id: int
    payment_date: datetime
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)


class PaymentUpdate(_PatchRequest):
    """Request body for PATCH /v1/payments/{payment_id}"""

    bank_id: Optional[int] = None
    loan_transaction_id: Optional[int] = None
    payment_date: Optional[datetime] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=2)

    def to_patch(self) -> PaymentPatch:
        return PaymentPatch(**self.supplied())


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bank_id: int
    loan_transaction_id: int
    payment_date: datetime
    amount: Decimal
    created_at: datetime
    updated_at: datetime


class DeleteResponse(BaseModel):
    success: bool


# Reports


class MonthlyReportResponse(BaseModel):
    """Response for GET /v1/reports/monthly"""

    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    total_loans: Decimal
    total_payments: Decimal
    net_debt: Decimal
    transaction_count: int
    payment_count: int


class CategoryReportResponse(BaseModel):
    """Single loan-category summary"""

    model_config = ConfigDict(from_attributes=True)

    category: LoanCategory
    total_loans: Decimal
    total_payments: Decimal
    outstanding_amount: Decimal
    transaction_count: int
    payment_count: int


class DueDateRowResponse(BaseModel):
    """Single bank in a due-date report"""

    model_config = ConfigDict(from_attributes=True)

    bank_id: int
    bank_name: str
    category: LoanCategory
    due_day: int
    days_until_due: int = Field(..., description="Negative if overdue")
    outstanding_amount: Decimal


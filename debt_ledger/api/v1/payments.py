"""/v1/payments - repayments toward loan transactions"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from debt_ledger.api.dependencies import get_ledger_queries, get_request_id
from debt_ledger.api.errors import ledger_write
from debt_ledger.api.v1.schemas import DeleteResponse, PaymentCreate, PaymentResponse, PaymentUpdate
from debt_ledger.domain.exceptions import NotFoundError
from debt_ledger.domain.validation import apply_payment_patch, check_payment_ownership
from debt_ledger.infrastructure.database.repositories import (
    LedgerQueries,
    PaymentRepository,
    payment_to_domain,
)
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.infrastructure.observability.logging import log_mutation

router = APIRouter()


@router.post("/payments", response_model=PaymentResponse, status_code=201)
def create_payment(
    request_body: PaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    """Record a payment; the loan transaction must belong to the same bank"""
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "payment", "create"):
        check_payment_ownership(request_body.bank_id, request_body.loan_transaction_id, store)
        db_payment = PaymentRepository(db).create_payment(
            bank_id=request_body.bank_id,
            loan_transaction_id=request_body.loan_transaction_id,
            payment_date=request_body.payment_date,
            amount=request_body.amount,
        )

    log_mutation(request_id, "payment", "create", db_payment.id, bank_id=request_body.bank_id)
    return db_payment


@router.get("/payments", response_model=List[PaymentResponse])
def list_payments(
    bank_id: Optional[int] = Query(None, description="Only payments to this bank"),
    loan_transaction_id: Optional[int] = Query(None, description="Only payments toward this transaction"),
    db: Session = Depends(get_db),
):
    """Payments, newest payment date first"""
    return PaymentRepository(db).list_payments(bank_id=bank_id, loan_transaction_id=loan_transaction_id)


@router.patch("/payments/{payment_id}", response_model=PaymentResponse)
def update_payment(
    payment_id: int,
    request_body: PaymentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    """
    Partially update a payment.

    The resulting bank and loan transaction pair is checked again: both must
    exist and the transaction must belong to that bank.
    """
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "payment", "update"):
        repo = PaymentRepository(db)
        db_payment = repo.get_payment(payment_id)
        if not db_payment:
            raise NotFoundError("Payment", payment_id)

        payment = apply_payment_patch(payment_to_domain(db_payment), request_body.to_patch(), store)
        db_payment = repo.save_payment(db_payment, payment)

    log_mutation(request_id, "payment", "update", payment_id, bank_id=payment.bank_id)
    return db_payment


@router.delete("/payments/{payment_id}", response_model=DeleteResponse)
def delete_payment(
    payment_id: int,
    request: Request,
    db: Session = Depends(get_db),
):
    """Delete a payment; `success` is false when it did not exist"""
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "payment", "delete"):
        deleted = PaymentRepository(db).delete_payment(payment_id)

    if deleted:
        log_mutation(request_id, "payment", "delete", payment_id)
    return DeleteResponse(success=deleted)

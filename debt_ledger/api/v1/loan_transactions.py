"""/v1/loan-transactions - charges drawn against a bank"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from debt_ledger.api.dependencies import get_ledger_queries, get_request_id
from debt_ledger.api.errors import ledger_write
from debt_ledger.api.v1.schemas import (
    DeleteResponse,
    LoanTransactionCreate,
    LoanTransactionResponse,
    LoanTransactionUpdate,
)
from debt_ledger.domain.exceptions import NotFoundError
from debt_ledger.domain.validation import (
    apply_loan_transaction_patch,
    check_billing_cycle,
    check_loan_limit,
    require_bank,
)
from debt_ledger.infrastructure.database.repositories import (
    LedgerQueries,
    LoanTransactionRepository,
    loan_transaction_to_domain,
)
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.infrastructure.observability.logging import log_mutation

router = APIRouter()


@router.post("/loan-transactions", response_model=LoanTransactionResponse, status_code=201)
def create_loan_transaction(
    request_body: LoanTransactionCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    """
    Record a new loan transaction.

    Flow:
    1. Look up the bank
    2. Installment credit-card charges must fall in the post-billing window
    3. Existing total + amount must stay within the bank's credit limit
    4. Persist
    """
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "loan_transaction", "create"):
        bank = require_bank(request_body.bank_id, store)
        check_billing_cycle(bank, request_body.transaction_date, request_body.is_installment)
        check_loan_limit(bank.id, request_body.amount, store)

        db_transaction = LoanTransactionRepository(db).create_transaction(
            bank_id=bank.id,
            transaction_date=request_body.transaction_date,
            description=request_body.description,
            amount=request_body.amount,
            is_installment=request_body.is_installment,
        )

    log_mutation(request_id, "loan_transaction", "create", db_transaction.id, bank_id=bank.id)
    return db_transaction


@router.get("/loan-transactions", response_model=List[LoanTransactionResponse])
def list_loan_transactions(
    bank_id: Optional[int] = Query(None, description="Only transactions of this bank"),
    db: Session = Depends(get_db),
):
    """Loan transactions, newest transaction date first"""
    return LoanTransactionRepository(db).list_transactions(bank_id=bank_id)


@router.patch("/loan-transactions/{transaction_id}", response_model=LoanTransactionResponse)
def update_loan_transaction(
    transaction_id: int,
    request_body: LoanTransactionUpdate,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    """
    Partially update a loan transaction.

    A new amount or bank re-runs the credit limit check without counting this
    transaction twice. A new date, installment flag or bank re-runs the billing
    cycle check. A transaction that already has payments cannot move to another
    bank.
    """
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "loan_transaction", "update"):
        repo = LoanTransactionRepository(db)
        db_transaction = repo.get_transaction(transaction_id)
        if not db_transaction:
            raise NotFoundError("Loan transaction", transaction_id)

        transaction = apply_loan_transaction_patch(
            loan_transaction_to_domain(db_transaction), request_body.to_patch(), store
        )
        db_transaction = repo.save_transaction(db_transaction, transaction)

    log_mutation(request_id, "loan_transaction", "update", transaction_id, bank_id=transaction.bank_id)
    return db_transaction


@router.delete("/loan-transactions/{transaction_id}", response_model=DeleteResponse)
def delete_loan_transaction(
    transaction_id: int,
    request: Request,
    db: Session = Depends(get_db),
):
    """Delete a loan transaction and every payment made toward it"""
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "loan_transaction", "delete"):
        repo = LoanTransactionRepository(db)
        db_transaction = repo.get_transaction(transaction_id)
        if not db_transaction:
            raise NotFoundError("Loan transaction", transaction_id)
        repo.delete_transaction(db_transaction)

    log_mutation(request_id, "loan_transaction", "delete", transaction_id)
    return DeleteResponse(success=True)

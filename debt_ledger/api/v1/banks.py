"""/v1/banks - lending institutions and their billing schedule"""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from debt_ledger.api.dependencies import get_ledger_queries, get_request_id
from debt_ledger.api.errors import ledger_write
from debt_ledger.api.v1.schemas import BankCreate, BankResponse, BankUpdate, DeleteResponse
from debt_ledger.domain.exceptions import NotFoundError
from debt_ledger.domain.validation import apply_bank_patch, check_bank_deletable, validate_bank_config
from debt_ledger.infrastructure.database.repositories import BankRepository, LedgerQueries, bank_to_domain
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.infrastructure.observability.logging import log_mutation

router = APIRouter()


@router.post("/banks", response_model=BankResponse, status_code=201)
def create_bank(
    request_body: BankCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """Register a bank; credit cards must carry a billing print day, other categories must not"""
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "bank", "create"):
        plan = validate_bank_config(request_body.category, request_body.billing_day)
        db_bank = BankRepository(db).create_bank(
            name=request_body.name,
            credit_limit=request_body.credit_limit,
            plan=plan,
            due_day=request_body.due_day,
        )

    log_mutation(request_id, "bank", "create", db_bank.id)
    return db_bank


@router.get("/banks", response_model=List[BankResponse])
def list_banks(db: Session = Depends(get_db)):
    """All registered banks"""
    return BankRepository(db).list_banks()


@router.patch("/banks/{bank_id}", response_model=BankResponse)
def update_bank(
    bank_id: int,
    request_body: BankUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Partially update a bank.

    Changing the category away from credit card clears the billing day;
    changing it to credit card needs a billing day unless one is already set.
    """
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "bank", "update"):
        repo = BankRepository(db)
        db_bank = repo.get_bank(bank_id)
        if not db_bank:
            raise NotFoundError("Bank", bank_id)

        bank = apply_bank_patch(bank_to_domain(db_bank), request_body.to_patch())
        db_bank = repo.save_bank(db_bank, bank)

    log_mutation(request_id, "bank", "update", bank_id)
    return db_bank


@router.delete("/banks/{bank_id}", response_model=DeleteResponse)
def delete_bank(
    bank_id: int,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerQueries = Depends(get_ledger_queries),
):
    """Delete a bank that no loan transaction or payment references"""
    request_id = get_request_id(request)

    with ledger_write(db, request_id, "bank", "delete"):
        check_bank_deletable(bank_id, store)
        repo = BankRepository(db)
        repo.delete_bank(repo.get_bank(bank_id))

    log_mutation(request_id, "bank", "delete", bank_id)
    return DeleteResponse(success=True)

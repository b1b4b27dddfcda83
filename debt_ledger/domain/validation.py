"""Validation rules for banks, loan transactions and payments"""

import dataclasses
from datetime import datetime
from decimal import Decimal
from typing import Optional

from debt_ledger.domain.exceptions import (
    BeforeBillingDateError,
    HasDependentsError,
    InvalidBillingConfigError,
    LimitExceededError,
    MismatchedOwnerError,
    NotFoundError,
)
from debt_ledger.domain.models import (
    UNSET,
    Bank,
    BankPatch,
    LimitCheck,
    LoanCategory,
    LoanPlan,
    LoanTransaction,
    LoanTransactionPatch,
    Payment,
    PaymentPatch,
)
from debt_ledger.domain.store import LedgerReader


def validate_bank_config(category: LoanCategory, billing_day: Optional[int]) -> LoanPlan:
    """
    Check that the billing print day agrees with the loan category.

    Credit cards need a billing day in [1, 31]; every other category must
    leave it empty.

    Raises:
        InvalidBillingConfigError: On any other combination
    """
    return LoanPlan(category=LoanCategory(category), billing_day=billing_day)


def apply_bank_patch(bank: Bank, patch: BankPatch) -> Bank:
    """
    Merge a partial update onto an existing bank and return the result.

    Billing day rules:
    - Switching to credit card without a billing day keeps the existing one
      only when the bank already was a credit card
    - Switching away from credit card clears the billing day; supplying one
      explicitly is an error
    - Supplying only a billing day validates it against the current category
    """
    billing_day = bank.billing_day
    if patch.category is not UNSET:
        category = LoanCategory(patch.category)
        if category == LoanCategory.KARTU_KREDIT:
            if patch.billing_day is UNSET:
                if not bank.plan.is_credit_card:
                    raise InvalidBillingConfigError(
                        "Billing print day is required when switching to credit card"
                    )
            else:
                billing_day = patch.billing_day
        else:
            if patch.billing_day is not UNSET and patch.billing_day is not None:
                raise InvalidBillingConfigError("Billing print day is only allowed for credit card banks")
            billing_day = None
    else:
        category = bank.category
        if patch.billing_day is not UNSET:
            billing_day = patch.billing_day

    changes = {"plan": validate_bank_config(category, billing_day)}
    for field in ("name", "credit_limit", "due_day"):
        value = getattr(patch, field)
        if value is not UNSET:
            changes[field] = value

    return dataclasses.replace(bank, **changes)


def require_bank(bank_id: int, store: LedgerReader) -> Bank:
    bank = store.get_bank(bank_id)
    if bank is None:
        raise NotFoundError("Bank", bank_id)
    return bank


def require_loan_transaction(transaction_id: int, store: LedgerReader) -> LoanTransaction:
    transaction = store.get_loan_transaction(transaction_id)
    if transaction is None:
        raise NotFoundError("Loan transaction", transaction_id)
    return transaction


def check_loan_limit(
    bank_id: int,
    amount: Decimal,
    store: LedgerReader,
    exclude_transaction_id: Optional[int] = None,
) -> LimitCheck:
    """
    Verify a new charge fits under the bank's credit limit.

    The existing total is whatever is stored now; lowering a limit later does
    not invalidate transactions that were already accepted.

    Args:
        exclude_transaction_id: Leave one stored transaction out of the
            existing total (used when that transaction is being edited)

    Raises:
        NotFoundError: Bank does not exist
        LimitExceededError: Existing total + amount exceeds the limit
    """
    bank = require_bank(bank_id, store)
    current_total = store.transaction_totals(bank_id=bank_id, exclude_id=exclude_transaction_id).amount
    new_total = current_total + Decimal(amount)

    if new_total > bank.credit_limit:
        raise LimitExceededError(current_total, new_total, bank.credit_limit)

    return LimitCheck(current_total=current_total, new_total=new_total, limit=bank.credit_limit)


def check_billing_cycle(bank: Bank, transaction_date: datetime, is_installment: bool) -> None:
    """
    Reject installment credit-card charges that fall before the billing cycle.

    Only the day-of-month is compared. A charge on or before the billing day
    is still accepted when it lands after the due day, since it then belongs
    to the next cycle.

    Raises:
        BeforeBillingDateError
    """
    if not (bank.plan.is_credit_card and is_installment):
        return

    transaction_day = transaction_date.day
    billing_day = bank.billing_day
    if transaction_day > billing_day:
        return
    if transaction_day > bank.due_day:
        return

    raise BeforeBillingDateError(transaction_day, billing_day, bank.due_day)


def check_bank_deletable(bank_id: int, store: LedgerReader) -> None:
    """
    Raises:
        NotFoundError: Bank does not exist
        HasDependentsError: Loan transactions (checked first) or payments still reference the bank
    """
    require_bank(bank_id, store)

    transaction_count = store.transaction_totals(bank_id=bank_id).count
    if transaction_count > 0:
        raise HasDependentsError(bank_id, transaction_count, "loan transactions")

    payment_count = store.payment_totals(bank_id=bank_id).count
    if payment_count > 0:
        raise HasDependentsError(bank_id, payment_count, "payments")


def check_payment_ownership(bank_id: int, loan_transaction_id: int, store: LedgerReader) -> LoanTransaction:
    """
    Ensure a payment's bank and loan transaction exist and belong together.

    Raises:
        NotFoundError: Bank or loan transaction does not exist
        MismatchedOwnerError: Loan transaction is owned by another bank
    """
    require_bank(bank_id, store)
    transaction = require_loan_transaction(loan_transaction_id, store)

    if transaction.bank_id != bank_id:
        raise MismatchedOwnerError(loan_transaction_id, bank_id, transaction.bank_id)

    return transaction


def apply_loan_transaction_patch(
    transaction: LoanTransaction,
    patch: LoanTransactionPatch,
    store: LedgerReader,
) -> LoanTransaction:
    """
    Merge a partial update onto a loan transaction, re-running the creation rules it affects.

    - Moving to another bank requires that bank to exist and the transaction to have no payments
    - A new amount or bank re-checks the credit limit, leaving this transaction out of the existing total
    - A new date, installment flag or bank re-checks the billing cycle

    Raises:
        NotFoundError, MismatchedOwnerError, LimitExceededError, BeforeBillingDateError
    """
    changes = {
        field: getattr(patch, field)
        for field in ("bank_id", "transaction_date", "description", "amount", "is_installment")
        if getattr(patch, field) is not UNSET
    }
    updated = dataclasses.replace(transaction, **changes)

    bank_moved = updated.bank_id != transaction.bank_id
    bank = require_bank(updated.bank_id, store)

    if bank_moved:
        payment_count = store.payment_totals(loan_transaction_id=transaction.id).count
        if payment_count > 0:
            raise MismatchedOwnerError(transaction.id, updated.bank_id, transaction.bank_id)

    if bank_moved or "transaction_date" in changes or "is_installment" in changes:
        check_billing_cycle(bank, updated.transaction_date, updated.is_installment)

    if bank_moved or "amount" in changes:
        check_loan_limit(updated.bank_id, updated.amount, store, exclude_transaction_id=transaction.id)

    return updated


def apply_payment_patch(payment: Payment, patch: PaymentPatch, store: LedgerReader) -> Payment:
    """
    Merge a partial update onto a payment.

    The bank / loan transaction pair is always re-validated using the patched
    value where supplied and the stored value otherwise.

    Raises:
        NotFoundError, MismatchedOwnerError
    """
    changes = {
        field: getattr(patch, field)
        for field in ("bank_id", "loan_transaction_id", "payment_date", "amount")
        if getattr(patch, field) is not UNSET
    }
    updated = dataclasses.replace(payment, **changes)
    check_payment_ownership(updated.bank_id, updated.loan_transaction_id, store)
    return updated

"""Read-side interface the domain layer needs from the ledger store"""

from datetime import datetime
from typing import List, Optional, Protocol

from debt_ledger.domain.models import Bank, LoanCategory, LoanTransaction, Totals


class LedgerReader(Protocol):
    """Lookups and aggregate queries over banks, transactions and payments.

    The totals methods combine their filters with AND; a filter left as None
    is not applied. Date bounds are inclusive and compare against the
    business date (transaction date / payment date).
    """

    def get_bank(self, bank_id: int) -> Optional[Bank]:
        ...

    def list_banks(self) -> List[Bank]:
        ...

    def get_loan_transaction(self, transaction_id: int) -> Optional[LoanTransaction]:
        ...

    def transaction_totals(
        self,
        bank_id: Optional[int] = None,
        category: Optional[LoanCategory] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        exclude_id: Optional[int] = None,
    ) -> Totals:
        ...

    def payment_totals(
        self,
        bank_id: Optional[int] = None,
        category: Optional[LoanCategory] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        loan_transaction_id: Optional[int] = None,
    ) -> Totals:
        ...

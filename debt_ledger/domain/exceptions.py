"""Domain-specific exceptions"""

from decimal import Decimal


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class InvalidBillingConfigError(DomainException):
    """Billing print day does not agree with the loan category"""

    pass


class LimitExceededError(DomainException):
    """New loan transaction would push the bank total over its credit limit"""

    def __init__(self, current_total: Decimal, new_total: Decimal, limit: Decimal):
        self.current_total = current_total
        self.new_total = new_total
        self.limit = limit
        super().__init__(
            f"Transaction would exceed bank limit. Current: {current_total}, "
            f"New total would be: {new_total}, Limit: {limit}"
        )


class BeforeBillingDateError(DomainException):
    """Installment credit-card charge falls before the billing print day"""

    def __init__(self, transaction_day: int, billing_day: int, due_day: int):
        self.transaction_day = transaction_day
        self.billing_day = billing_day
        self.due_day = due_day
        super().__init__(
            f"Installment credit card transaction on day {transaction_day} must be after "
            f"billing day {billing_day} (or after due day {due_day})"
        )


class HasDependentsError(DomainException):
    """Deletion blocked by rows that still reference the entity"""

    def __init__(self, bank_id: int, count: int, kind: str):
        self.bank_id = bank_id
        self.count = count
        self.kind = kind
        super().__init__(
            f"Cannot delete bank with ID {bank_id}. There are {count} related {kind}."
        )


class MismatchedOwnerError(DomainException):
    """Payment, loan transaction and bank do not belong together"""

    def __init__(self, loan_transaction_id: int, bank_id: int, owner_bank_id: int):
        self.loan_transaction_id = loan_transaction_id
        self.bank_id = bank_id
        self.owner_bank_id = owner_bank_id
        super().__init__(
            f"Loan transaction with ID {loan_transaction_id} belongs to bank ID "
            f"{owner_bank_id}, not bank ID {bank_id}"
        )

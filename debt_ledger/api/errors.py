"""Translate domain exceptions into HTTP errors and wrap ledger writes"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException
from sqlalchemy.orm import Session

from debt_ledger.domain.exceptions import (
    BeforeBillingDateError,
    DomainException,
    HasDependentsError,
    InvalidBillingConfigError,
    LimitExceededError,
    MismatchedOwnerError,
    NotFoundError,
)
from debt_ledger.infrastructure.observability.logging import log_rejection
from debt_ledger.infrastructure.observability.metrics import record_mutation, record_rejection

STATUS_BY_ERROR = {
    NotFoundError: 404,
    HasDependentsError: 409,
    MismatchedOwnerError: 409,
    InvalidBillingConfigError: 422,
    LimitExceededError: 422,
    BeforeBillingDateError: 422,
}


def to_http_exception(error: DomainException) -> HTTPException:
    status_code = STATUS_BY_ERROR.get(type(error), 400)
    return HTTPException(
        status_code=status_code,
        detail={"error": type(error).__name__, "message": str(error)},
    )


@contextmanager
def ledger_write(db: Session, request_id: str, entity: str, action: str) -> Iterator[None]:
    """
    Run validation + persistence as one unit: commit on success, roll back on any failure.

    Domain rejections become HTTP errors; anything else propagates after rollback.
    """
    try:
        yield
        db.commit()
    except DomainException as e:
        db.rollback()
        record_rejection(e)
        log_rejection(request_id, entity, action, e)
        raise to_http_exception(e) from e
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error during {entity} {action}: {e}", extra={"request_id": request_id})
        raise

    record_mutation(entity, action)

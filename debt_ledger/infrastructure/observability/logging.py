"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from debt_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_mutation(
    request_id: str,
    entity: str,
    action: str,
    entity_id: Optional[int],
    bank_id: Optional[int] = None,
) -> None:
    """Log a committed create/update/delete"""
    logging.info(
        f"{entity} {action}",
        extra={
            "request_id": request_id,
            "entity": entity,
            "action": action,
            "entity_id": entity_id,
            "bank_id": bank_id,
        },
    )


def log_rejection(request_id: str, entity: str, action: str, error: Exception) -> None:
    """Log a request refused by a validation rule"""
    logging.warning(
        f"{entity} {action} rejected: {error}",
        extra={
            "request_id": request_id,
            "entity": entity,
            "action": action,
            "error_kind": type(error).__name__,
        },
    )

"""Structured JSON logging for ledger operations"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from gold_ledger.config import settings


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


def log_ledger_operation(
    request_id: str,
    customer_id: str,
    debt_id: str,
    operation: str,
    unit: str,
    native_amount: float | None = None,
) -> None:
    """Log a committed ledger operation"""
    logging.info(
        "Ledger operation applied",
        extra={
            "request_id": request_id,
            "customer_id": customer_id,
            "debt_id": debt_id,
            "operation": operation,
            "unit": unit,
            "native_amount": native_amount,
        },
    )


def log_unallocated_payment(request_id: str, debt_id: str, unit: str, unallocated: float) -> None:
    """Payment exceeded the outstanding balance; the excess was dropped"""
    logging.warning(
        "Payment exceeded outstanding balance",
        extra={
            "request_id": request_id,
            "debt_id": debt_id,
            "unit": unit,
            "unallocated": unallocated,
        },
    )

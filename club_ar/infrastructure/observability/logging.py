"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from club_ar.config import settings
from club_ar.domain.models import SettlementResult


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_settlement(
    request_id: str,
    account_id: str,
    result: SettlementResult,
    duration_ms: float,
) -> None:
    """Log structured settlement preview outcome"""
    logging.info(
        "Settlement preview completed",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "step": "settlement_preview",
            "strategy": result.strategy.value,
            "total_funds_cents": result.total_funds_cents,
            "total_allocated_cents": result.total_allocated_cents,
            "credit_to_add_cents": result.credit_to_add_cents,
            "invoices_allocated": len(result.allocations),
            "transition": result.transition.value,
            "duration_ms": duration_ms,
        },
    )


def log_rejection(request_id: str, account_id: str, strategy: str, error_code: str, message: str) -> None:
    """Log an allocation rejected as invalid input"""
    logging.warning(
        f"Settlement rejected: {message}",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "step": "settlement_preview",
            "strategy": strategy,
            "error_code": error_code,
        },
    )

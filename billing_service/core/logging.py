"""Structured logging for the billing service.

Services attach bill context to log calls through ``extra``:

    logger.info("Bill generated", extra={"correlation_id": cid, "bill_id": 7})

Both formatters surface those fields, so one bill can be followed through
generate, pay and cancel by its correlation id.
"""

import enum
import logging
import sys
from decimal import Decimal
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from billing_service.config import settings

# Bill context keys, in the order the text formatter prints them
CONTEXT_FIELDS = (
    "correlation_id",
    "bill_id",
    "appointment_id",
    "patient_id",
    "payment_id",
    "status",
    "refund_policy",
    "refund_amount",
    "total_amount",
)


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value


def bill_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Bill context carried on a record, skipping unset fields"""
    return {
        field: _plain(getattr(record, field))
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service metadata and normalised bill context"""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = settings.APP_NAME
        log_record["environment"] = settings.ENVIRONMENT

        # Calls made outside a request pass correlation_id=None
        for field in CONTEXT_FIELDS:
            log_record.pop(field, None)
        log_record.update(bill_context(record))


class BillTextFormatter(logging.Formatter):
    """Plain text formatter that appends bill context as key=value pairs"""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = bill_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{pairs}]"


def setup_logging() -> None:
    """Configure application logging"""
    handler = logging.StreamHandler(sys.stdout)

    if settings.LOG_FORMAT == "json":
        formatter = CustomJsonFormatter(
            fmt="%(asctime)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    else:
        formatter = BillTextFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

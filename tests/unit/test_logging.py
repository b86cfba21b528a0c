"""Unit tests for log formatting of bill context."""

import json
import logging
from decimal import Decimal

from billing_service.core.logging import BillTextFormatter, CustomJsonFormatter, bill_context
from billing_service.models.enums import BillStatus, RefundPolicy


def _record(**extra) -> logging.LogRecord:
    fields = {"name": "billing_service.test", "levelname": "INFO", "levelno": logging.INFO, "msg": "Bill refund processed"}
    fields.update(extra)
    return logging.makeLogRecord(fields)


def test_bill_context_skips_unset_and_normalises_values():
    record = _record(
        correlation_id=None,
        bill_id=7,
        refund_policy=RefundPolicy.PARTIAL_REFUND,
        refund_amount=Decimal("52.50"),
    )

    assert bill_context(record) == {
        "bill_id": 7,
        "refund_policy": "PARTIAL_REFUND",
        "refund_amount": "52.50",
    }


def test_json_formatter_emits_bill_context():
    formatter = CustomJsonFormatter("%(message)s")
    record = _record(
        correlation_id="c-9",
        bill_id=7,
        appointment_id=1001,
        status=BillStatus.REFUND,
        total_amount=Decimal("105.00"),
    )

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Bill refund processed"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "billing_service.test"
    assert payload["correlation_id"] == "c-9"
    assert payload["bill_id"] == 7
    assert payload["appointment_id"] == 1001
    assert payload["status"] == "REFUND"
    assert payload["total_amount"] == "105.00"


def test_json_formatter_drops_missing_correlation_id():
    formatter = CustomJsonFormatter("%(message)s")
    payload = json.loads(formatter.format(_record(correlation_id=None, bill_id=3)))

    assert "correlation_id" not in payload
    assert payload["bill_id"] == 3


def test_text_formatter_appends_context_in_order():
    formatter = BillTextFormatter("%(levelname)s %(message)s")
    record = _record(bill_id=7, correlation_id="c-9", payment_id=77)

    assert formatter.format(record) == "INFO Bill refund processed [correlation_id=c-9 bill_id=7 payment_id=77]"


def test_text_formatter_without_context_is_plain():
    formatter = BillTextFormatter("%(levelname)s %(message)s")

    assert formatter.format(_record()) == "INFO Bill refund processed"

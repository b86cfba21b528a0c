"""Unit tests for bill request and response schemas."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from billing_service.models.enums import BillType, RefundPolicy
from billing_service.schemas.bill import MAX_BILL_AMOUNT, BillCreate, BillCancel, BillPay
from billing_service.schemas.responses import PaginationMeta, ErrorDetail


def test_bill_create_defaults_to_consultation():
    data = BillCreate(appointment_id=1, patient_id=2, doctor_id=3, amount=Decimal("150.50"))
    assert data.bill_type == BillType.CONSULTATION
    assert data.amount == Decimal("150.50")


def test_bill_create_accepts_every_bill_type():
    for bill_type in BillType:
        data = BillCreate(appointment_id=1, patient_id=2, doctor_id=3, amount=10, bill_type=bill_type)
        assert data.bill_type == bill_type


def test_bill_create_rejects_non_positive_amount():
    with pytest.raises(ValidationError):
        BillCreate(appointment_id=1, patient_id=2, doctor_id=3, amount=0)


def test_bill_create_rejects_sub_cent_amount():
    with pytest.raises(ValidationError):
        BillCreate(appointment_id=1, patient_id=2, doctor_id=3, amount=Decimal("10.001"))


def test_bill_create_amount_cap_leaves_room_for_tax():
    data = BillCreate(appointment_id=1, patient_id=2, doctor_id=3, amount=MAX_BILL_AMOUNT)
    assert data.amount * Decimal("1.99") < Decimal("99999999.99")

    with pytest.raises(ValidationError) as exc_info:
        BillCreate(appointment_id=1, patient_id=2, doctor_id=3, amount=Decimal("99999999.99"))
    assert exc_info.value.errors()[0]["type"] == "less_than_equal"


def test_bill_create_reports_every_invalid_field():
    with pytest.raises(ValidationError) as exc_info:
        BillCreate(appointment_id=0, patient_id=-1, doctor_id=3, amount=10, bill_type="LAB_TEST")
    fields = {err["loc"][0] for err in exc_info.value.errors()}
    assert fields == {"appointment_id", "patient_id", "bill_type"}


def test_bill_cancel_requires_known_policy():
    assert BillCancel(appointment_id=1, refund_policy="NO_REFUND").refund_policy == RefundPolicy.NO_REFUND
    with pytest.raises(ValidationError):
        BillCancel(appointment_id=1, refund_policy="STORE_CREDIT")


def test_bill_pay_requires_positive_payment_id():
    assert BillPay(payment_id=9).payment_id == 9
    with pytest.raises(ValidationError):
        BillPay(payment_id=0)


def test_pagination_meta_serializes_camel_case():
    meta = PaginationMeta(page=2, limit=10, total_count=25, total_pages=3)
    assert meta.model_dump(by_alias=True) == {
        "page": 2,
        "limit": 10,
        "totalCount": 25,
        "totalPages": 3,
    }


def test_error_detail_carries_correlation_id():
    detail = ErrorDetail(code="BILL_NOT_FOUND", message="Bill not found", correlation_id="abc", timestamp="2024-01-01T00:00:00")
    dumped = detail.model_dump(mode="json", by_alias=True)
    assert dumped["correlationId"] == "abc"
    assert dumped["code"] == "BILL_NOT_FOUND"

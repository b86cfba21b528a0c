"""Unit tests for BillRepository against a throwaway SQLite database."""

from decimal import Decimal

import pytest

from billing_service.core.exceptions import DuplicateBillError
from billing_service.models.enums import BillStatus, RefundPolicy
from billing_service.services.bill_repository import BillDraft, BillFilter, BillRepository


def _draft(appointment_id: int, patient_id: int = 501) -> BillDraft:
    return BillDraft(
        appointment_id=appointment_id,
        patient_id=patient_id,
        doctor_id=42,
        amount=Decimal("100.00"),
        tax_amount=Decimal("5.00"),
        total_amount=Decimal("105.00"),
    )


@pytest.mark.asyncio
async def test_create_assigns_id_and_open_status(db_session):
    repo = BillRepository(db_session)
    bill = await repo.create(_draft(1))
    await db_session.commit()

    assert bill.bill_id is not None
    assert bill.status == BillStatus.OPEN
    assert bill.refund_policy is None
    assert bill.total_amount == Decimal("105.00")
    assert bill.created_at is not None


@pytest.mark.asyncio
async def test_create_duplicate_appointment_conflicts(db_session):
    repo = BillRepository(db_session)
    await repo.create(_draft(1))
    await db_session.commit()

    with pytest.raises(DuplicateBillError):
        await repo.create(_draft(1, patient_id=999))
    await db_session.rollback()

    bill = await repo.get_by_appointment(1)
    assert bill.patient_id == 501


@pytest.mark.asyncio
async def test_get_missing_returns_none(db_session):
    repo = BillRepository(db_session)
    assert await repo.get_by_id(12345) is None
    assert await repo.get_by_appointment(12345) is None


@pytest.mark.asyncio
async def test_update_status_sets_policy_and_timestamp(db_session):
    repo = BillRepository(db_session)
    bill = await repo.create(_draft(1))
    await db_session.commit()
    created_updated_at = bill.updated_at

    locked = await repo.get_by_id(bill.bill_id, for_update=True)
    await repo.update_status(locked, BillStatus.VOID, RefundPolicy.NO_REFUND)
    await db_session.commit()

    reloaded = await repo.get_by_id(bill.bill_id)
    assert reloaded.status == BillStatus.VOID
    assert reloaded.refund_policy == RefundPolicy.NO_REFUND
    assert reloaded.updated_at >= created_updated_at
    assert reloaded.total_amount == Decimal("105.00")


@pytest.mark.asyncio
async def test_list_paginates_newest_first(db_session):
    repo = BillRepository(db_session)
    for appointment_id in range(1, 26):
        await repo.create(_draft(appointment_id))
    await db_session.commit()

    items, total = await repo.list(BillFilter(), page=2, limit=10)
    assert total == 25
    assert len(items) == 10
    assert [b.appointment_id for b in items] == list(range(15, 5, -1))

    last_page, _ = await repo.list(BillFilter(), page=3, limit=10)
    assert len(last_page) == 5


@pytest.mark.asyncio
async def test_list_filters_combine_with_and(db_session):
    repo = BillRepository(db_session)
    for appointment_id in range(1, 5):
        await repo.create(_draft(appointment_id, patient_id=7))
    await repo.create(_draft(10, patient_id=8))
    await db_session.commit()

    paid = await repo.get_by_appointment(2, for_update=True)
    await repo.update_status(paid, BillStatus.PAID)
    await db_session.commit()

    items, total = await repo.list(BillFilter(patient_id=7), page=1, limit=10)
    assert total == 4

    items, total = await repo.list(BillFilter(patient_id=7, status=BillStatus.PAID), page=1, limit=10)
    assert total == 1
    assert items[0].appointment_id == 2

    items, total = await repo.list(BillFilter(patient_id=8, status=BillStatus.PAID), page=1, limit=10)
    assert total == 0
    assert items == []

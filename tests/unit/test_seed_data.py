"""Unit tests for the CSV seed loader."""

from decimal import Decimal

import pytest

from billing_service.models.enums import BillStatus
from billing_service.services.bill_repository import BillFilter, BillRepository
from scripts.load_seed_data import load, parse_rows

CSV = """bill_id,appointment_id,patient_id,doctor_id,amount,tax_amount,total_amount,status,created_at
1,101,11,21,100.00,5.00,105.00,PAID,2024-01-05 10:00:00
2,102,12,21,200.00,10.00,210.00,OPEN,2024-01-06 11:30:00
"""


def test_parse_rows(tmp_path):
    path = tmp_path / "bills.csv"
    path.write_text(CSV)
    rows = parse_rows(path)
    assert len(rows) == 2
    assert rows[0]["status"] == BillStatus.PAID
    assert rows[1]["total_amount"] == Decimal("210.00")


@pytest.mark.asyncio
async def test_load_is_idempotent(tmp_path, database):
    path = tmp_path / "bills.csv"
    path.write_text(CSV)

    assert await load(path, database) == 2
    assert await load(path, database) == 2

    async with database.session_factory() as session:
        items, total = await BillRepository(session).list(BillFilter(), page=1, limit=10)
    assert total == 2
    assert items[0].appointment_id == 102


@pytest.mark.asyncio
async def test_load_missing_file_is_skipped(tmp_path, database):
    assert await load(tmp_path / "absent.csv", database) == 0

#!/usr/bin/env python3
"""
Load bills from a CSV seed file.

Usage:
  python scripts/load_seed_data.py [path/to/hms_bills.csv]
  # Uses DATABASE_URL from .env (or export)

CSV columns:
  bill_id,appointment_id,patient_id,doctor_id,amount,tax_amount,total_amount,status,created_at

Rows that clash with an existing bill id or appointment are skipped.
"""
import asyncio
import csv
import os
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List

# Add project root to path
_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_root))

from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite

from billing_service.core.logging import setup_logging, get_logger
from billing_service.database import Database
from billing_service.models.bill import Bill
from billing_service.models.enums import BillStatus

DEFAULT_CSV = _root / "seed-data" / "hms_bills.csv"

logger = get_logger("load_seed_data")


def parse_rows(path: Path) -> List[Dict[str, Any]]:
    rows = []
    with path.open(newline="", encoding="utf-8") as fh:
        for record in csv.DictReader(fh):
            rows.append({
                "bill_id": int(record["bill_id"]),
                "appointment_id": int(record["appointment_id"]),
                "patient_id": int(record["patient_id"]),
                "doctor_id": int(record["doctor_id"]),
                "amount": Decimal(record["amount"]),
                "tax_amount": Decimal(record["tax_amount"]),
                "total_amount": Decimal(record["total_amount"]),
                "status": BillStatus(record["status"].strip().upper()),
                "created_at": datetime.fromisoformat(record["created_at"].strip()),
                "updated_at": datetime.fromisoformat(record["created_at"].strip()),
            })
    return rows


async def load(path: Path, database: Database) -> int:
    """Insert seed rows, ignoring conflicts. Returns the number of rows read."""
    if not path.exists():
        logger.warning("Seed data file not found, skipping", extra={"path": str(path)})
        return 0

    rows = parse_rows(path)
    if not rows:
        return 0

    dialect = database.engine.dialect.name
    insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
    stmt = insert(Bill).values(rows).on_conflict_do_nothing()

    async with database.session_factory() as session:
        try:
            await session.execute(stmt)
            if dialect == "postgresql":
                # Explicit bill_ids leave the serial sequence behind
                await session.execute(text(
                    "SELECT setval(pg_get_serial_sequence('bills', 'bill_id'), "
                    "(SELECT COALESCE(MAX(bill_id), 1) FROM bills))"
                ))
            await session.commit()
        except Exception:
            await session.rollback()
            logger.error("Failed to load seed data", exc_info=True)
            raise

    logger.info(f"Loaded {len(rows)} bills from seed data")
    return len(rows)


async def main(path: Path) -> None:
    database = Database.from_settings()
    try:
        await load(path, database)
    finally:
        await database.dispose()


if __name__ == "__main__":
    setup_logging()
    csv_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(os.getenv("SEED_DATA_PATH", DEFAULT_CSV))
    try:
        asyncio.run(main(csv_path))
    except Exception:
        logger.exception("Seed data load aborted")
        sys.exit(1)
    logger.info("Seed data loaded successfully")

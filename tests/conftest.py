"""Shared pytest fixtures for unit and integration tests."""

import os

# Configure before the application module reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from billing_service.config import settings
from billing_service.database import Database
from billing_service.main import app
from billing_service.services.bill_service import BillService
from billing_service.services.notification_service import NotificationService


@pytest.fixture
async def database(tmp_path):
    """File-backed SQLite database, fresh per test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'bills.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database: Database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> AsyncMock:
    """Notification client double; assert on `publish` calls."""
    return AsyncMock(spec=NotificationService)


@pytest.fixture
def bill_service(db_session, notifier) -> BillService:
    return BillService(
        db_session,
        notifier,
        tax_rate=Decimal("0.05"),
        partial_refund_ratio=Decimal("0.5"),
    )


@pytest.fixture
def api_base() -> str:
    """Base URL for bill endpoints."""
    return f"http://test{settings.API_V1_PREFIX}/bills"


@pytest.fixture
async def async_client(database: Database, notifier: AsyncMock):
    """Async HTTP client against the app, wired to the test database and notifier."""
    app.state.database = database
    app.state.notifier = notifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", timeout=30.0) as client:
        yield client


@pytest.fixture
def bill_payload():
    """Factory for generate-bill request bodies."""
    def _payload(appointment_id: int = 1001, **overrides):
        body = {
            "appointment_id": appointment_id,
            "patient_id": 501,
            "doctor_id": 42,
            "amount": 100,
        }
        body.update(overrides)
        return body
    return _payload

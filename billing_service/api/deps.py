"""API Dependencies"""

from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from billing_service.database import get_db
from billing_service.core.middleware import get_correlation_id
from billing_service.services.bill_service import BillService
from billing_service.services.notification_service import NotificationService

__all__ = ["get_db", "get_notifier", "get_bill_service", "correlation_id"]


def get_notifier(request: Request) -> NotificationService:
    """Process-wide notification client created in the application lifespan."""
    return request.app.state.notifier


async def get_bill_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> BillService:
    return BillService(db, notifier)


def correlation_id(request: Request) -> Optional[str]:
    return get_correlation_id(request)

"""Bill Service - transactional orchestration of bill lifecycle events"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from billing_service.config import settings
from billing_service.core.exceptions import BillingError, BillNotFoundError, InternalError
from billing_service.core.logging import get_logger
from billing_service.models.bill import Bill
from billing_service.models.enums import BillStatus, NotificationType, RefundPolicy
from billing_service.schemas.bill import BillCreate
from billing_service.services import lifecycle
from billing_service.services.bill_repository import BillDraft, BillRepository
from billing_service.services.notification_service import NotificationService

logger = get_logger(__name__)


@dataclass
class CancellationResult:
    bill: Optional[Bill]
    refund_policy: RefundPolicy
    refund_amount: Optional[Decimal] = None
    changed: bool = False

    @property
    def message(self) -> str:
        if self.bill is None:
            return "Cancellation recorded, no bill to process"
        if not self.changed:
            return "Bill already closed, nothing to cancel"
        if self.bill.status == BillStatus.REFUND:
            return "Bill refund processed"
        return "Bill voided"


class BillService:
    """
    Each mutating operation runs in one transaction:
    read (row locked) -> decide -> write -> commit, then notify.

    Any error before commit rolls everything back and nothing is published.
    """

    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationService,
        tax_rate: Optional[Decimal] = None,
        partial_refund_ratio: Optional[Decimal] = None,
    ):
        self.db = db
        self.repo = BillRepository(db)
        self.notifier = notifier
        self.tax_rate = settings.TAX_RATE if tax_rate is None else tax_rate
        self.partial_refund_ratio = (
            settings.PARTIAL_REFUND_RATIO if partial_refund_ratio is None else partial_refund_ratio
        )

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except BillingError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Bill transaction failed, rolled back", exc_info=True)
            raise InternalError(cause=exc) from exc

    async def generate_bill(self, data: BillCreate, correlation_id: Optional[str] = None) -> Bill:
        """
        Create the OPEN bill for an appointment.

        The pre-read rejects the common duplicate early; concurrent
        duplicates are caught by the unique constraint on insert.

        Raises:
            DuplicateBillError: the appointment already has a bill
        """
        async with self._transaction():
            existing = await self.repo.get_by_appointment(data.appointment_id)
            charges = lifecycle.decide_generation(existing, data.amount, self.tax_rate)
            bill = await self.repo.create(BillDraft(
                appointment_id=data.appointment_id,
                patient_id=data.patient_id,
                doctor_id=data.doctor_id,
                amount=charges.amount,
                tax_amount=charges.tax_amount,
                total_amount=charges.total_amount,
                bill_type=data.bill_type,
            ))

        logger.info(
            "Bill generated",
            extra={
                "correlation_id": correlation_id,
                "bill_id": bill.bill_id,
                "appointment_id": bill.appointment_id,
                "patient_id": bill.patient_id,
                "total_amount": bill.total_amount,
            },
        )
        await self.notifier.publish(
            NotificationType.BILL_GENERATED,
            bill.patient_id,
            f"Bill generated for appointment {bill.appointment_id}. "
            f"Total amount: ${bill.total_amount:.2f}",
            {
                "billId": bill.bill_id,
                "appointmentId": bill.appointment_id,
                "amount": bill.total_amount,
            },
            correlation_id=correlation_id,
        )
        return bill

    async def cancel_appointment_bill(
        self,
        appointment_id: int,
        refund_policy: RefundPolicy,
        correlation_id: Optional[str] = None,
    ) -> CancellationResult:
        """
        Apply an appointment cancellation.

        No bill: acknowledged, nothing stored. OPEN: voided. PAID: refunded
        or voided by policy. VOID/REFUND: left as is.
        """
        async with self._transaction():
            bill = await self.repo.get_by_appointment(appointment_id, for_update=True)
            outcome = lifecycle.decide_cancellation(bill, refund_policy, self.partial_refund_ratio)
            was_paid = bill is not None and bill.status == BillStatus.PAID
            if outcome.changed:
                bill = await self.repo.update_status(bill, outcome.next_status, outcome.refund_policy)

        if bill is None:
            logger.info(
                "No bill found for cancelled appointment",
                extra={
                    "correlation_id": correlation_id,
                    "appointment_id": appointment_id,
                    "refund_policy": refund_policy,
                },
            )
            return CancellationResult(bill=None, refund_policy=refund_policy)

        if not outcome.changed:
            logger.info(
                "Cancellation ignored, bill already closed",
                extra={"correlation_id": correlation_id, "bill_id": bill.bill_id, "status": bill.status},
            )
            return CancellationResult(bill=bill, refund_policy=refund_policy)

        if was_paid:
            logger.info(
                "Bill refund processed",
                extra={
                    "correlation_id": correlation_id,
                    "bill_id": bill.bill_id,
                    "refund_amount": outcome.refund_amount,
                    "refund_policy": refund_policy,
                },
            )
        else:
            logger.info(
                "Unpaid bill voided",
                extra={"correlation_id": correlation_id, "bill_id": bill.bill_id},
            )

        if bill.status == BillStatus.REFUND:
            event_type = NotificationType.BILL_REFUNDED
            message = (
                f"Refund of ${outcome.refund_amount:.2f} processed for appointment {bill.appointment_id}"
            )
        else:
            event_type = NotificationType.BILL_VOIDED
            message = f"Bill {bill.bill_id} for appointment {bill.appointment_id} has been voided"
        await self.notifier.publish(
            event_type,
            bill.patient_id,
            message,
            {
                "billId": bill.bill_id,
                "appointmentId": bill.appointment_id,
                "refundPolicy": refund_policy.value,
                "amount": outcome.refund_amount,
            },
            correlation_id=correlation_id,
        )
        return CancellationResult(
            bill=bill,
            refund_policy=refund_policy,
            refund_amount=outcome.refund_amount if was_paid else None,
            changed=True,
        )

    async def mark_bill_paid(
        self,
        bill_id: int,
        payment_id: int,
        correlation_id: Optional[str] = None,
    ) -> Bill:
        """
        Settle an OPEN bill.

        Raises:
            BillNotFoundError: no bill with this id
            AlreadyPaidError: bill is already PAID
            BillVoidedError: bill is VOID or REFUND
        """
        async with self._transaction():
            bill = await self.repo.get_by_id(bill_id, for_update=True)
            if bill is None:
                raise BillNotFoundError()
            outcome = lifecycle.decide_payment(bill.status)
            bill = await self.repo.update_status(bill, outcome.next_status)

        logger.info(
            "Bill marked as paid",
            extra={"correlation_id": correlation_id, "bill_id": bill_id, "payment_id": payment_id},
        )
        await self.notifier.publish(
            NotificationType.BILL_PAID,
            bill.patient_id,
            f"Payment received for bill {bill.bill_id}. Amount paid: ${bill.total_amount:.2f}",
            {
                "billId": bill.bill_id,
                "appointmentId": bill.appointment_id,
                "paymentId": payment_id,
                "amount": bill.total_amount,
            },
            correlation_id=correlation_id,
        )
        return bill

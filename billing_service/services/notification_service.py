"""Notification client for bill lifecycle events.

Best effort: delivery happens after the bill transaction has committed and
a failure here is logged and dropped, never raised to the caller.
"""

from typing import Any, Dict, Optional

import httpx
from fastapi.encoders import jsonable_encoder

from billing_service.config import settings
from billing_service.core.logging import get_logger
from billing_service.models.enums import NotificationType

logger = get_logger(__name__)

NOTIFICATIONS_PATH = "/v1/notifications"


class NotificationService:
    """Async HTTP client for the notification service."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        enabled: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self.enabled = enabled
        self._client = client

    @classmethod
    def from_settings(cls) -> "NotificationService":
        return cls(
            settings.NOTIFICATION_SERVICE_URL,
            timeout=settings.NOTIFICATION_TIMEOUT,
            enabled=settings.NOTIFICATIONS_ENABLED,
        )

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def publish(
        self,
        event_type: NotificationType,
        patient_id: int,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ) -> bool:
        """
        Send one lifecycle event.

        Returns:
            True if the notification service accepted it, False if it was
            skipped or failed
        """
        if not self.enabled:
            logger.info(
                "Notification skipped (disabled)",
                extra={"type": event_type.value, "correlation_id": correlation_id},
            )
            return False

        payload = jsonable_encoder({
            "type": event_type.value,
            "patient_id": patient_id,
            "message": message,
            "metadata": {"message": message, **(metadata or {})},
        })
        headers = {"X-Correlation-ID": correlation_id} if correlation_id else None

        try:
            response = await self._ensure_client().post(NOTIFICATIONS_PATH, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Failed to send notification",
                extra={"type": event_type.value, "error": str(exc), "correlation_id": correlation_id},
            )
            return False
        except Exception:
            logger.exception(
                "Unexpected error sending notification",
                extra={"type": event_type.value, "correlation_id": correlation_id},
            )
            return False
        return True

"""Notification Service Implementations

Provides concrete implementations for telling invoice creators about
status changes.
"""

import logging
from datetime import datetime
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.domain.invoice import Invoice, InvoiceStatus

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs status changes

    Useful for development and testing, or as a fallback.
    """

    async def send_status_change(
        self,
        invoice: Invoice,
        old_status: InvoiceStatus,
        new_status: InvoiceStatus,
        actor_id: str,
    ) -> bool:
        """
        Log status change

        Returns:
            Always True (logging never fails)
        """
        logger.info(
            f"[INVOICE STATUS] Tenant: {invoice.tenant_id}, "
            f"Invoice: {invoice.invoice_number}, "
            f"Status: {old_status.value} -> {new_status.value}, "
            f"Creator: {invoice.created_by}, "
            f"Changed by: {actor_id}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that posts status changes to an HTTP webhook

    Sends JSON payload to configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST notifications to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_status_change(
        self,
        invoice: Invoice,
        old_status: InvoiceStatus,
        new_status: InvoiceStatus,
        actor_id: str,
    ) -> bool:
        """
        Send status change via webhook

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "type": "invoice_status_changed",
            "invoice_id": invoice.id,
            "tenant_id": invoice.tenant_id,
            "invoice_number": invoice.invoice_number,
            "recipient_id": invoice.created_by,
            "old_status": old_status.value,
            "new_status": new_status.value,
            "changed_by": actor_id,
            "total": str(invoice.total),
            "currency_code": invoice.currency_code,
            "changed_at": datetime.utcnow().isoformat(),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Webhook notification sent for invoice {invoice.id} to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to send webhook notification for invoice {invoice.id}: {e}"
            )
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_status_change(
        self,
        invoice: Invoice,
        old_status: InvoiceStatus,
        new_status: InvoiceStatus,
        actor_id: str,
    ) -> bool:
        """
        Send status change to all configured services

        Returns:
            True if at least one service succeeded, False otherwise
        """
        success = False
        for service in self.services:
            try:
                if await service.send_status_change(invoice, old_status, new_status, actor_id):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)

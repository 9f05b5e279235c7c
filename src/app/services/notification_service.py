"""Notification Service Interface

Defines the contract for telling an invoice's creator about status changes.
"""

from abc import ABC, abstractmethod
from src.domain.invoice import Invoice, InvoiceStatus


class NotificationService(ABC):
    """
    Abstract notification service for invoice lifecycle events

    Implementations can deliver via:
    - Application log
    - Webhook (HTTP POST) to the notification service
    """

    @abstractmethod
    async def send_status_change(
        self,
        invoice: Invoice,
        old_status: InvoiceStatus,
        new_status: InvoiceStatus,
        actor_id: str,
    ) -> bool:
        """
        Notify the invoice creator that the status changed

        Args:
            invoice: Invoice after the change
            old_status: Status before the change
            new_status: Status after the change
            actor_id: User (or "payment-webhook") that triggered the change

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass

"""UpdateInvoiceStatus Use Case

Moves an invoice through its lifecycle and tells the creator about it.
"""

import logging
from datetime import datetime
from typing import Optional

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.domain.invoice import Invoice, InvoiceStatus, TERMINAL_STATUSES, can_transition
from . import errors
from .dtos import UpdateInvoiceStatusCommandDTO, InvoiceResponseDTO
from .mappers import to_invoice_response

logger = logging.getLogger(__name__)


class UpdateInvoiceStatus:
    """
    Use Case: Change invoice status

    Business Rules:
    1. Transitions follow ALLOWED_TRANSITIONS
       (DRAFT->SENT|CANCELLED, SENT->PAID|OVERDUE|CANCELLED, OVERDUE->PAID|CANCELLED)
    2. PAID and CANCELLED are terminal
    3. Setting the current status again is a no-op (no timestamps, no notification)
    4. sent_at / paid_at / cancelled_at are stamped on first entry only
    5. The creator is notified after commit; a failed notification never
       fails the transition
    6. The write only succeeds if the stored status is still the one read;
       otherwise a concurrent change won and nothing is applied

    Flow:
    1. Load invoice
    2. Validate transition
    3. Apply status and persist
    4. Commit transaction
    5. Notify creator
    6. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        notification_service: Optional[NotificationService] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.notification_service = notification_service

    async def execute(self, command: UpdateInvoiceStatusCommandDTO) -> Result[InvoiceResponseDTO]:
        """
        Execute status change

        Args:
            command: UpdateInvoiceStatusCommandDTO with invoice, target status and actor

        Returns:
            Result[InvoiceResponseDTO]: Updated invoice or error
        """
        try:
            # Step 1: Load invoice
            invoice = await self.invoice_repo.get_by_id(command.tenant_id, command.invoice_id)
            if not invoice:
                return Return.err(errors.invoice_not_found(command.invoice_id))

            old_status = InvoiceStatus(invoice.status)
            new_status = command.status

            # Step 2: Validate transition
            if old_status == new_status:
                items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)
                return Return.ok(to_invoice_response(invoice, items))

            if not can_transition(old_status, new_status):
                return Return.err(invalid_transition(old_status, new_status))

            # Step 3: Apply status, guarded by the status that was read
            invoice.apply_status(new_status, datetime.utcnow())
            if not await self.invoice_repo.update_status(invoice, old_status):
                await self.uow.rollback()
                logger.warning(
                    "Status of invoice %s changed concurrently; %s -> %s not applied",
                    command.invoice_id, old_status.value, new_status.value,
                )
                return Return.err(errors.status_conflict(command.invoice_id, old_status))

            items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)

            # Step 4: Commit transaction
            await self.uow.commit()

            logger.info(
                "Invoice %s status changed from %s to %s by %s",
                invoice.invoice_number, old_status.value, new_status.value, command.actor_id,
            )

            # Step 5: Notify creator
            await self._notify(invoice, old_status, new_status, command.actor_id)

            # Step 6: Build response
            return Return.ok(to_invoice_response(invoice, items))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_INVOICE_STATUS_FAILED",
                    message="Failed to update invoice status",
                    reason=str(e),
                )
            )

    async def _notify(
        self,
        invoice: Invoice,
        old_status: InvoiceStatus,
        new_status: InvoiceStatus,
        actor_id: str,
    ) -> None:
        if not self.notification_service:
            return
        try:
            sent = await self.notification_service.send_status_change(
                invoice, old_status, new_status, actor_id
            )
            if not sent:
                logger.warning("Status change notification not delivered for invoice %s", invoice.id)
        except Exception as e:
            logger.error(f"Failed to notify creator of invoice {invoice.id}: {e}")


def invalid_transition(current: InvoiceStatus, target: InvoiceStatus) -> Error:
    if current in TERMINAL_STATUSES:
        message = f"Cannot change status of {current.value} invoices"
    else:
        message = f"Cannot change invoice status from {current.value} to {target.value}"
    return Error(
        code=errors.INVALID_STATUS_TRANSITION,
        message=message,
        reason=f"{current.value} -> {target.value} is not an allowed transition",
    )

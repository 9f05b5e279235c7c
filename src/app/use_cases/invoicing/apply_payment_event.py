"""ApplyPaymentEvent Use Case

Translates payment-provider webhook events into invoice status changes.
"""

import logging

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import InvoiceStatus
from . import errors
from .dtos import PaymentEventCommandDTO, PaymentEventResponseDTO, UpdateInvoiceStatusCommandDTO
from .update_invoice_status import UpdateInvoiceStatus

logger = logging.getLogger(__name__)

PAYMENT_WEBHOOK_ACTOR = "payment-webhook"

PAYMENT_EVENT_STATUSES: dict[str, InvoiceStatus] = {
    "payment.captured": InvoiceStatus.PAID,
    "invoice.paid": InvoiceStatus.PAID,
    "invoice.expired": InvoiceStatus.OVERDUE,
    "invoice.cancelled": InvoiceStatus.CANCELLED,
}


class ApplyPaymentEvent:
    """
    Use Case: Apply a payment-provider event to an invoice

    Business Rules:
    1. Unknown events are acknowledged and ignored
    2. Known events go through the same state machine as manual updates
    3. Redelivery of an already applied event is a no-op

    Flow:
    1. Map event to target status
    2. Load invoice (for redelivery detection)
    3. Delegate to UpdateInvoiceStatus
    4. Return outcome
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        update_invoice_status: UpdateInvoiceStatus,
    ):
        self.invoice_repo = invoice_repo
        self.update_invoice_status = update_invoice_status

    async def execute(self, command: PaymentEventCommandDTO) -> Result[PaymentEventResponseDTO]:
        """
        Execute payment event handling

        Args:
            command: PaymentEventCommandDTO with event name, tenant and invoice

        Returns:
            Result[PaymentEventResponseDTO]: Whether a status change was applied, or error
        """
        # Step 1: Map event
        target = PAYMENT_EVENT_STATUSES.get(command.event)
        if target is None:
            logger.info("Ignoring payment event %s for invoice %s", command.event, command.invoice_id)
            return Return.ok(
                PaymentEventResponseDTO(
                    invoice_id=command.invoice_id,
                    event=command.event,
                    applied=False,
                )
            )

        try:
            # Step 2: Load invoice
            invoice = await self.invoice_repo.get_by_id(command.tenant_id, command.invoice_id)
            if not invoice:
                return Return.err(errors.invoice_not_found(command.invoice_id))

            if InvoiceStatus(invoice.status) == target:
                return Return.ok(
                    PaymentEventResponseDTO(
                        invoice_id=invoice.id,
                        event=command.event,
                        applied=False,
                        status=target,
                    )
                )

        except Exception as e:
            return Return.err(
                Error(
                    code="APPLY_PAYMENT_EVENT_FAILED",
                    message="Failed to apply payment event",
                    reason=str(e),
                )
            )

        # Step 3: Same state machine as manual updates
        result = await self.update_invoice_status.execute(
            UpdateInvoiceStatusCommandDTO(
                tenant_id=command.tenant_id,
                invoice_id=command.invoice_id,
                status=target,
                actor_id=PAYMENT_WEBHOOK_ACTOR,
            )
        )
        if result.is_err():
            return Return.err(result.error)

        # Step 4: Build response
        return Return.ok(
            PaymentEventResponseDTO(
                invoice_id=command.invoice_id,
                event=command.event,
                applied=True,
                status=result.value.status,
            )
        )

"""UpdateInvoice Use Case

Edits header fields of an invoice and optionally replaces all its items.
"""

import logging
from datetime import datetime
from decimal import Decimal

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.domain.invoice import InvoiceStatus, LOCKED_STATUSES
from src.domain.invoice_item import InvoiceItem
from . import errors
from .dtos import UpdateInvoiceCommandDTO, InvoiceResponseDTO
from .mappers import to_invoice_response
from .totals import calculate_totals, line_amount, validate_tax_rate

logger = logging.getLogger(__name__)


class UpdateInvoice:
    """
    Use Case: Edit an invoice

    Business Rules:
    1. PAID and CANCELLED invoices cannot be edited
    2. Omitted fields stay unchanged
    3. Supplied items replace all current items (old ones are soft-deleted)
    4. Totals are recomputed when items or the tax rate change
    5. due_date must not be before issue_date after the edit

    Flow:
    1. Validate tax rate
    2. Load invoice and check lock
    3. Apply header changes
    4. Replace items and recompute totals
    5. Commit transaction
    6. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo

    async def execute(self, command: UpdateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice edit

        Args:
            command: UpdateInvoiceCommandDTO with the fields to change

        Returns:
            Result[InvoiceResponseDTO]: Updated invoice or error
        """
        # Step 1: Validate tax rate
        if command.tax_rate is not None:
            reason = validate_tax_rate(command.tax_rate)
            if reason:
                return Return.err(errors.invalid_tax_rate(command.tax_rate, reason))

        try:
            # Step 2: Load invoice and check lock
            invoice = await self.invoice_repo.get_by_id(command.tenant_id, command.invoice_id)
            if not invoice:
                return Return.err(errors.invoice_not_found(command.invoice_id))

            status = InvoiceStatus(invoice.status)
            if status in LOCKED_STATUSES:
                return Return.err(
                    Error(
                        code=errors.INVOICE_LOCKED,
                        message=f"Cannot update invoice with status {status.value}",
                        reason="Paid and cancelled invoices are read-only",
                    )
                )

            # Step 3: Header changes
            issue_date = command.issue_date or invoice.issue_date
            due_date = command.due_date or invoice.due_date
            if due_date < issue_date:
                return Return.err(
                    Error(
                        code=errors.INVALID_DATE_RANGE,
                        message="Due date must be on or after issue date",
                        reason=f"issue_date={issue_date}, due_date={due_date}",
                    )
                )
            invoice.issue_date = issue_date
            invoice.due_date = due_date
            if command.notes is not None:
                invoice.notes = command.notes

            # Step 4: Items and totals
            if command.items is not None:
                await self.invoice_item_repo.soft_delete_by_invoice_id(invoice.id, datetime.utcnow())
                for item in command.items:
                    await self.invoice_item_repo.create(
                        InvoiceItem(
                            tenant_id=invoice.tenant_id,
                            invoice_id=invoice.id,
                            description=item.description,
                            quantity=item.quantity,
                            unit_price=item.unit_price,
                            amount=line_amount(item.quantity, item.unit_price),
                        )
                    )

            if command.items is not None or command.tax_rate is not None:
                items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)
                tax_rate = invoice.tax_rate if command.tax_rate is None else command.tax_rate
                totals = calculate_totals((item.amount for item in items), Decimal(tax_rate))
                invoice.subtotal = totals.subtotal
                invoice.tax_rate = totals.tax_rate
                invoice.tax_amount = totals.tax_amount
                invoice.total = totals.total

            invoice = await self.invoice_repo.update(invoice)
            items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)

            # Step 5: Commit transaction
            await self.uow.commit()

            logger.info("Updated invoice %s", invoice.invoice_number)

            # Step 6: Build response
            return Return.ok(to_invoice_response(invoice, items))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_INVOICE_FAILED",
                    message="Failed to update invoice",
                    reason=str(e),
                )
            )

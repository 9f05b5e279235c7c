"""DeleteInvoice Use Case

Soft-deletes an invoice and hands its time entries back to the unbilled pool.
"""

import logging
from datetime import datetime

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.time_entry_repository import TimeEntryRepository
from src.domain.invoice import InvoiceStatus
from . import errors
from .dtos import DeleteInvoiceResponseDTO

logger = logging.getLogger(__name__)


class DeleteInvoice:
    """
    Use Case: Delete an invoice

    Business Rules:
    1. PAID invoices cannot be deleted
    2. Deletion is soft (deleted_at) for the invoice and its items
    3. Entries claimed by the invoice become unbilled again
    4. All of the above happen in one transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        time_entry_repo: TimeEntryRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.time_entry_repo = time_entry_repo

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[DeleteInvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)
            if not invoice:
                return Return.err(errors.invoice_not_found(invoice_id))

            if InvoiceStatus(invoice.status) == InvoiceStatus.PAID:
                return Return.err(
                    Error(
                        code=errors.CANNOT_DELETE_PAID_INVOICE,
                        message="Cannot delete paid invoices",
                        reason=f"invoice_number={invoice.invoice_number}",
                    )
                )

            now = datetime.utcnow()
            await self.invoice_item_repo.soft_delete_by_invoice_id(invoice.id, now)
            released = await self.time_entry_repo.release_entries(tenant_id, invoice.id)

            invoice.deleted_at = now
            await self.invoice_repo.update(invoice)

            await self.uow.commit()

            logger.info(
                "Deleted invoice %s and released %d time entries",
                invoice.invoice_number, released,
            )

            return Return.ok(
                DeleteInvoiceResponseDTO(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    released_entries_count=released,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_INVOICE_FAILED",
                    message="Failed to delete invoice",
                    reason=str(e),
                )
            )

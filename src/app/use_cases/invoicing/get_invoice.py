"""GetInvoice Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from . import errors
from .dtos import InvoiceResponseDTO
from .mappers import to_invoice_response


class GetInvoice:
    """
    Use Case: Fetch one invoice with its items

    Deleted invoices and items are invisible.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
    ):
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)
            if not invoice:
                return Return.err(errors.invoice_not_found(invoice_id))

            items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)
            return Return.ok(to_invoice_response(invoice, items))

        except Exception as e:
            return Return.err(
                Error(
                    code="GET_INVOICE_FAILED",
                    message="Failed to get invoice",
                    reason=str(e),
                )
            )

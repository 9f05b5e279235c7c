"""ListInvoices Use Case"""

from datetime import date
from typing import List

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import ListInvoicesQueryDTO, InvoiceResponseDTO
from .mappers import to_invoice_response


class ListInvoices:
    """
    Use Case: List invoices of a tenant

    Business Rules:
    1. Filters: client, project, status, issue-date range
    2. overdue_only keeps SENT invoices past their due date
    3. Newest issue date first
    4. Items are not included in list results
    """

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, query: ListInvoicesQueryDTO) -> Result[List[InvoiceResponseDTO]]:
        try:
            invoices = await self.invoice_repo.list_by_tenant(
                tenant_id=query.tenant_id,
                client_id=query.client_id,
                project_id=query.project_id,
                status=query.status,
                issued_from=query.issued_from,
                issued_to=query.issued_to,
            )

            today = date.today()
            if query.overdue_only:
                invoices = [invoice for invoice in invoices if invoice.is_overdue(today)]

            return Return.ok([to_invoice_response(invoice, [], today) for invoice in invoices])

        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_INVOICES_FAILED",
                    message="Failed to list invoices",
                    reason=str(e),
                )
            )

"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import date
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceNumberTakenError(Exception):
    """Raised by create when the tenant already holds the invoice number"""

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice number {invoice_number} is already taken")


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    All lookups are tenant-scoped and ignore soft-deleted invoices.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice

        Raises:
            InvoiceNumberTakenError: another invoice of the tenant got the number first
        """
        pass

    @abstractmethod
    async def get_by_id(self, tenant_id: str, invoice_id: str) -> Optional[Invoice]:
        """
        Retrieve a non-deleted invoice by ID

        Args:
            tenant_id: Tenant identifier
            invoice_id: Invoice ID

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_tenant(
        self,
        tenant_id: str,
        client_id: Optional[str] = None,
        project_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
        issued_from: Optional[date] = None,
        issued_to: Optional[date] = None,
    ) -> List[Invoice]:
        """
        Retrieve non-deleted invoices for a tenant, newest issue date first

        Args:
            tenant_id: Tenant identifier
            client_id: Optional client filter
            project_id: Optional project filter
            status: Optional status filter
            issued_from: Optional inclusive lower bound on issue date
            issued_to: Optional inclusive upper bound on issue date

        Returns:
            List of invoices
        """
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        pass

    @abstractmethod
    async def update_status(self, invoice: Invoice, expected_status: InvoiceStatus) -> bool:
        """
        Persist a status change only if the stored status is still expected_status

        Writes status and the lifecycle timestamps in one conditional UPDATE,
        so two requests racing from the same status cannot both succeed.

        Args:
            invoice: Invoice carrying the new status and timestamps
            expected_status: Status the caller read before validating the transition

        Returns:
            True if the row was updated, False if its status had already changed
        """
        pass

    @abstractmethod
    async def exists_by_invoice_number(self, tenant_id: str, invoice_number: str) -> bool:
        """
        Check whether an invoice number is already taken within a tenant

        Soft-deleted invoices still hold their number.

        Args:
            tenant_id: Tenant identifier
            invoice_number: Candidate invoice number

        Returns:
            True if taken, False otherwise
        """
        pass

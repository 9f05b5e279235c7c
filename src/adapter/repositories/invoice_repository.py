"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from datetime import date, datetime
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository, InvoiceNumberTakenError
from src.domain.invoice import Invoice, InvoiceStatus


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations. Soft-deleted invoices are
    filtered out of every read.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice

        Raises:
            InvoiceNumberTakenError: the (tenant_id, invoice_number) constraint was violated
        """
        self.session.add(invoice)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise InvoiceNumberTakenError(invoice.invoice_number) from e
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, tenant_id: str, invoice_id: str) -> Optional[Invoice]:
        """
        Retrieve a non-deleted invoice by ID

        Args:
            tenant_id: Tenant identifier
            invoice_id: Invoice ID

        Returns:
            Invoice if found, None otherwise
        """
        statement = (
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.deleted_at.is_(None))
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

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
        Retrieve non-deleted invoices for a tenant

        Args:
            tenant_id: Tenant identifier
            client_id: Optional filter by client
            project_id: Optional filter by project
            status: Optional filter by status
            issued_from: Optional inclusive lower bound on issue date
            issued_to: Optional inclusive upper bound on issue date

        Returns:
            List of invoices, newest issue date first
        """
        statement = (
            select(Invoice)
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.deleted_at.is_(None))
        )

        if client_id:
            statement = statement.where(Invoice.client_id == client_id)
        if project_id:
            statement = statement.where(Invoice.project_id == project_id)
        if status:
            statement = statement.where(Invoice.status == status)
        if issued_from:
            statement = statement.where(Invoice.issue_date >= issued_from)
        if issued_to:
            statement = statement.where(Invoice.issue_date <= issued_to)

        statement = statement.order_by(Invoice.issue_date.desc(), Invoice.created_at.desc())

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def update_status(self, invoice: Invoice, expected_status: InvoiceStatus) -> bool:
        """
        Persist a status change only if the stored status is still expected_status

        Args:
            invoice: Invoice carrying the new status and timestamps
            expected_status: Status read before the transition was validated

        Returns:
            True if the row was updated, False if its status had already changed
        """
        statement = (
            update(Invoice)
            .where(Invoice.id == invoice.id)
            .where(Invoice.tenant_id == invoice.tenant_id)
            .where(Invoice.status == expected_status)
            .where(Invoice.deleted_at.is_(None))
            .values(
                status=invoice.status,
                sent_at=invoice.sent_at,
                paid_at=invoice.paid_at,
                cancelled_at=invoice.cancelled_at,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        if result.rowcount != 1:
            return False

        # Reload so the pending in-memory changes are replaced by the stored row
        await self.session.refresh(invoice)
        return True

    async def exists_by_invoice_number(self, tenant_id: str, invoice_number: str) -> bool:
        """
        Check whether the tenant already uses an invoice number

        Deleted invoices still count: their numbers are never reissued.

        Args:
            tenant_id: Tenant identifier
            invoice_number: Candidate invoice number

        Returns:
            True if the number is taken, False otherwise
        """
        statement = (
            select(func.count())
            .select_from(Invoice)
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.invoice_number == invoice_number)
        )
        result = await self.session.execute(statement)
        count = result.scalar_one()
        return count > 0

"""SQLAlchemy Invoice Item Repository Implementation

Implements invoice item persistence using SQLAlchemy async session.
"""

from datetime import datetime
from typing import List
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.domain.invoice_item import InvoiceItem


class SqlAlchemyInvoiceItemRepository(InvoiceItemRepository):
    """
    SQLAlchemy implementation of InvoiceItemRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceItem]:
        """
        Retrieve the non-deleted line items of an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            List of InvoiceItem in creation order
        """
        statement = (
            select(InvoiceItem)
            .where(InvoiceItem.invoice_id == invoice_id)
            .where(InvoiceItem.deleted_at.is_(None))
            .order_by(InvoiceItem.created_at, InvoiceItem.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def create(self, item: InvoiceItem) -> InvoiceItem:
        """
        Create a new invoice line item

        Args:
            item: InvoiceItem entity to persist

        Returns:
            Created InvoiceItem
        """
        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def soft_delete_by_invoice_id(self, invoice_id: str, deleted_at: datetime) -> int:
        statement = (
            update(InvoiceItem)
            .where(InvoiceItem.invoice_id == invoice_id)
            .where(InvoiceItem.deleted_at.is_(None))
            .values(deleted_at=deleted_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount

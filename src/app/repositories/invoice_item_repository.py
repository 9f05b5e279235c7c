"""Invoice Item Repository Interface

Defines the contract for invoice item persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
from src.domain.invoice_item import InvoiceItem


class InvoiceItemRepository(ABC):
    """
    Repository interface for InvoiceItem persistence
    """

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceItem]:
        """
        Retrieve all non-deleted items for an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            List of InvoiceItem in insertion order
        """
        pass

    @abstractmethod
    async def create(self, item: InvoiceItem) -> InvoiceItem:
        """
        Create a new invoice item

        Args:
            item: InvoiceItem entity to persist

        Returns:
            Created InvoiceItem
        """
        pass

    @abstractmethod
    async def soft_delete_by_invoice_id(self, invoice_id: str, deleted_at: datetime) -> int:
        """
        Mark every non-deleted item of an invoice as deleted

        Args:
            invoice_id: Invoice ID
            deleted_at: Deletion timestamp

        Returns:
            Number of items deleted
        """
        pass

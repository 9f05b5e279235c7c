"""Time Entry Repository Interface

Defines the contract for reading unbilled time and claiming it for an invoice.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Sequence
from src.domain.time_entry import TimeEntry


class TimeEntryRepository(ABC):
    """
    Repository interface for TimeEntry persistence

    The claim is the only write path the billing engine uses, and it is
    conditional: rows that already carry an invoice_id are never touched.
    """

    @abstractmethod
    async def find_unbilled_entries(
        self,
        tenant_id: str,
        project_ids: Sequence[str],
        from_date: date,
        to_date: date,
        billable_only: bool = True,
    ) -> List[TimeEntry]:
        """
        Retrieve unbilled entries for the given projects and inclusive date range

        Args:
            tenant_id: Tenant identifier
            project_ids: Projects in scope
            from_date: First work date (inclusive)
            to_date: Last work date (inclusive)
            billable_only: If True, only entries flagged billable

        Returns:
            Entries ordered by work_date, user_id, id
        """
        pass

    @abstractmethod
    async def claim_entries(
        self,
        tenant_id: str,
        entry_ids: Sequence[str],
        invoice_id: str,
        billed_at: datetime,
    ) -> int:
        """
        Set invoice_id and billed_at on the given entries that are still unbilled

        Args:
            tenant_id: Tenant identifier
            entry_ids: Exact set of entry ids to claim
            invoice_id: Claiming invoice
            billed_at: Claim timestamp

        Returns:
            Number of rows actually updated
        """
        pass

    @abstractmethod
    async def release_entries(self, tenant_id: str, invoice_id: str) -> int:
        """
        Clear the claim of every entry billed to the given invoice

        Args:
            tenant_id: Tenant identifier
            invoice_id: Invoice whose entries are released

        Returns:
            Number of rows released
        """
        pass

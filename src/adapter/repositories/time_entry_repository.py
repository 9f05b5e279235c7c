"""SQLAlchemy Time Entry Repository Implementation

Reads unbilled time and claims it with a single conditional UPDATE.
"""

from datetime import date, datetime
from typing import List, Sequence
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.time_entry_repository import TimeEntryRepository
from src.domain.time_entry import TimeEntry


class SqlAlchemyTimeEntryRepository(TimeEntryRepository):
    """
    SQLAlchemy implementation of TimeEntryRepository

    The claim relies on the database evaluating "invoice_id IS NULL" at
    write time; two concurrent claims for the same row cannot both succeed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_unbilled_entries(
        self,
        tenant_id: str,
        project_ids: Sequence[str],
        from_date: date,
        to_date: date,
        billable_only: bool = True,
    ) -> List[TimeEntry]:
        if not project_ids:
            return []

        statement = (
            select(TimeEntry)
            .where(TimeEntry.tenant_id == tenant_id)
            .where(TimeEntry.project_id.in_(list(project_ids)))
            .where(TimeEntry.work_date >= from_date)
            .where(TimeEntry.work_date <= to_date)
            .where(TimeEntry.invoice_id.is_(None))
        )

        if billable_only:
            statement = statement.where(TimeEntry.billable.is_(True))

        statement = statement.order_by(TimeEntry.work_date, TimeEntry.user_id, TimeEntry.id)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def claim_entries(
        self,
        tenant_id: str,
        entry_ids: Sequence[str],
        invoice_id: str,
        billed_at: datetime,
    ) -> int:
        if not entry_ids:
            return 0

        statement = (
            update(TimeEntry)
            .where(TimeEntry.id.in_(list(entry_ids)))
            .where(TimeEntry.tenant_id == tenant_id)
            .where(TimeEntry.invoice_id.is_(None))
            .values(invoice_id=invoice_id, billed_at=billed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount

    async def release_entries(self, tenant_id: str, invoice_id: str) -> int:
        statement = (
            update(TimeEntry)
            .where(TimeEntry.tenant_id == tenant_id)
            .where(TimeEntry.invoice_id == invoice_id)
            .values(invoice_id=None, billed_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount

"""SQLAlchemy Task Repository Implementation"""

from typing import Iterable, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.task_repository import TaskRepository
from src.domain.task import Task


class SqlAlchemyTaskRepository(TaskRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_ids(self, tenant_id: str, task_ids: Iterable[str]) -> List[Task]:
        ids = list(task_ids)
        if not ids:
            return []
        statement = (
            select(Task)
            .where(Task.id.in_(ids))
            .where(Task.tenant_id == tenant_id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

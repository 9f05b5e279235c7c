"""SQLAlchemy Project Repository Implementation"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.project_repository import ProjectRepository
from src.domain.project import Project


class SqlAlchemyProjectRepository(ProjectRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: str, project_id: str) -> Optional[Project]:
        statement = (
            select(Project)
            .where(Project.id == project_id)
            .where(Project.tenant_id == tenant_id)
            .where(Project.deleted_at.is_(None))
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_client_id(self, tenant_id: str, client_id: str) -> List[Project]:
        statement = (
            select(Project)
            .where(Project.client_id == client_id)
            .where(Project.tenant_id == tenant_id)
            .where(Project.deleted_at.is_(None))
            .order_by(Project.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

"""SQLAlchemy User Repository Implementation"""

from typing import Iterable, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.user_repository import UserRepository
from src.domain.user import User


class SqlAlchemyUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_ids(self, tenant_id: str, user_ids: Iterable[str]) -> List[User]:
        ids = list(user_ids)
        if not ids:
            return []
        statement = (
            select(User)
            .where(User.id.in_(ids))
            .where(User.tenant_id == tenant_id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

"""User Repository Interface

Read-only access to contributors and their billing rates.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List
from src.domain.user import User


class UserRepository(ABC):

    @abstractmethod
    async def get_by_ids(self, tenant_id: str, user_ids: Iterable[str]) -> List[User]:
        """Retrieve the tenant's users with the given ids (unknown ids are skipped)"""
        pass

"""Task Repository Interface

Read-only access to work items.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List
from src.domain.task import Task


class TaskRepository(ABC):

    @abstractmethod
    async def get_by_ids(self, tenant_id: str, task_ids: Iterable[str]) -> List[Task]:
        """Retrieve the tenant's tasks with the given ids (unknown ids are skipped)"""
        pass

"""Project Repository Interface

Read-only access to the project store.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.project import Project


class ProjectRepository(ABC):

    @abstractmethod
    async def get_by_id(self, tenant_id: str, project_id: str) -> Optional[Project]:
        """Retrieve a non-deleted project of the tenant, None if absent"""
        pass

    @abstractmethod
    async def get_by_client_id(self, tenant_id: str, client_id: str) -> List[Project]:
        """Retrieve all non-deleted projects of a client"""
        pass

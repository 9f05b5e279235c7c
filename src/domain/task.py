"""Task read model

Work items that time entries may be logged against.
"""

from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, generate_uuid


class Task(BaseModel, table=True):
    __tablename__ = "tasks"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: str = Field(index=True)
    project_id: str = Field(index=True)
    title: str = Field(sa_column=Column(String(255), nullable=False))

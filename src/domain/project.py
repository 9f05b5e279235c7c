"""Project read model

Projects are managed by the project CRUD service; billing only reads them.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import DateTime, String
from src.domain.base import BaseModel, generate_uuid


class Project(BaseModel, table=True):
    __tablename__ = "projects"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: str = Field(index=True)
    client_id: str = Field(index=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
    )

"""Client read model

Clients are managed by the client CRUD service; billing only reads them.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import DateTime, String
from src.domain.base import BaseModel, generate_uuid


class Client(BaseModel, table=True):
    __tablename__ = "clients"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: str = Field(index=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    email: Optional[str] = Field(default=None)
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
    )

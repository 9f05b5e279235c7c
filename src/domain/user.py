"""User read model

Contributors are managed by the user service. The hourly rate is the only
billing-relevant attribute: a missing or zero rate makes the user unbillable.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid


class User(BaseModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: str = Field(index=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    email: str = Field(sa_column=Column(String(255), nullable=False))
    hourly_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True),
    )

    @property
    def has_billing_rate(self) -> bool:
        return self.hourly_rate is not None and self.hourly_rate != 0

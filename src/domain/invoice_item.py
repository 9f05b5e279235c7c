"""Invoice Item Domain Entity

Tracks individual line items within an invoice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class InvoiceItem(BaseModel, table=True):
    """
    Invoice Item - Individual line item within an invoice

    Domain Rules:
    - Each item belongs to exactly one invoice
    - quantity is stored in hours
    - amount = round(quantity * unit_price, 2)
    - Only replaced (soft delete + insert) through invoice edit
    """

    __tablename__ = "invoice_items"
    __table_args__ = (
        Index("ix_invoice_items_invoice_id", "invoice_id"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique invoice item identifier"
    )

    tenant_id: str = Field(
        description="Owning tenant"
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    description: str = Field(
        sa_column=Column(String(500), nullable=False),
        description="Line item description (e.g., 'Services - Jane Doe')"
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Quantity in hours"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Price per hour"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="quantity * unit_price, rounded to 2 decimals"
    )

    minutes: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True),
        description="Source minutes for time-based items"
    )

    user_id: Optional[str] = Field(
        default=None,
        description="Contributor for items grouped by contributor"
    )

    task_id: Optional[str] = Field(
        default=None,
        description="Work item for items grouped by work item"
    )

    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Soft delete marker"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False),
        description="Line item creation timestamp"
    )

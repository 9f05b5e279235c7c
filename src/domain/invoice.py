"""Invoice Domain Entity

Tracks client invoices and their lifecycle status.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, DateTime, Numeric, String, Text, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


# Current status -> statuses it may move to. Terminal statuses map to nothing.
ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset(
        {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Statuses whose line items may no longer be edited
LOCKED_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    """True if moving from current to target is allowed (same status counts as allowed)"""
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


class Invoice(BaseModel, table=True):
    """
    Invoice - Financial document billed to a client

    Domain Rules:
    - invoice_number is unique per tenant
    - Status transitions follow ALLOWED_TRANSITIONS; PAID and CANCELLED are terminal
    - total = subtotal + tax_amount, all at 2-digit currency scale
    - is_overdue is derived: due_date < today and status == SENT
    - Deletion is a soft delete (deleted_at) and is never allowed for PAID invoices
    """

    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("tenant_id", "invoice_number", name="uq_invoices_tenant_number"),
        Index("ix_invoices_tenant_status", "tenant_id", "status"),
        Index("ix_invoices_client_id", "client_id"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique invoice identifier"
    )

    tenant_id: str = Field(
        description="Owning tenant"
    )

    client_id: str = Field(
        description="Billed client"
    )

    project_id: Optional[str] = Field(
        default=None,
        description="Optional project the invoice is scoped to"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Human-readable number (e.g., INV-20240131-482913)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Lifecycle status"
    )

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Issue date"
    )

    due_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Payment due date"
    )

    subtotal: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Sum of line item amounts"
    )

    tax_rate: Decimal = Field(
        sa_column=Column(Numeric(5, 2), nullable=False),
        description="Flat tax rate in percent"
    )

    tax_amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="subtotal * tax_rate / 100"
    )

    total: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="subtotal + tax_amount"
    )

    currency_code: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False),
        description="Currency code (ISO 4217)"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free-text notes or terms"
    )

    created_by: Optional[str] = Field(
        default=None,
        description="User who created the invoice"
    )

    sent_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="First time the invoice entered SENT"
    )

    paid_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="First time the invoice entered PAID"
    )

    cancelled_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="First time the invoice entered CANCELLED"
    )

    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Soft delete marker"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False),
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False),
        description="Last update timestamp"
    )

    def is_overdue(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return (
            self.due_date is not None
            and self.due_date < today
            and self.status == InvoiceStatus.SENT
        )

    def apply_status(self, target: InvoiceStatus, now: Optional[datetime] = None) -> None:
        """
        Move to target status and stamp the lifecycle timestamp

        Callers must check can_transition() first. Timestamps are only set on
        first entry into a status.
        """
        now = now or datetime.utcnow()
        self.status = target
        if target == InvoiceStatus.SENT and self.sent_at is None:
            self.sent_at = now
        elif target == InvoiceStatus.PAID and self.paid_at is None:
            self.paid_at = now
        elif target == InvoiceStatus.CANCELLED and self.cancelled_at is None:
            self.cancelled_at = now

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "5d1c1f0e-2b7a-4a39-9d55-0c3f7e0b7a11",
                "tenant_id": "tenant_xyz789",
                "client_id": "c7a2e7b4-0a8e-4b0f-8f8e-1f1d2d3c4b5a",
                "invoice_number": "INV-20240131-482913",
                "status": "DRAFT",
                "issue_date": "2024-01-31",
                "due_date": "2024-02-15",
                "subtotal": "310.00",
                "tax_rate": "18.00",
                "tax_amount": "55.80",
                "total": "365.80",
                "currency_code": "USD",
            }
        }

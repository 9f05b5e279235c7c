"""Time Entry Domain Entity

Raw time-tracking records logged by contributors against projects.
An entry is unbilled until an invoice claims it.
"""

from datetime import datetime, date
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from src.domain.base import BaseModel, generate_uuid

MINUTES_PER_HOUR = 60


class TimeEntry(BaseModel, table=True):
    """
    Time Entry - Hours logged by a contributor

    Domain Rules:
    - Belongs to exactly one tenant, contributor and project
    - Work item (task) is optional
    - hours is integer-valued
    - invoice_id is None while unbilled
    - An entry can be claimed by at most one invoice; the claim is only
      ever applied to rows whose invoice_id is still None
    """

    __tablename__ = "time_entries"
    __table_args__ = (
        Index("ix_time_entries_unbilled", "tenant_id", "project_id", "work_date"),
        Index("ix_time_entries_invoice_id", "invoice_id"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique time entry identifier"
    )

    tenant_id: str = Field(
        index=True,
        description="Owning tenant"
    )

    user_id: str = Field(
        description="Contributor who logged the time"
    )

    project_id: str = Field(
        description="Project the time was logged against"
    )

    task_id: Optional[str] = Field(
        default=None,
        description="Optional work item"
    )

    work_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Day the work was performed"
    )

    hours: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Duration in whole hours"
    )

    billable: bool = Field(
        default=True,
        description="Whether the time may be billed to the client"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free-text notes"
    )

    invoice_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), ForeignKey("invoices.id"), nullable=True),
        description="Invoice that claimed this entry (None = unbilled)"
    )

    billed_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="When the entry was claimed"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False),
        description="Entry creation timestamp"
    )

    @property
    def minutes(self) -> int:
        return self.hours * MINUTES_PER_HOUR

    @property
    def is_billed(self) -> bool:
        return self.invoice_id is not None

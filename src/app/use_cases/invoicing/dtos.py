"""Data Transfer Objects for Invoicing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from src.domain.invoice import InvoiceStatus


class GroupBy(str, Enum):
    """Line item grouping strategies"""
    BY_CONTRIBUTOR = "BY_CONTRIBUTOR"
    BY_WORK_ITEM = "BY_WORK_ITEM"


class PreviewCommandDTO(BaseModel):
    """
    Command DTO for previewing an invoice built from unbilled time

    Used as input to PreviewInvoice; GenerateCommandDTO extends it so both
    stages always see the same filters.
    """

    tenant_id: str = Field(..., description="Tenant identifier")
    actor_id: Optional[str] = Field(default=None, description="Requesting user")
    client_id: str = Field(..., description="Client to bill")
    project_id: Optional[str] = Field(
        default=None,
        description="Optional project (must belong to the client)"
    )
    from_date: date = Field(..., description="First work date (inclusive)")
    to_date: date = Field(..., description="Last work date (inclusive)")
    billable_only: bool = Field(default=True, description="Only billable entries")
    group_by: GroupBy = Field(
        default=GroupBy.BY_CONTRIBUTOR,
        description="Line item grouping strategy"
    )
    include_descriptions: bool = Field(
        default=False,
        description="Aggregate entry notes into each line item"
    )


class GenerateCommandDTO(PreviewCommandDTO):
    """
    Command DTO for generating a draft invoice

    confirmed must be True; tax_rate overrides the default rate.
    """

    tax_rate: Optional[Decimal] = Field(
        default=None,
        description="Optional tax rate override in percent"
    )
    notes: Optional[str] = Field(default=None, description="Invoice notes/terms")
    confirmed: bool = Field(
        default=False,
        description="Explicit confirmation; generation is refused without it"
    )


class PreviewLineItemDTO(BaseModel):
    """Ephemeral line item of a preview (never persisted as-is)"""

    description: str
    quantity_minutes: int
    quantity_hours: Decimal
    unit_price: Decimal
    amount: Decimal
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    task_id: Optional[str] = None
    task_title: Optional[str] = None
    aggregated_notes: Optional[str] = None


class MissingRateUserDTO(BaseModel):
    """Contributor blocking generation because no hourly rate is configured"""

    user_id: str
    name: str
    email: Optional[str] = None
    message: str


class PreviewResponseDTO(BaseModel):
    """
    Response DTO for invoice preview

    Returned by PreviewInvoice.
    """

    client_id: str
    client_name: str
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    from_date: date
    to_date: date
    total_minutes: int
    total_hours: Decimal
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    line_items: List[PreviewLineItemDTO] = Field(default_factory=list)
    missing_rate_users: List[MissingRateUserDTO] = Field(default_factory=list)
    entries_count: int
    can_generate: bool
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": "c7a2e7b4-0a8e-4b0f-8f8e-1f1d2d3c4b5a",
                "client_name": "Acme Corp",
                "project_id": None,
                "project_name": None,
                "from_date": "2024-01-01",
                "to_date": "2024-01-31",
                "total_minutes": 300,
                "total_hours": "5.00",
                "subtotal": "310.00",
                "tax_rate": "18.00",
                "tax_amount": "55.80",
                "total": "365.80",
                "line_items": [],
                "missing_rate_users": [],
                "entries_count": 2,
                "can_generate": True,
                "message": "Ready to generate invoice",
            }
        }


class GenerateResponseDTO(BaseModel):
    """
    Response DTO for draft invoice generation

    Returned by GenerateInvoice.
    """

    invoice_id: str
    invoice_number: str
    total: Decimal
    billed_entries_count: int
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": "5d1c1f0e-2b7a-4a39-9d55-0c3f7e0b7a11",
                "invoice_number": "INV-20240131-482913",
                "total": "365.80",
                "billed_entries_count": 2,
                "message": "Invoice generated successfully in DRAFT status",
            }
        }


class InvoiceItemInputDTO(BaseModel):
    """Manually entered line item"""

    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., gt=0, description="Quantity in hours")
    unit_price: Decimal = Field(..., ge=0, description="Price per hour")


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating an invoice by hand

    Used as input to CreateInvoice.
    """

    tenant_id: str
    actor_id: Optional[str] = None
    client_id: str
    project_id: Optional[str] = None
    issue_date: date
    due_date: date
    items: List[InvoiceItemInputDTO] = Field(..., min_length=1)
    tax_rate: Optional[Decimal] = None
    notes: Optional[str] = None
    currency_code: Optional[str] = None


class UpdateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for editing an invoice

    Omitted fields are left unchanged; items, when given, replace all items.
    """

    tenant_id: str
    invoice_id: str
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    tax_rate: Optional[Decimal] = None
    items: Optional[List[InvoiceItemInputDTO]] = None


class UpdateInvoiceStatusCommandDTO(BaseModel):
    """Command DTO for a status transition"""

    tenant_id: str
    invoice_id: str
    status: InvoiceStatus
    actor_id: str


class PaymentEventCommandDTO(BaseModel):
    """Command DTO for a payment-provider webhook event"""

    tenant_id: str
    invoice_id: str
    event: str


class PaymentEventResponseDTO(BaseModel):
    """Outcome of a payment-provider webhook event"""

    invoice_id: str
    event: str
    applied: bool
    status: Optional[InvoiceStatus] = None


class ListInvoicesQueryDTO(BaseModel):
    """Filters for listing invoices"""

    tenant_id: str
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    status: Optional[InvoiceStatus] = None
    issued_from: Optional[date] = None
    issued_to: Optional[date] = None
    overdue_only: bool = False


class InvoiceItemDTO(BaseModel):
    """Persisted invoice line item"""

    id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    minutes: Optional[int] = None
    user_id: Optional[str] = None
    task_id: Optional[str] = None


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice reads and writes

    Returned by GetInvoice, ListInvoices, CreateInvoice, UpdateInvoice and
    UpdateInvoiceStatus.
    """

    id: str
    tenant_id: str
    client_id: str
    project_id: Optional[str] = None
    invoice_number: str
    status: InvoiceStatus
    issue_date: date
    due_date: date
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    currency_code: str
    notes: Optional[str] = None
    created_by: Optional[str] = None
    is_overdue: bool
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    items: List[InvoiceItemDTO] = Field(default_factory=list)


class DeleteInvoiceResponseDTO(BaseModel):
    """Outcome of an invoice soft delete"""

    invoice_id: str
    invoice_number: str
    released_entries_count: int

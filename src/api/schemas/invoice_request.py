"""Request schemas for Invoice API

Pydantic models for validating incoming HTTP requests. Tenant and actor come
from the caller headers, never from the body.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from src.app.use_cases.invoicing.dtos import GroupBy


class InvoicePreviewRequestSchema(BaseModel):
    """
    Request schema for previewing invoice generation

    Used for POST /invoices/generation/preview endpoint.
    """

    client_id: str = Field(..., min_length=1, description="Client to bill")
    project_id: Optional[str] = Field(
        default=None,
        description="Optional project (must belong to the client)"
    )
    from_date: date = Field(..., description="First work date (inclusive)")
    to_date: date = Field(..., description="Last work date (inclusive)")
    billable_only: bool = Field(default=True, description="Only billable entries")
    group_by: GroupBy = Field(
        default=GroupBy.BY_CONTRIBUTOR,
        description="BY_CONTRIBUTOR or BY_WORK_ITEM"
    )
    include_descriptions: bool = Field(
        default=False,
        description="Aggregate entry notes into each line item"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": "c7a2e7b4-0a8e-4b0f-8f8e-1f1d2d3c4b5a",
                "from_date": "2024-01-01",
                "to_date": "2024-01-31",
                "group_by": "BY_CONTRIBUTOR",
            }
        }


class InvoiceGenerateRequestSchema(InvoicePreviewRequestSchema):
    """
    Request schema for generating a draft invoice

    Used for POST /invoices/generation/generate endpoint.
    """

    tax_rate: Optional[Decimal] = Field(
        default=None,
        description="Tax rate override in percent (0-100, 2 decimals)"
    )
    notes: Optional[str] = Field(default=None, description="Invoice notes/terms")
    confirmed: bool = Field(
        default=False,
        description="Must be true; generation is refused otherwise"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": "c7a2e7b4-0a8e-4b0f-8f8e-1f1d2d3c4b5a",
                "from_date": "2024-01-01",
                "to_date": "2024-01-31",
                "group_by": "BY_WORK_ITEM",
                "tax_rate": "18.00",
                "notes": "Net 15",
                "confirmed": True,
            }
        }


class InvoiceItemRequestSchema(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(..., gt=0, description="Quantity in hours")
    unit_price: Decimal = Field(..., ge=0, description="Price per hour")


class CreateInvoiceRequestSchema(BaseModel):
    """
    Request schema for creating an invoice by hand

    Used for POST /invoices endpoint.
    """

    client_id: str = Field(..., min_length=1)
    project_id: Optional[str] = None
    issue_date: date
    due_date: date
    items: List[InvoiceItemRequestSchema] = Field(..., min_length=1)
    tax_rate: Optional[Decimal] = None
    notes: Optional[str] = None
    currency_code: Optional[str] = Field(default=None, min_length=3, max_length=3)


class UpdateInvoiceRequestSchema(BaseModel):
    """
    Request schema for editing an invoice

    Used for PUT /invoices/{invoice_id}. Supplied items replace all items.
    """

    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    tax_rate: Optional[Decimal] = None
    items: Optional[List[InvoiceItemRequestSchema]] = None

    @model_validator(mode="after")
    def validate_items(self):
        if self.items is not None and not self.items:
            raise ValueError("items must not be empty when supplied")
        return self


class UpdateInvoiceStatusRequestSchema(BaseModel):
    """Used for PATCH /invoices/{invoice_id}/status"""

    status: str = Field(..., min_length=1, description="Target status")


class PaymentWebhookSchema(BaseModel):
    """Payload posted by the payment provider"""

    event: str = Field(..., min_length=1)
    tenant_id: str = Field(..., min_length=1)
    invoice_id: str = Field(..., min_length=1)

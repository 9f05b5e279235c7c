"""Entity to DTO mapping shared by invoice use cases"""

from datetime import date
from typing import List, Optional

from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem
from .dtos import InvoiceItemDTO, InvoiceResponseDTO


def to_item_dto(item: InvoiceItem) -> InvoiceItemDTO:
    return InvoiceItemDTO(
        id=item.id,
        description=item.description,
        quantity=item.quantity,
        unit_price=item.unit_price,
        amount=item.amount,
        minutes=item.minutes,
        user_id=item.user_id,
        task_id=item.task_id,
    )


def to_invoice_response(
    invoice: Invoice,
    items: List[InvoiceItem],
    today: Optional[date] = None,
) -> InvoiceResponseDTO:
    return InvoiceResponseDTO(
        id=invoice.id,
        tenant_id=invoice.tenant_id,
        client_id=invoice.client_id,
        project_id=invoice.project_id,
        invoice_number=invoice.invoice_number,
        status=invoice.status,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        subtotal=invoice.subtotal,
        tax_rate=invoice.tax_rate,
        tax_amount=invoice.tax_amount,
        total=invoice.total,
        currency_code=invoice.currency_code,
        notes=invoice.notes,
        created_by=invoice.created_by,
        is_overdue=invoice.is_overdue(today),
        sent_at=invoice.sent_at,
        paid_at=invoice.paid_at,
        cancelled_at=invoice.cancelled_at,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
        items=[to_item_dto(item) for item in items],
    )

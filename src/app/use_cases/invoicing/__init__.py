"""Invoicing use cases"""
from .preview_invoice import PreviewInvoice, InvoiceProjection
from .generate_invoice import GenerateInvoice
from .create_invoice import CreateInvoice
from .update_invoice import UpdateInvoice
from .update_invoice_status import UpdateInvoiceStatus
from .apply_payment_event import ApplyPaymentEvent, PAYMENT_EVENT_STATUSES
from .delete_invoice import DeleteInvoice
from .get_invoice import GetInvoice
from .list_invoices import ListInvoices
from .invoice_number import InvoiceNumberAllocator
from .errors import ErrorKind, kind_of
from .dtos import (
    GroupBy,
    PreviewCommandDTO,
    GenerateCommandDTO,
    PreviewLineItemDTO,
    MissingRateUserDTO,
    PreviewResponseDTO,
    GenerateResponseDTO,
    InvoiceItemInputDTO,
    CreateInvoiceCommandDTO,
    UpdateInvoiceCommandDTO,
    UpdateInvoiceStatusCommandDTO,
    PaymentEventCommandDTO,
    PaymentEventResponseDTO,
    ListInvoicesQueryDTO,
    InvoiceItemDTO,
    InvoiceResponseDTO,
    DeleteInvoiceResponseDTO,
)

__all__ = [
    "PreviewInvoice",
    "InvoiceProjection",
    "GenerateInvoice",
    "CreateInvoice",
    "UpdateInvoice",
    "UpdateInvoiceStatus",
    "ApplyPaymentEvent",
    "PAYMENT_EVENT_STATUSES",
    "DeleteInvoice",
    "GetInvoice",
    "ListInvoices",
    "InvoiceNumberAllocator",
    "ErrorKind",
    "kind_of",
    "GroupBy",
    "PreviewCommandDTO",
    "GenerateCommandDTO",
    "PreviewLineItemDTO",
    "MissingRateUserDTO",
    "PreviewResponseDTO",
    "GenerateResponseDTO",
    "InvoiceItemInputDTO",
    "CreateInvoiceCommandDTO",
    "UpdateInvoiceCommandDTO",
    "UpdateInvoiceStatusCommandDTO",
    "PaymentEventCommandDTO",
    "PaymentEventResponseDTO",
    "ListInvoicesQueryDTO",
    "InvoiceItemDTO",
    "InvoiceResponseDTO",
    "DeleteInvoiceResponseDTO",
]

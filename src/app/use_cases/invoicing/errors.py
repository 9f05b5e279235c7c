"""Error codes for invoicing use cases

Every code belongs to exactly one ErrorKind. The kind tells callers how to
react: validation and not-found failures are the caller's fault, business
rule failures carry a human-readable reason, conflicts mean a concurrent
request won a race, internal failures are bugs or exhausted retries.
"""

from enum import Enum
from typing import Optional
from libs.result import Error
from src.domain.invoice import InvoiceStatus


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    BUSINESS_RULE = "business_rule"
    CONFLICT = "conflict"
    INTERNAL = "internal"


# Validation
INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
INVALID_TAX_RATE = "INVALID_TAX_RATE"
CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
PROJECT_CLIENT_MISMATCH = "PROJECT_CLIENT_MISMATCH"
INVALID_STATUS = "INVALID_STATUS"

# Not found
CLIENT_NOT_FOUND = "CLIENT_NOT_FOUND"
PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"

# Business rules
CANNOT_GENERATE = "CANNOT_GENERATE"
INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
INVOICE_LOCKED = "INVOICE_LOCKED"
CANNOT_DELETE_PAID_INVOICE = "CANNOT_DELETE_PAID_INVOICE"

# Conflicts
BILLING_CONFLICT = "BILLING_CONFLICT"
STATUS_CONFLICT = "STATUS_CONFLICT"

# Internal
INVOICE_NUMBER_EXHAUSTED = "INVOICE_NUMBER_EXHAUSTED"

ERROR_KINDS: dict[str, ErrorKind] = {
    INVALID_DATE_RANGE: ErrorKind.VALIDATION,
    INVALID_TAX_RATE: ErrorKind.VALIDATION,
    CONFIRMATION_REQUIRED: ErrorKind.VALIDATION,
    PROJECT_CLIENT_MISMATCH: ErrorKind.VALIDATION,
    INVALID_STATUS: ErrorKind.VALIDATION,
    CLIENT_NOT_FOUND: ErrorKind.NOT_FOUND,
    PROJECT_NOT_FOUND: ErrorKind.NOT_FOUND,
    INVOICE_NOT_FOUND: ErrorKind.NOT_FOUND,
    CANNOT_GENERATE: ErrorKind.BUSINESS_RULE,
    INVALID_STATUS_TRANSITION: ErrorKind.BUSINESS_RULE,
    INVOICE_LOCKED: ErrorKind.BUSINESS_RULE,
    CANNOT_DELETE_PAID_INVOICE: ErrorKind.BUSINESS_RULE,
    BILLING_CONFLICT: ErrorKind.CONFLICT,
    STATUS_CONFLICT: ErrorKind.CONFLICT,
    INVOICE_NUMBER_EXHAUSTED: ErrorKind.INTERNAL,
}


def kind_of(code: str) -> ErrorKind:
    """Kind of an error code; unknown codes (e.g. *_FAILED) are internal"""
    return ERROR_KINDS.get(code, ErrorKind.INTERNAL)


def client_not_found(client_id: str) -> Error:
    return Error(
        code=CLIENT_NOT_FOUND,
        message="Client not found",
        reason=f"client_id={client_id}",
    )


def project_not_found(project_id: str) -> Error:
    return Error(
        code=PROJECT_NOT_FOUND,
        message="Project not found",
        reason=f"project_id={project_id}",
    )


def invoice_not_found(invoice_id: str) -> Error:
    return Error(
        code=INVOICE_NOT_FOUND,
        message=f"Invoice with ID {invoice_id} not found",
        reason="Invoice does not exist or was deleted",
    )


def status_conflict(invoice_id: str, expected: InvoiceStatus) -> Error:
    return Error(
        code=STATUS_CONFLICT,
        message=f"Invoice {invoice_id} was modified concurrently; status is no longer {expected.value}",
        reason="Another request changed the status between read and write",
    )


def invoice_number_exhausted(reason: str) -> Error:
    return Error(
        code=INVOICE_NUMBER_EXHAUSTED,
        message="Could not allocate a unique invoice number",
        reason=reason,
    )


def invalid_tax_rate(tax_rate, reason: Optional[str] = None) -> Error:
    return Error(
        code=INVALID_TAX_RATE,
        message=f"Invalid tax rate: {tax_rate}",
        reason=reason or "Tax rate must be between 0 and 100 with at most 2 decimal places",
    )


class InvoiceNumberExhaustedError(Exception):
    """Raised when no unique invoice number could be found within the retry bound"""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Failed to generate unique invoice number after {attempts} attempts"
        )

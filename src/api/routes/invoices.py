"""Invoice API Routes

FastAPI routes for reading, editing and moving invoices through their
lifecycle, plus the payment-provider webhook.
"""

import hashlib
import hmac
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Header, Query, Request, status
from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from libs.result import Error
from src.api.auth import Caller, get_caller
from src.api.error import ClientError, VALIDATION_ERROR
from src.api.schemas.invoice_request import (
    CreateInvoiceRequestSchema,
    UpdateInvoiceRequestSchema,
    UpdateInvoiceStatusRequestSchema,
    PaymentWebhookSchema,
)
from src.app.use_cases.invoicing import errors
from src.app.use_cases.invoicing.dtos import (
    CreateInvoiceCommandDTO,
    UpdateInvoiceCommandDTO,
    UpdateInvoiceStatusCommandDTO,
    PaymentEventCommandDTO,
    ListInvoicesQueryDTO,
    InvoiceItemInputDTO,
    InvoiceResponseDTO,
    DeleteInvoiceResponseDTO,
    PaymentEventResponseDTO,
)
from src.app.use_cases.invoicing.create_invoice import CreateInvoice
from src.app.use_cases.invoicing.update_invoice import UpdateInvoice
from src.app.use_cases.invoicing.update_invoice_status import UpdateInvoiceStatus
from src.app.use_cases.invoicing.apply_payment_event import ApplyPaymentEvent
from src.app.use_cases.invoicing.delete_invoice import DeleteInvoice
from src.app.use_cases.invoicing.get_invoice import GetInvoice
from src.app.use_cases.invoicing.list_invoices import ListInvoices
from src.app.use_cases.invoicing.invoice_number import InvoiceNumberAllocator
from src.adapter.repositories import (
    SqlAlchemyClientRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyTimeEntryRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceItemRepository,
)
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.invoice import InvoiceStatus
from src.depends import get_config, get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])

SIGNATURE_HEADER = "X-Payment-Signature"
WEBHOOK_NOT_CONFIGURED = "WEBHOOK_NOT_CONFIGURED"

NOT_FOUND_RESPONSE = {
    404: {
        "description": "Invoice not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_NOT_FOUND",
                        "message": "Invoice with ID 5d1c1f0e-2b7a-4a39-9d55-0c3f7e0b7a11 not found"
                    }
                }
            }
        }
    }
}


def build_update_invoice_status(session: AsyncSession, config) -> UpdateInvoiceStatus:
    return UpdateInvoiceStatus(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        invoice_item_repo=SqlAlchemyInvoiceItemRepository(session),
        notification_service=create_notification_service(config.INVOICE_NOTIFICATION_WEBHOOK),
    )


def sign_payload(secret: str, body: bytes) -> str:
    """HMAC-SHA256 hex digest of the raw request body"""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(secret, body), signature.strip().lower())


@router.get(
    "",
    response_model=List[InvoiceResponseDTO],
    status_code=status.HTTP_200_OK,
)
async def list_invoices(
    client_id: Optional[str] = Query(default=None),
    project_id: Optional[str] = Query(default=None),
    invoice_status: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    issued_from: Optional[date] = Query(default=None),
    issued_to: Optional[date] = Query(default=None),
    overdue_only: bool = Query(default=False),
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    List invoices of the caller's tenant, newest issue date first.

    **Query parameters:**
    - `client_id`, `project_id`, `status` (optional): Filters
    - `issued_from`, `issued_to` (optional): Inclusive issue-date range
    - `overdue_only` (optional): Only SENT invoices past their due date
    """
    query = ListInvoicesQueryDTO(
        tenant_id=caller.tenant_id,
        client_id=client_id,
        project_id=project_id,
        status=invoice_status,
        issued_from=issued_from,
        issued_to=issued_to,
        overdue_only=overdue_only,
    )

    use_case = ListInvoices(SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(query)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    request: CreateInvoiceRequestSchema,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Create a DRAFT invoice from manually entered items.

    **Returns:**
    - 201: Invoice created
    - 400: Invalid dates or tax rate
    - 404: Client or project not found
    """
    invoice_repo = SqlAlchemyInvoiceRepository(session)

    command = CreateInvoiceCommandDTO(
        tenant_id=caller.tenant_id,
        actor_id=caller.user_id,
        client_id=request.client_id,
        project_id=request.project_id,
        issue_date=request.issue_date,
        due_date=request.due_date,
        items=[InvoiceItemInputDTO(**item.model_dump()) for item in request.items],
        tax_rate=request.tax_rate,
        notes=request.notes,
        currency_code=request.currency_code,
    )

    use_case = CreateInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        client_repo=SqlAlchemyClientRepository(session),
        project_repo=SqlAlchemyProjectRepository(session),
        invoice_repo=invoice_repo,
        invoice_item_repo=SqlAlchemyInvoiceItemRepository(session),
        number_allocator=InvoiceNumberAllocator(
            invoice_repo, max_attempts=int(config.INVOICE_NUMBER_MAX_ATTEMPTS)
        ),
        default_tax_rate=Decimal(str(config.DEFAULT_TAX_RATE)),
        currency_code=config.DEFAULT_CURRENCY,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/webhooks/payment",
    response_model=PaymentEventResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def payment_webhook(
    request: Request,
    x_payment_signature: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Receive a payment-provider event.

    The raw body must be signed with HMAC-SHA256 using `PAYMENT_WEBHOOK_SECRET`
    and the hex digest sent in `X-Payment-Signature`. Without a configured
    secret every event is refused with 503.

    **Events:**
    - `payment.captured`, `invoice.paid`: mark PAID
    - `invoice.expired`: mark OVERDUE
    - `invoice.cancelled`: mark CANCELLED
    - anything else: acknowledged and ignored
    """
    body = await request.body()

    secret = config.PAYMENT_WEBHOOK_SECRET
    if not secret:
        logger.error("Rejected payment webhook: PAYMENT_WEBHOOK_SECRET is not configured")
        raise ClientError(
            Error(
                code=WEBHOOK_NOT_CONFIGURED,
                message="Payment webhook is not configured",
                reason="PAYMENT_WEBHOOK_SECRET is unset",
            ),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if not verify_signature(secret, body, x_payment_signature):
        logger.warning("Rejected payment webhook with invalid signature")
        raise ClientError(
            Error(
                code="INVALID_SIGNATURE",
                message="Invalid webhook signature",
                reason=f"{SIGNATURE_HEADER} does not match the request body",
            ),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    try:
        payload = PaymentWebhookSchema.model_validate_json(body)
    except ValidationError as e:
        raise ClientError(
            Error(code=VALIDATION_ERROR, message="Invalid webhook payload", reason=str(e)),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    command = PaymentEventCommandDTO(
        tenant_id=payload.tenant_id,
        invoice_id=payload.invoice_id,
        event=payload.event,
    )

    use_case = ApplyPaymentEvent(
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        update_invoice_status=build_update_invoice_status(session, config),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=NOT_FOUND_RESPONSE,
)
async def get_invoice(
    invoice_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Get one invoice with its line items.

    **Returns:**
    - 200: Invoice with items
    - 404: Invoice not found
    """
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
    )
    result = await use_case.execute(caller.tenant_id, invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.put(
    "/{invoice_id}",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=NOT_FOUND_RESPONSE,
)
async def update_invoice(
    invoice_id: str,
    request: UpdateInvoiceRequestSchema,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Edit an invoice. Supplied `items` replace all current items.

    **Returns:**
    - 200: Updated invoice
    - 400: Invalid dates or tax rate
    - 404: Invoice not found
    - 422: Invoice is PAID or CANCELLED
    """
    command = UpdateInvoiceCommandDTO(
        tenant_id=caller.tenant_id,
        invoice_id=invoice_id,
        issue_date=request.issue_date,
        due_date=request.due_date,
        notes=request.notes,
        tax_rate=request.tax_rate,
        items=(
            [InvoiceItemInputDTO(**item.model_dump()) for item in request.items]
            if request.items is not None
            else None
        ),
    )

    use_case = UpdateInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        invoice_item_repo=SqlAlchemyInvoiceItemRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.patch(
    "/{invoice_id}/status",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=NOT_FOUND_RESPONSE,
)
async def update_invoice_status(
    invoice_id: str,
    request: UpdateInvoiceStatusRequestSchema,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Move an invoice to another status.

    **Allowed transitions:**
    - DRAFT -> SENT, CANCELLED
    - SENT -> PAID, OVERDUE, CANCELLED
    - OVERDUE -> PAID, CANCELLED

    **Returns:**
    - 200: Updated invoice
    - 400: Unknown status
    - 404: Invoice not found
    - 422: Transition not allowed
    """
    try:
        target = InvoiceStatus(request.status.upper())
    except ValueError:
        raise ClientError(
            Error(
                code=errors.INVALID_STATUS,
                message=f"Invalid status: {request.status}",
                reason=f"Allowed: {', '.join(s.value for s in InvoiceStatus)}",
            )
        )

    command = UpdateInvoiceStatusCommandDTO(
        tenant_id=caller.tenant_id,
        invoice_id=invoice_id,
        status=target,
        actor_id=caller.user_id,
    )

    use_case = build_update_invoice_status(session, config)
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete(
    "/{invoice_id}",
    response_model=DeleteInvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=NOT_FOUND_RESPONSE,
)
async def delete_invoice(
    invoice_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Soft-delete an invoice and release its time entries back to unbilled.

    **Returns:**
    - 200: Invoice deleted
    - 404: Invoice not found
    - 422: Invoice is PAID
    """
    use_case = DeleteInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        invoice_item_repo=SqlAlchemyInvoiceItemRepository(session),
        time_entry_repo=SqlAlchemyTimeEntryRepository(session),
    )
    result = await use_case.execute(caller.tenant_id, invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value

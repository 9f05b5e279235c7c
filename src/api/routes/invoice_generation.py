"""Invoice Generation API Routes

Two-step flow: preview what an invoice would contain, then generate the
draft once the caller confirms.
"""

from decimal import Decimal
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.auth import Caller, get_caller
from src.api.error import ClientError
from src.api.schemas.invoice_request import (
    InvoicePreviewRequestSchema,
    InvoiceGenerateRequestSchema,
)
from src.app.use_cases.invoicing.dtos import (
    PreviewCommandDTO,
    GenerateCommandDTO,
    PreviewResponseDTO,
    GenerateResponseDTO,
)
from src.app.use_cases.invoicing.preview_invoice import PreviewInvoice
from src.app.use_cases.invoicing.generate_invoice import GenerateInvoice
from src.app.use_cases.invoicing.invoice_number import InvoiceNumberAllocator
from src.adapter.repositories import (
    SqlAlchemyClientRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyTaskRepository,
    SqlAlchemyTimeEntryRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceItemRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_config, get_session

router = APIRouter(prefix="/invoices/generation", tags=["Invoice Generation"])


def build_preview_invoice(session: AsyncSession, config) -> PreviewInvoice:
    return PreviewInvoice(
        client_repo=SqlAlchemyClientRepository(session),
        project_repo=SqlAlchemyProjectRepository(session),
        time_entry_repo=SqlAlchemyTimeEntryRepository(session),
        user_repo=SqlAlchemyUserRepository(session),
        task_repo=SqlAlchemyTaskRepository(session),
        default_tax_rate=Decimal(str(config.DEFAULT_TAX_RATE)),
    )


@router.post(
    "/preview",
    response_model=PreviewResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Validation error",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_DATE_RANGE",
                            "message": "From date must be before or equal to to date"
                        }
                    }
                }
            }
        },
        404: {
            "description": "Client or project not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CLIENT_NOT_FOUND",
                            "message": "Client not found"
                        }
                    }
                }
            }
        }
    }
)
async def preview_invoice(
    request: InvoicePreviewRequestSchema,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Preview the invoice that unbilled time would produce.

    Read-only: nothing is written and no entries are claimed. A preview with
    `can_generate: false` lists the contributors missing an hourly rate.

    **Returns:**
    - 200: Preview (possibly empty)
    - 400: Invalid date range or project/client mismatch
    - 404: Client or project not found
    """
    command = PreviewCommandDTO(
        tenant_id=caller.tenant_id,
        actor_id=caller.user_id,
        **request.model_dump(),
    )

    use_case = build_preview_invoice(session, config)
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/generate",
    response_model=GenerateResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Entries were billed by a concurrent request",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "BILLING_CONFLICT",
                            "message": "Billing conflict: Some entries were already billed. "
                                       "Expected 4 but updated 2"
                        }
                    }
                }
            }
        },
        422: {
            "description": "Invoice cannot be generated",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CANNOT_GENERATE",
                            "message": "Cannot generate: 1 user(s) missing hourly rate"
                        }
                    }
                }
            }
        }
    }
)
async def generate_invoice(
    request: InvoiceGenerateRequestSchema,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Generate a DRAFT invoice from unbilled time.

    The preview is recomputed server-side; the entries it priced are claimed
    in the same transaction as the invoice. `confirmed` must be true.

    **Returns:**
    - 201: Invoice created
    - 400: Not confirmed, invalid tax rate or filters
    - 404: Client or project not found
    - 409: Entries already billed by another invoice
    - 422: Missing hourly rates or nothing to bill
    """
    uow = SqlAlchemyUnitOfWork(session)
    invoice_repo = SqlAlchemyInvoiceRepository(session)

    command = GenerateCommandDTO(
        tenant_id=caller.tenant_id,
        actor_id=caller.user_id,
        **request.model_dump(),
    )

    use_case = GenerateInvoice(
        uow=uow,
        preview_invoice=build_preview_invoice(session, config),
        invoice_repo=invoice_repo,
        invoice_item_repo=SqlAlchemyInvoiceItemRepository(session),
        time_entry_repo=SqlAlchemyTimeEntryRepository(session),
        number_allocator=InvoiceNumberAllocator(
            invoice_repo, max_attempts=int(config.INVOICE_NUMBER_MAX_ATTEMPTS)
        ),
        due_days=int(config.DEFAULT_DUE_DAYS),
        currency_code=config.DEFAULT_CURRENCY,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value

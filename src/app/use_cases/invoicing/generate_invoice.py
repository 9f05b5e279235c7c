"""GenerateInvoice Use Case

Turns a confirmed preview into a DRAFT invoice and claims the time entries
behind it. Invoice, items and claim are committed together or not at all.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository, InvoiceNumberTakenError
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.time_entry_repository import TimeEntryRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from . import errors
from .dtos import GenerateCommandDTO, GenerateResponseDTO
from .invoice_number import InvoiceNumberAllocator
from .preview_invoice import PreviewInvoice
from .totals import Totals, calculate_totals, validate_tax_rate

logger = logging.getLogger(__name__)

DEFAULT_DUE_DAYS = 15
DEFAULT_CURRENCY = "USD"
SUCCESS_MESSAGE = "Invoice generated successfully in DRAFT status"


class GenerateInvoice:
    """
    Use Case: Generate a DRAFT invoice from unbilled time entries

    Business Rules:
    1. confirmed must be True (two-step confirmation)
    2. The preview is recomputed here, never taken from the caller
    3. Generation is refused unless the fresh preview can_generate with entries
    4. A tax rate override recomputes tax and total from the preview subtotal
    5. Issue date is today, due date is today + due_days
    6. Exactly the previewed entries are claimed; if fewer rows are claimed
       than expected another invoice got there first and nothing is kept
    7. If the invoice number is taken between allocation and insert, everything
       is rolled back and generation starts over from a fresh preview, up to
       the allocator's attempt bound

    Flow:
    1. Check confirmation and tax rate override
    2. Recompute preview (with entry ids)
    3. Allocate invoice number
    4. Create invoice and items
    5. Claim entries and compare the claimed count
    6. Commit transaction
    7. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        preview_invoice: PreviewInvoice,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        time_entry_repo: TimeEntryRepository,
        number_allocator: InvoiceNumberAllocator,
        due_days: int = DEFAULT_DUE_DAYS,
        currency_code: str = DEFAULT_CURRENCY,
    ):
        self.uow = uow
        self.preview_invoice = preview_invoice
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.time_entry_repo = time_entry_repo
        self.number_allocator = number_allocator
        self.due_days = due_days
        self.currency_code = currency_code

    async def execute(self, command: GenerateCommandDTO) -> Result[GenerateResponseDTO]:
        """
        Execute draft invoice generation

        Args:
            command: GenerateCommandDTO with the preview filters, confirmation and options

        Returns:
            Result[GenerateResponseDTO]: Created invoice summary or error
        """
        # Step 1: Confirmation and override validation
        if not command.confirmed:
            return Return.err(
                Error(
                    code=errors.CONFIRMATION_REQUIRED,
                    message="Invoice generation must be confirmed",
                    reason="confirmed flag is not set",
                )
            )

        if command.tax_rate is not None:
            reason = validate_tax_rate(command.tax_rate)
            if reason:
                return Return.err(errors.invalid_tax_rate(command.tax_rate, reason))

        logger.info(
            "Generating invoice for client: %s, from: %s, to: %s",
            command.client_id, command.from_date, command.to_date,
        )

        attempts = self.number_allocator.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await self._generate(command)

            except InvoiceNumberTakenError as e:
                await self.uow.rollback()
                logger.warning(
                    "Invoice number %s was taken concurrently, retrying generation (attempt %d of %d)",
                    e.invoice_number, attempt, attempts,
                )

            except errors.InvoiceNumberExhaustedError as e:
                await self.uow.rollback()
                return Return.err(errors.invoice_number_exhausted(str(e)))

            except Exception as e:
                await self.uow.rollback()
                logger.exception("Invoice generation failed for client %s", command.client_id)
                return Return.err(
                    Error(
                        code="GENERATE_INVOICE_FAILED",
                        message="Failed to generate invoice",
                        reason=str(e),
                    )
                )

        return Return.err(
            errors.invoice_number_exhausted(
                f"Invoice number was taken concurrently on all {attempts} attempts"
            )
        )

    async def _generate(self, command: GenerateCommandDTO) -> Result[GenerateResponseDTO]:
        """Steps 2-7 in one transaction; errors propagate to execute for rollback"""
        # Step 2: Fresh preview
        projection_result = await self.preview_invoice.project(command)
        if projection_result.is_err():
            return Return.err(projection_result.error)

        projection = projection_result.value
        preview = projection.preview

        if not preview.can_generate:
            return Return.err(
                Error(
                    code=errors.CANNOT_GENERATE,
                    message=preview.message,
                    reason=f"missing_rate_users={len(preview.missing_rate_users)}, "
                           f"entries_count={preview.entries_count}",
                )
            )

        if preview.entries_count == 0 or not projection.entry_ids:
            return Return.err(
                Error(
                    code=errors.CANNOT_GENERATE,
                    message="No unbilled entries found",
                    reason="entries_count=0",
                )
            )

        if command.tax_rate is not None:
            totals = calculate_totals(
                (item.amount for item in preview.line_items),
                Decimal(command.tax_rate),
            )
        else:
            totals = Totals(
                subtotal=preview.subtotal,
                tax_rate=preview.tax_rate,
                tax_amount=preview.tax_amount,
                total=preview.total,
            )

        now = datetime.utcnow()
        today = now.date()

        # Step 3: Invoice number
        invoice_number = await self.number_allocator.allocate(command.tenant_id, today)

        # Step 4: Invoice and items
        invoice = await self.invoice_repo.create(
            Invoice(
                tenant_id=command.tenant_id,
                client_id=command.client_id,
                project_id=command.project_id,
                invoice_number=invoice_number,
                status=InvoiceStatus.DRAFT,
                issue_date=today,
                due_date=today + timedelta(days=self.due_days),
                subtotal=totals.subtotal,
                tax_rate=totals.tax_rate,
                tax_amount=totals.tax_amount,
                total=totals.total,
                currency_code=self.currency_code,
                notes=command.notes,
                created_by=command.actor_id,
            )
        )

        for line in preview.line_items:
            await self.invoice_item_repo.create(
                InvoiceItem(
                    tenant_id=command.tenant_id,
                    invoice_id=invoice.id,
                    description=line.description,
                    quantity=line.quantity_hours,
                    unit_price=line.unit_price,
                    amount=line.amount,
                    minutes=line.quantity_minutes,
                    user_id=line.user_id,
                    task_id=line.task_id,
                )
            )

        # Step 5: Claim exactly the previewed entries
        expected = len(projection.entry_ids)
        claimed = await self.time_entry_repo.claim_entries(
            tenant_id=command.tenant_id,
            entry_ids=projection.entry_ids,
            invoice_id=invoice.id,
            billed_at=now,
        )

        if claimed != expected:
            await self.uow.rollback()
            logger.warning(
                "Billing conflict for client %s: expected to claim %d entries, claimed %d",
                command.client_id, expected, claimed,
            )
            return Return.err(
                Error(
                    code=errors.BILLING_CONFLICT,
                    message=f"Billing conflict: Some entries were already billed. "
                            f"Expected {expected} but updated {claimed}",
                    reason="Entries were claimed by a concurrent invoice generation",
                )
            )

        # Step 6: Commit transaction
        await self.uow.commit()

        logger.info(
            "Created invoice %s and linked %d time entries",
            invoice.invoice_number, claimed,
        )

        # Step 7: Build response
        return Return.ok(
            GenerateResponseDTO(
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
                total=invoice.total,
                billed_entries_count=claimed,
                message=SUCCESS_MESSAGE,
            )
        )


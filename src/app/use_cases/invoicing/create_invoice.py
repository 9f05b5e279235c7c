"""CreateInvoice Use Case

Creates a draft invoice from manually entered line items.
"""

import logging
from datetime import datetime
from decimal import Decimal

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.client_repository import ClientRepository
from src.app.repositories.project_repository import ProjectRepository
from src.app.repositories.invoice_repository import InvoiceRepository, InvoiceNumberTakenError
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from . import errors
from .dtos import CreateInvoiceCommandDTO, InvoiceResponseDTO
from .invoice_number import InvoiceNumberAllocator
from .mappers import to_invoice_response
from .totals import DEFAULT_TAX_RATE, calculate_totals, line_amount, validate_tax_rate

logger = logging.getLogger(__name__)


class CreateInvoice:
    """
    Use Case: Create draft invoice from manual line items

    Business Rules:
    1. Client must exist in the tenant; a project, if given, must belong to it
    2. due_date must not be before issue_date
    3. Item amount = round(quantity * unit_price, 2)
    4. Tax rate defaults to the configured rate
    5. Invoice number is allocated (INV-YYYYMMDD-NNNNNN)
    6. Invoice is created with status=DRAFT
    7. A number taken between allocation and insert is retried from step 2

    Flow:
    1. Validate dates and tax rate
    2. Check client and project
    3. Allocate invoice number
    4. Create invoice and items
    5. Commit transaction
    6. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        client_repo: ClientRepository,
        project_repo: ProjectRepository,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        number_allocator: InvoiceNumberAllocator,
        default_tax_rate: Decimal = DEFAULT_TAX_RATE,
        currency_code: str = "USD",
    ):
        self.uow = uow
        self.client_repo = client_repo
        self.project_repo = project_repo
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.number_allocator = number_allocator
        self.default_tax_rate = Decimal(default_tax_rate)
        self.currency_code = currency_code

    async def execute(self, command: CreateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice creation

        Args:
            command: CreateInvoiceCommandDTO with client, dates and items

        Returns:
            Result[InvoiceResponseDTO]: Created invoice or error
        """
        # Step 1: Validate dates and tax rate
        if command.due_date < command.issue_date:
            return Return.err(
                Error(
                    code=errors.INVALID_DATE_RANGE,
                    message="Due date must be on or after issue date",
                    reason=f"issue_date={command.issue_date}, due_date={command.due_date}",
                )
            )

        tax_rate = self.default_tax_rate if command.tax_rate is None else command.tax_rate
        reason = validate_tax_rate(tax_rate)
        if reason:
            return Return.err(errors.invalid_tax_rate(tax_rate, reason))

        attempts = self.number_allocator.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await self._create(command, Decimal(tax_rate))

            except InvoiceNumberTakenError as e:
                await self.uow.rollback()
                logger.warning(
                    "Invoice number %s was taken concurrently, retrying creation (attempt %d of %d)",
                    e.invoice_number, attempt, attempts,
                )

            except errors.InvoiceNumberExhaustedError as e:
                await self.uow.rollback()
                return Return.err(errors.invoice_number_exhausted(str(e)))

            except Exception as e:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CREATE_INVOICE_FAILED",
                        message="Failed to create invoice",
                        reason=str(e),
                    )
                )

        return Return.err(
            errors.invoice_number_exhausted(
                f"Invoice number was taken concurrently on all {attempts} attempts"
            )
        )

    async def _create(
        self, command: CreateInvoiceCommandDTO, tax_rate: Decimal
    ) -> Result[InvoiceResponseDTO]:
        # Step 2: Check client and project
        client = await self.client_repo.get_by_id(command.tenant_id, command.client_id)
        if not client:
            return Return.err(errors.client_not_found(command.client_id))

        if command.project_id:
            project = await self.project_repo.get_by_id(command.tenant_id, command.project_id)
            if not project:
                return Return.err(errors.project_not_found(command.project_id))
            if project.client_id != client.id:
                return Return.err(
                    Error(
                        code=errors.PROJECT_CLIENT_MISMATCH,
                        message="Project does not belong to specified client",
                        reason=f"project_id={project.id}, client_id={client.id}",
                    )
                )

        amounts = [line_amount(item.quantity, item.unit_price) for item in command.items]
        totals = calculate_totals(amounts, tax_rate)

        # Step 3: Allocate invoice number
        invoice_number = await self.number_allocator.allocate(
            command.tenant_id, datetime.utcnow().date()
        )

        # Step 4: Create invoice and items
        invoice = await self.invoice_repo.create(
            Invoice(
                tenant_id=command.tenant_id,
                client_id=client.id,
                project_id=command.project_id,
                invoice_number=invoice_number,
                status=InvoiceStatus.DRAFT,
                issue_date=command.issue_date,
                due_date=command.due_date,
                subtotal=totals.subtotal,
                tax_rate=totals.tax_rate,
                tax_amount=totals.tax_amount,
                total=totals.total,
                currency_code=command.currency_code or self.currency_code,
                notes=command.notes,
                created_by=command.actor_id,
            )
        )

        items = []
        for item, amount in zip(command.items, amounts):
            items.append(
                await self.invoice_item_repo.create(
                    InvoiceItem(
                        tenant_id=command.tenant_id,
                        invoice_id=invoice.id,
                        description=item.description,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        amount=amount,
                    )
                )
            )

        # Step 5: Commit transaction
        await self.uow.commit()

        logger.info("Created invoice %s with %d items", invoice.invoice_number, len(items))

        # Step 6: Build response
        return Return.ok(to_invoice_response(invoice, items))

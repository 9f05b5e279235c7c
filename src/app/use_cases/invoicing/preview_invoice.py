"""PreviewInvoice Use Case

Projects what a draft invoice would contain if it were generated now from
the client's unbilled time. Read-only: never writes, never claims entries.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from libs.result import Result, Return, Error
from src.app.repositories.client_repository import ClientRepository
from src.app.repositories.project_repository import ProjectRepository
from src.app.repositories.task_repository import TaskRepository
from src.app.repositories.time_entry_repository import TimeEntryRepository
from src.app.repositories.user_repository import UserRepository
from src.domain.client import Client
from . import errors
from .aggregation import aggregate, minutes_to_hours
from .dtos import PreviewCommandDTO, PreviewResponseDTO
from .rates import RateResolver
from .totals import DEFAULT_TAX_RATE, calculate_totals

logger = logging.getLogger(__name__)

NO_PROJECTS_MESSAGE = "No projects found for this client"
NO_ENTRIES_MESSAGE = "No unbilled time entries found for the specified period"
READY_MESSAGE = "Ready to generate invoice"


def missing_rates_message(count: int) -> str:
    return f"Cannot generate: {count} user(s) missing hourly rate"


@dataclass(frozen=True)
class InvoiceProjection:
    """A preview plus the exact entry ids it was computed from"""

    preview: PreviewResponseDTO
    entry_ids: List[str] = field(default_factory=list)


class PreviewInvoice:
    """
    Use Case: Preview invoice generation from unbilled time entries

    Business Rules:
    1. from_date must not be after to_date
    2. A specific project must exist and belong to the client
    3. No projects or no unbilled entries yield a zero preview, not an error
    4. can_generate is True iff every contributor has an hourly rate
    5. Identical inputs over unchanged data produce identical output

    Flow:
    1. Validate date range
    2. Load client and resolve project ids in scope
    3. Query unbilled entries
    4. Resolve rates, aggregate line items, compute totals
    5. Return preview
    """

    def __init__(
        self,
        client_repo: ClientRepository,
        project_repo: ProjectRepository,
        time_entry_repo: TimeEntryRepository,
        user_repo: UserRepository,
        task_repo: TaskRepository,
        default_tax_rate: Decimal = DEFAULT_TAX_RATE,
    ):
        self.client_repo = client_repo
        self.project_repo = project_repo
        self.time_entry_repo = time_entry_repo
        self.task_repo = task_repo
        self.rate_resolver = RateResolver(user_repo)
        self.default_tax_rate = Decimal(default_tax_rate)

    async def execute(self, command: PreviewCommandDTO) -> Result[PreviewResponseDTO]:
        """
        Execute invoice preview

        Args:
            command: PreviewCommandDTO with client, optional project, date range and options

        Returns:
            Result[PreviewResponseDTO]: Preview or error
        """
        try:
            result = await self.project(command)
            if result.is_err():
                return result
            return Return.ok(result.value.preview)

        except Exception as e:
            logger.exception("Invoice preview failed for client %s", command.client_id)
            return Return.err(
                Error(
                    code="PREVIEW_INVOICE_FAILED",
                    message="Failed to preview invoice",
                    reason=str(e),
                )
            )

    async def project(self, command: PreviewCommandDTO) -> Result[InvoiceProjection]:
        """
        Compute the preview and keep the ids of the entries behind it

        GenerateInvoice calls this directly so the claim targets exactly the
        entries that were priced.
        """
        logger.info(
            "Generating invoice preview for client: %s, from: %s, to: %s",
            command.client_id, command.from_date, command.to_date,
        )

        # Step 1: Validate date range
        if command.from_date > command.to_date:
            return Return.err(
                Error(
                    code=errors.INVALID_DATE_RANGE,
                    message="From date must be before or equal to to date",
                    reason=f"from_date={command.from_date}, to_date={command.to_date}",
                )
            )

        # Step 2: Client and projects in scope
        client = await self.client_repo.get_by_id(command.tenant_id, command.client_id)
        if not client:
            return Return.err(errors.client_not_found(command.client_id))

        project_name: Optional[str] = None
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
            project_ids = [project.id]
            project_name = project.name
        else:
            projects = await self.project_repo.get_by_client_id(command.tenant_id, client.id)
            project_ids = sorted(p.id for p in projects)

        if not project_ids:
            return Return.ok(self._empty(command, client, NO_PROJECTS_MESSAGE))

        # Step 3: Unbilled entries
        entries = await self.time_entry_repo.find_unbilled_entries(
            tenant_id=command.tenant_id,
            project_ids=project_ids,
            from_date=command.from_date,
            to_date=command.to_date,
            billable_only=command.billable_only,
        )
        if not entries:
            return Return.ok(self._empty(command, client, NO_ENTRIES_MESSAGE, project_name))

        logger.info("Found %d unbilled entries", len(entries))

        # Step 4: Rates, line items, totals
        rates = await self.rate_resolver.resolve(command.tenant_id, (e.user_id for e in entries))

        task_ids = sorted({e.task_id for e in entries if e.task_id})
        tasks = {}
        if task_ids:
            tasks = {t.id: t for t in await self.task_repo.get_by_ids(command.tenant_id, task_ids)}

        line_items = aggregate(
            entries,
            command.group_by,
            rates,
            tasks=tasks,
            include_descriptions=command.include_descriptions,
        )
        totals = calculate_totals((item.amount for item in line_items), self.default_tax_rate)
        total_minutes = sum(e.minutes for e in entries)

        can_generate = rates.can_bill
        message = READY_MESSAGE if can_generate else missing_rates_message(len(rates.missing))

        preview = PreviewResponseDTO(
            client_id=client.id,
            client_name=client.name,
            project_id=command.project_id,
            project_name=project_name,
            from_date=command.from_date,
            to_date=command.to_date,
            total_minutes=total_minutes,
            total_hours=minutes_to_hours(total_minutes),
            subtotal=totals.subtotal,
            tax_rate=totals.tax_rate,
            tax_amount=totals.tax_amount,
            total=totals.total,
            line_items=line_items,
            missing_rate_users=rates.missing,
            entries_count=len(entries),
            can_generate=can_generate,
            message=message,
        )
        return Return.ok(InvoiceProjection(preview=preview, entry_ids=[e.id for e in entries]))

    def _empty(
        self,
        command: PreviewCommandDTO,
        client: Client,
        message: str,
        project_name: Optional[str] = None,
    ) -> InvoiceProjection:
        zero = Decimal("0.00")
        preview = PreviewResponseDTO(
            client_id=client.id,
            client_name=client.name,
            project_id=command.project_id,
            project_name=project_name,
            from_date=command.from_date,
            to_date=command.to_date,
            total_minutes=0,
            total_hours=zero,
            subtotal=zero,
            tax_rate=calculate_totals([], self.default_tax_rate).tax_rate,
            tax_amount=zero,
            total=zero,
            entries_count=0,
            can_generate=False,
            message=message,
        )
        return InvoiceProjection(preview=preview)

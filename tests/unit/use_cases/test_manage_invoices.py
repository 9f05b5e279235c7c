"""Unit tests for manual invoice management use cases

Tests cover:
- CreateInvoice
- UpdateInvoice (replace items, lock)
- DeleteInvoice (soft delete, release entries)
- GetInvoice / ListInvoices
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from src.app.repositories.invoice_repository import InvoiceNumberTakenError
from src.app.use_cases.invoicing.create_invoice import CreateInvoice
from src.app.use_cases.invoicing.delete_invoice import DeleteInvoice
from src.app.use_cases.invoicing.dtos import (
    CreateInvoiceCommandDTO,
    InvoiceItemInputDTO,
    ListInvoicesQueryDTO,
    UpdateInvoiceCommandDTO,
)
from src.app.use_cases.invoicing.get_invoice import GetInvoice
from src.app.use_cases.invoicing.invoice_number import InvoiceNumberAllocator
from src.app.use_cases.invoicing.list_invoices import ListInvoices
from src.app.use_cases.invoicing.update_invoice import UpdateInvoice
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_item import InvoiceItem


def item(description, quantity, unit_price):
    return InvoiceItemInputDTO(
        description=description,
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
    )


def stored_item(invoice_id, amount):
    return InvoiceItem(
        tenant_id="tenant_123",
        invoice_id=invoice_id,
        description="Consulting",
        quantity=Decimal("1.00"),
        unit_price=Decimal(amount),
        amount=Decimal(amount),
    )


@pytest.fixture
def create_use_case(
    mock_uow, mock_client_repo, mock_project_repo, mock_invoice_repo, mock_invoice_item_repo
):
    return CreateInvoice(
        uow=mock_uow,
        client_repo=mock_client_repo,
        project_repo=mock_project_repo,
        invoice_repo=mock_invoice_repo,
        invoice_item_repo=mock_invoice_item_repo,
        number_allocator=InvoiceNumberAllocator(mock_invoice_repo),
    )


@pytest.fixture
def update_use_case(mock_uow, mock_invoice_repo, mock_invoice_item_repo):
    return UpdateInvoice(
        uow=mock_uow,
        invoice_repo=mock_invoice_repo,
        invoice_item_repo=mock_invoice_item_repo,
    )


@pytest.fixture
def delete_use_case(mock_uow, mock_invoice_repo, mock_invoice_item_repo, mock_time_entry_repo):
    return DeleteInvoice(
        uow=mock_uow,
        invoice_repo=mock_invoice_repo,
        invoice_item_repo=mock_invoice_item_repo,
        time_entry_repo=mock_time_entry_repo,
    )


@pytest.fixture
def create_command():
    return CreateInvoiceCommandDTO(
        tenant_id="tenant_123",
        actor_id="manager_1",
        client_id="client_1",
        issue_date=date(2024, 3, 1),
        due_date=date(2024, 3, 16),
        items=[item("Consulting", "1.5", "100"), item("Support", "0.25", "40.10")],
    )


@pytest.mark.asyncio
class TestCreateInvoice:

    async def test_create_draft(
        self, create_use_case, create_command, mock_invoice_repo, mock_invoice_item_repo, mock_uow
    ):
        """
        Given: Two manual items
        When: create is called
        Then: Item amounts are rounded and totals use the default tax rate
        """
        result = await create_use_case.execute(create_command)

        assert result.is_ok()
        invoice = result.value
        assert invoice.status == InvoiceStatus.DRAFT
        # 1.5 * 100 = 150.00, 0.25 * 40.10 = 10.025 -> 10.03
        assert [i.amount for i in invoice.items] == [Decimal("150.00"), Decimal("10.03")]
        assert invoice.subtotal == Decimal("160.03")
        assert invoice.tax_rate == Decimal("18.00")
        assert invoice.tax_amount == Decimal("28.81")
        assert invoice.total == Decimal("188.84")
        assert invoice.created_by == "manager_1"
        assert mock_invoice_item_repo.create.await_count == 2
        mock_uow.commit.assert_called_once()

    async def test_due_before_issue(self, create_use_case, create_command, mock_invoice_repo):
        command = create_command.model_copy(update={"due_date": date(2024, 2, 1)})

        result = await create_use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_DATE_RANGE"
        mock_invoice_repo.create.assert_not_called()

    async def test_client_not_found(self, create_use_case, create_command, mock_client_repo):
        mock_client_repo.get_by_id.return_value = None

        result = await create_use_case.execute(create_command)

        assert result.is_err()
        assert result.error.code == "CLIENT_NOT_FOUND"

    async def test_project_not_found(self, create_use_case, create_command, mock_project_repo):
        mock_project_repo.get_by_id.return_value = None
        command = create_command.model_copy(update={"project_id": "missing"})

        result = await create_use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "PROJECT_NOT_FOUND"

    async def test_invalid_tax_rate(self, create_use_case, create_command):
        command = create_command.model_copy(update={"tax_rate": Decimal("-5")})

        result = await create_use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_TAX_RATE"

    async def test_number_taken_at_insert_is_retried(
        self, create_use_case, create_command, mock_invoice_repo, mock_invoice_item_repo, mock_uow
    ):
        """
        Given: Another request inserts the allocated number first
        When: create is called
        Then: The first attempt is rolled back and the second creates the invoice
        """
        numbers = []

        async def taken_once(invoice):
            numbers.append(invoice.invoice_number)
            if len(numbers) == 1:
                raise InvoiceNumberTakenError(invoice.invoice_number)
            return invoice

        mock_invoice_repo.create.side_effect = taken_once

        result = await create_use_case.execute(create_command)

        assert result.is_ok()
        assert result.value.invoice_number == numbers[1]
        assert mock_invoice_item_repo.create.await_count == 2
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
class TestUpdateInvoice:

    async def test_replace_items_recomputes_totals(
        self, update_use_case, mock_invoice_repo, mock_invoice_item_repo, make_invoice, mock_uow
    ):
        invoice = make_invoice(InvoiceStatus.DRAFT)
        mock_invoice_repo.get_by_id.return_value = invoice
        mock_invoice_item_repo.get_by_invoice_id.return_value = [stored_item(invoice.id, "200.00")]

        result = await update_use_case.execute(
            UpdateInvoiceCommandDTO(
                tenant_id="tenant_123",
                invoice_id=invoice.id,
                items=[item("Consulting", "2", "100")],
            )
        )

        assert result.is_ok()
        mock_invoice_item_repo.soft_delete_by_invoice_id.assert_awaited_once()
        created = mock_invoice_item_repo.create.call_args.args[0]
        assert created.amount == Decimal("200.00")
        assert invoice.subtotal == Decimal("200.00")
        assert invoice.tax_amount == Decimal("36.00")
        assert invoice.total == Decimal("236.00")
        mock_uow.commit.assert_called_once()

    async def test_tax_rate_change_recomputes_totals(
        self, update_use_case, mock_invoice_repo, mock_invoice_item_repo, make_invoice
    ):
        invoice = make_invoice(InvoiceStatus.SENT)
        mock_invoice_repo.get_by_id.return_value = invoice
        mock_invoice_item_repo.get_by_invoice_id.return_value = [
            stored_item(invoice.id, "150.00"),
            stored_item(invoice.id, "160.00"),
        ]

        result = await update_use_case.execute(
            UpdateInvoiceCommandDTO(
                tenant_id="tenant_123", invoice_id=invoice.id, tax_rate=Decimal("0")
            )
        )

        assert result.is_ok()
        assert invoice.tax_amount == Decimal("0.00")
        assert invoice.total == Decimal("310.00")
        mock_invoice_item_repo.soft_delete_by_invoice_id.assert_not_called()

    async def test_header_only_keeps_totals(
        self, update_use_case, mock_invoice_repo, make_invoice
    ):
        invoice = make_invoice(InvoiceStatus.DRAFT)
        mock_invoice_repo.get_by_id.return_value = invoice

        result = await update_use_case.execute(
            UpdateInvoiceCommandDTO(
                tenant_id="tenant_123",
                invoice_id=invoice.id,
                notes="Thanks!",
                due_date=invoice.issue_date + timedelta(days=30),
            )
        )

        assert result.is_ok()
        assert invoice.notes == "Thanks!"
        assert invoice.total == Decimal("365.80")

    @pytest.mark.parametrize("status", [InvoiceStatus.PAID, InvoiceStatus.CANCELLED])
    async def test_locked_statuses(
        self, status, update_use_case, mock_invoice_repo, mock_invoice_item_repo, make_invoice
    ):
        mock_invoice_repo.get_by_id.return_value = make_invoice(status)

        result = await update_use_case.execute(
            UpdateInvoiceCommandDTO(
                tenant_id="tenant_123", invoice_id="invoice_1", items=[item("X", "1", "1")]
            )
        )

        assert result.is_err()
        assert result.error.code == "INVOICE_LOCKED"
        assert result.error.message == f"Cannot update invoice with status {status.value}"
        mock_invoice_item_repo.soft_delete_by_invoice_id.assert_not_called()

    async def test_due_before_issue(self, update_use_case, mock_invoice_repo, make_invoice):
        invoice = make_invoice(InvoiceStatus.DRAFT)
        mock_invoice_repo.get_by_id.return_value = invoice

        result = await update_use_case.execute(
            UpdateInvoiceCommandDTO(
                tenant_id="tenant_123",
                invoice_id=invoice.id,
                due_date=invoice.issue_date - timedelta(days=1),
            )
        )

        assert result.is_err()
        assert result.error.code == "INVALID_DATE_RANGE"

    async def test_not_found(self, update_use_case):
        result = await update_use_case.execute(
            UpdateInvoiceCommandDTO(tenant_id="tenant_123", invoice_id="missing")
        )

        assert result.is_err()
        assert result.error.code == "INVOICE_NOT_FOUND"


@pytest.mark.asyncio
class TestDeleteInvoice:

    async def test_delete_releases_entries(
        self, delete_use_case, mock_invoice_repo, mock_invoice_item_repo,
        mock_time_entry_repo, make_invoice, mock_uow,
    ):
        """
        Given: A DRAFT invoice that claimed 4 entries
        When: It is deleted
        Then: Invoice and items are soft-deleted and the 4 entries are released
        """
        invoice = make_invoice(InvoiceStatus.DRAFT)
        mock_invoice_repo.get_by_id.return_value = invoice
        mock_time_entry_repo.release_entries.return_value = 4

        result = await delete_use_case.execute("tenant_123", invoice.id)

        assert result.is_ok()
        assert result.value.released_entries_count == 4
        assert invoice.deleted_at is not None
        mock_invoice_item_repo.soft_delete_by_invoice_id.assert_awaited_once()
        mock_time_entry_repo.release_entries.assert_awaited_once_with("tenant_123", invoice.id)
        mock_uow.commit.assert_called_once()

    async def test_paid_invoice_cannot_be_deleted(
        self, delete_use_case, mock_invoice_repo, mock_time_entry_repo, make_invoice, mock_uow
    ):
        mock_invoice_repo.get_by_id.return_value = make_invoice(InvoiceStatus.PAID)

        result = await delete_use_case.execute("tenant_123", "invoice_1")

        assert result.is_err()
        assert result.error.code == "CANNOT_DELETE_PAID_INVOICE"
        assert result.error.message == "Cannot delete paid invoices"
        mock_time_entry_repo.release_entries.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_release_failure_rolls_back(
        self, delete_use_case, mock_invoice_repo, mock_time_entry_repo, make_invoice, mock_uow
    ):
        mock_invoice_repo.get_by_id.return_value = make_invoice(InvoiceStatus.CANCELLED)
        mock_time_entry_repo.release_entries.side_effect = RuntimeError("lock timeout")

        result = await delete_use_case.execute("tenant_123", "invoice_1")

        assert result.is_err()
        assert result.error.code == "DELETE_INVOICE_FAILED"
        mock_uow.rollback.assert_called_once()


@pytest.mark.asyncio
class TestReadInvoices:

    async def test_get_invoice_with_items(
        self, mock_invoice_repo, mock_invoice_item_repo, make_invoice
    ):
        invoice = make_invoice(InvoiceStatus.SENT)
        mock_invoice_repo.get_by_id.return_value = invoice
        mock_invoice_item_repo.get_by_invoice_id.return_value = [stored_item(invoice.id, "310.00")]

        result = await GetInvoice(mock_invoice_repo, mock_invoice_item_repo).execute(
            "tenant_123", invoice.id
        )

        assert result.is_ok()
        assert result.value.invoice_number == "INV-20240131-482913"
        assert len(result.value.items) == 1

    async def test_get_missing_invoice(self, mock_invoice_repo, mock_invoice_item_repo):
        result = await GetInvoice(mock_invoice_repo, mock_invoice_item_repo).execute(
            "tenant_123", "missing"
        )

        assert result.is_err()
        assert result.error.code == "INVOICE_NOT_FOUND"
        assert result.error.message == "Invoice with ID missing not found"

    async def test_list_overdue_only(self, mock_invoice_repo, make_invoice):
        overdue = make_invoice(InvoiceStatus.SENT, id="inv_old", due_date=date(2000, 1, 1))
        current = make_invoice(InvoiceStatus.SENT, id="inv_new", due_date=date(2999, 1, 1))
        mock_invoice_repo.list_by_tenant.return_value = [current, overdue]

        result = await ListInvoices(mock_invoice_repo).execute(
            ListInvoicesQueryDTO(tenant_id="tenant_123", overdue_only=True)
        )

        assert result.is_ok()
        assert [i.id for i in result.value] == ["inv_old"]
        assert result.value[0].is_overdue is True

    async def test_list_passes_filters(self, mock_invoice_repo):
        await ListInvoices(mock_invoice_repo).execute(
            ListInvoicesQueryDTO(
                tenant_id="tenant_123", client_id="client_1", status=InvoiceStatus.DRAFT
            )
        )

        mock_invoice_repo.list_by_tenant.assert_awaited_once_with(
            tenant_id="tenant_123",
            client_id="client_1",
            project_id=None,
            status=InvoiceStatus.DRAFT,
            issued_from=None,
            issued_to=None,
        )

"""Unit tests for ApplyPaymentEvent use case"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.invoicing.apply_payment_event import (
    PAYMENT_WEBHOOK_ACTOR,
    ApplyPaymentEvent,
)
from src.app.use_cases.invoicing.dtos import PaymentEventCommandDTO
from src.app.use_cases.invoicing.update_invoice_status import UpdateInvoiceStatus
from src.domain.invoice import InvoiceStatus


@pytest.fixture
def mock_notification_service():
    service = MagicMock()
    service.send_status_change = AsyncMock(return_value=True)
    return service


@pytest.fixture
def payment_use_case(
    mock_uow, mock_invoice_repo, mock_invoice_item_repo, mock_notification_service
):
    return ApplyPaymentEvent(
        invoice_repo=mock_invoice_repo,
        update_invoice_status=UpdateInvoiceStatus(
            mock_uow, mock_invoice_repo, mock_invoice_item_repo, mock_notification_service
        ),
    )


def event(name):
    return PaymentEventCommandDTO(tenant_id="tenant_123", invoice_id="invoice_1", event=name)


@pytest.mark.asyncio
class TestApplyPaymentEvent:

    @pytest.mark.parametrize(
        "name,start,expected",
        [
            ("payment.captured", InvoiceStatus.SENT, InvoiceStatus.PAID),
            ("invoice.paid", InvoiceStatus.OVERDUE, InvoiceStatus.PAID),
            ("invoice.expired", InvoiceStatus.SENT, InvoiceStatus.OVERDUE),
            ("invoice.cancelled", InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED),
        ],
    )
    async def test_known_events(
        self, name, start, expected, payment_use_case, mock_invoice_repo, make_invoice,
        mock_notification_service,
    ):
        mock_invoice_repo.get_by_id.return_value = make_invoice(start)

        result = await payment_use_case.execute(event(name))

        assert result.is_ok()
        assert result.value.applied is True
        assert result.value.status == expected
        actor = mock_notification_service.send_status_change.call_args.args[3]
        assert actor == PAYMENT_WEBHOOK_ACTOR

    async def test_unknown_event_is_ignored(self, payment_use_case, mock_invoice_repo):
        result = await payment_use_case.execute(event("customer.created"))

        assert result.is_ok()
        assert result.value.applied is False
        assert result.value.status is None
        mock_invoice_repo.get_by_id.assert_not_called()

    async def test_redelivery_is_a_no_op(
        self, payment_use_case, mock_invoice_repo, make_invoice, mock_uow
    ):
        mock_invoice_repo.get_by_id.return_value = make_invoice(InvoiceStatus.PAID)

        result = await payment_use_case.execute(event("payment.captured"))

        assert result.is_ok()
        assert result.value.applied is False
        assert result.value.status == InvoiceStatus.PAID
        mock_uow.commit.assert_not_called()

    async def test_invalid_transition_is_reported(
        self, payment_use_case, mock_invoice_repo, make_invoice
    ):
        mock_invoice_repo.get_by_id.return_value = make_invoice(InvoiceStatus.CANCELLED)

        result = await payment_use_case.execute(event("payment.captured"))

        assert result.is_err()
        assert result.error.code == "INVALID_STATUS_TRANSITION"

    async def test_invoice_not_found(self, payment_use_case):
        result = await payment_use_case.execute(event("invoice.paid"))

        assert result.is_err()
        assert result.error.code == "INVOICE_NOT_FOUND"

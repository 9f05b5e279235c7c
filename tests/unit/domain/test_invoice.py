"""Unit tests for Invoice domain entity and status state machine"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from src.domain.invoice import (
    ALLOWED_TRANSITIONS,
    Invoice,
    InvoiceStatus,
    LOCKED_STATUSES,
    TERMINAL_STATUSES,
    can_transition,
)

ALLOWED_PAIRS = {
    (InvoiceStatus.DRAFT, InvoiceStatus.SENT),
    (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED),
    (InvoiceStatus.SENT, InvoiceStatus.PAID),
    (InvoiceStatus.SENT, InvoiceStatus.OVERDUE),
    (InvoiceStatus.SENT, InvoiceStatus.CANCELLED),
    (InvoiceStatus.OVERDUE, InvoiceStatus.PAID),
    (InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED),
}

ALL_PAIRS = [(a, b) for a in InvoiceStatus for b in InvoiceStatus]


def build_invoice(status=InvoiceStatus.DRAFT, due_date=date(2024, 2, 15)):
    return Invoice(
        tenant_id="tenant_abc",
        client_id="client_1",
        invoice_number="INV-20240131-100000",
        status=status,
        issue_date=date(2024, 1, 31),
        due_date=due_date,
        subtotal=Decimal("100.00"),
        tax_rate=Decimal("18.00"),
        tax_amount=Decimal("18.00"),
        total=Decimal("118.00"),
    )


class TestTransitionTable:
    """Test the status adjacency table"""

    @pytest.mark.parametrize("current,target", ALL_PAIRS)
    def test_every_pair(self, current, target):
        """Only listed pairs and self-transitions are allowed"""
        expected = current == target or (current, target) in ALLOWED_PAIRS
        assert can_transition(current, target) is expected

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {InvoiceStatus.PAID, InvoiceStatus.CANCELLED}

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(InvoiceStatus)

    def test_locked_statuses(self):
        assert LOCKED_STATUSES == {InvoiceStatus.PAID, InvoiceStatus.CANCELLED}


class TestInvoiceOverdue:
    """Test derived is_overdue"""

    def test_sent_past_due_is_overdue(self):
        invoice = build_invoice(InvoiceStatus.SENT)
        assert invoice.is_overdue(today=date(2024, 2, 16)) is True

    def test_sent_on_due_date_is_not_overdue(self):
        invoice = build_invoice(InvoiceStatus.SENT)
        assert invoice.is_overdue(today=date(2024, 2, 15)) is False

    @pytest.mark.parametrize(
        "status",
        [InvoiceStatus.DRAFT, InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED],
    )
    def test_only_sent_invoices_are_overdue(self, status):
        invoice = build_invoice(status)
        assert invoice.is_overdue(today=date(2024, 3, 1)) is False


class TestApplyStatus:
    """Test lifecycle timestamps"""

    def test_sent_stamps_sent_at(self):
        invoice = build_invoice()
        now = datetime(2024, 2, 1, 9, 0, 0)

        invoice.apply_status(InvoiceStatus.SENT, now)

        assert invoice.status == InvoiceStatus.SENT
        assert invoice.sent_at == now
        assert invoice.paid_at is None

    def test_paid_stamps_paid_at(self):
        invoice = build_invoice(InvoiceStatus.SENT)
        now = datetime(2024, 2, 10, 12, 0, 0)

        invoice.apply_status(InvoiceStatus.PAID, now)

        assert invoice.paid_at == now

    def test_cancelled_stamps_cancelled_at(self):
        invoice = build_invoice()
        now = datetime(2024, 2, 2, 8, 30, 0)

        invoice.apply_status(InvoiceStatus.CANCELLED, now)

        assert invoice.cancelled_at == now

    def test_timestamp_is_not_overwritten(self):
        """Re-entering SENT (e.g. after OVERDUE) keeps the first sent_at"""
        invoice = build_invoice()
        first = datetime(2024, 2, 1, 9, 0, 0)
        invoice.apply_status(InvoiceStatus.SENT, first)

        invoice.apply_status(InvoiceStatus.SENT, datetime(2024, 2, 5, 9, 0, 0))

        assert invoice.sent_at == first

    def test_overdue_sets_no_timestamp(self):
        invoice = build_invoice(InvoiceStatus.SENT)

        invoice.apply_status(InvoiceStatus.OVERDUE, datetime(2024, 3, 1))

        assert invoice.status == InvoiceStatus.OVERDUE
        assert invoice.sent_at is None
        assert invoice.paid_at is None
        assert invoice.cancelled_at is None

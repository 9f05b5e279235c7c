"""Unit tests for TimeEntry domain entity"""

from datetime import date

from src.domain.time_entry import TimeEntry
from src.domain.user import User


def build_entry(hours=3, invoice_id=None):
    return TimeEntry(
        tenant_id="tenant_abc",
        user_id="user_a",
        project_id="project_1",
        work_date=date(2024, 1, 10),
        hours=hours,
        invoice_id=invoice_id,
    )


class TestTimeEntry:

    def test_minutes_from_whole_hours(self):
        assert build_entry(hours=3).minutes == 180

    def test_new_entry_is_unbilled(self):
        entry = build_entry()
        assert entry.is_billed is False
        assert entry.billable is True

    def test_claimed_entry_is_billed(self):
        assert build_entry(invoice_id="invoice_1").is_billed is True

    def test_entries_get_distinct_ids(self):
        assert build_entry().id != build_entry().id


class TestUserBillingRate:

    def test_missing_rate_is_unbillable(self):
        user = User(tenant_id="tenant_abc", name="Cara", email="cara@example.com")
        assert user.has_billing_rate is False

    def test_zero_rate_is_unbillable(self):
        user = User(tenant_id="tenant_abc", name="Cara", email="cara@example.com", hourly_rate=0)
        assert user.has_billing_rate is False

    def test_positive_rate_is_billable(self):
        user = User(tenant_id="tenant_abc", name="Ann", email="ann@example.com", hourly_rate=50)
        assert user.has_billing_rate is True

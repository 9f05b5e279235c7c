"""Unit tests for RateResolver"""

import pytest
from decimal import Decimal

from src.app.use_cases.invoicing.rates import (
    MISSING_RATE_MESSAGE,
    UNKNOWN_USER_NAME,
    RateResolver,
)


@pytest.mark.asyncio
class TestRateResolver:

    async def test_all_rates_present(self, mock_user_repo, make_user):
        mock_user_repo.get_by_ids.return_value = [
            make_user("user_a", "Ann", "50"),
            make_user("user_b", "Bob", "80"),
        ]

        resolution = await RateResolver(mock_user_repo).resolve(
            "tenant_123", ["user_b", "user_a", "user_a"]
        )

        assert resolution.can_bill is True
        assert resolution.rate_for("user_a") == Decimal("50")
        assert resolution.rate_for("user_b") == Decimal("80")
        assert resolution.name_for("user_b") == "Bob"
        mock_user_repo.get_by_ids.assert_awaited_once_with("tenant_123", ["user_a", "user_b"])

    async def test_missing_and_zero_rates_are_reported(self, mock_user_repo, make_user):
        mock_user_repo.get_by_ids.return_value = [
            make_user("user_a", "Ann", "50"),
            make_user("user_c", "Cara", None),
            make_user("user_z", "Zed", "0"),
        ]

        resolution = await RateResolver(mock_user_repo).resolve(
            "tenant_123", ["user_a", "user_c", "user_z"]
        )

        assert resolution.can_bill is False
        assert [m.name for m in resolution.missing] == ["Cara", "Zed"]
        assert resolution.missing[0].email == "user_c@example.com"
        assert resolution.missing[0].message == MISSING_RATE_MESSAGE
        assert resolution.rate_for("user_c") == Decimal("0.00")

    async def test_unknown_user_is_missing(self, mock_user_repo):
        mock_user_repo.get_by_ids.return_value = []

        resolution = await RateResolver(mock_user_repo).resolve("tenant_123", ["ghost"])

        assert resolution.can_bill is False
        assert resolution.missing[0].user_id == "ghost"
        assert resolution.missing[0].name == UNKNOWN_USER_NAME
        assert resolution.name_for("ghost") == UNKNOWN_USER_NAME

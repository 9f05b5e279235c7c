"""Rate Resolver

Looks up each contributor's hourly rate and reports contributors that
cannot be billed. Preview and generation both go through here so they
always agree on whether an invoice can be generated.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List

from src.app.repositories.user_repository import UserRepository
from src.domain.user import User
from .dtos import MissingRateUserDTO

MISSING_RATE_MESSAGE = "Hourly rate not configured"
UNKNOWN_USER_NAME = "Unknown user"


@dataclass(frozen=True)
class RateResolution:
    users: Dict[str, User] = field(default_factory=dict)
    rates: Dict[str, Decimal] = field(default_factory=dict)
    missing: List[MissingRateUserDTO] = field(default_factory=list)

    @property
    def can_bill(self) -> bool:
        return not self.missing

    def rate_for(self, user_id: str) -> Decimal:
        return self.rates.get(user_id, Decimal("0.00"))

    def name_for(self, user_id: str) -> str:
        user = self.users.get(user_id)
        return user.name if user else UNKNOWN_USER_NAME


class RateResolver:
    """Read-only lookup of contributor rates"""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def resolve(self, tenant_id: str, user_ids: Iterable[str]) -> RateResolution:
        wanted = sorted(set(user_ids))
        users = {
            user.id: user
            for user in await self.user_repo.get_by_ids(tenant_id, wanted)
        }

        rates: Dict[str, Decimal] = {}
        missing: List[MissingRateUserDTO] = []
        for user_id in wanted:
            user = users.get(user_id)
            if user is not None and user.has_billing_rate:
                rates[user_id] = Decimal(user.hourly_rate)
                continue
            missing.append(
                MissingRateUserDTO(
                    user_id=user_id,
                    name=user.name if user else UNKNOWN_USER_NAME,
                    email=user.email if user else None,
                    message=MISSING_RATE_MESSAGE,
                )
            )

        missing.sort(key=lambda m: (m.name, m.user_id))
        return RateResolution(users=users, rates=rates, missing=missing)

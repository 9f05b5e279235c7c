"""Invoice Number Allocator

Numbers look like INV-{yyyyMMdd}-{6 random digits}. Uniqueness is per tenant
and is checked against the store, so no shared counter is needed across
service instances; the unique constraint on (tenant_id, invoice_number)
remains the final guard.
"""

import logging
import random
from datetime import date
from typing import Optional

from src.app.repositories.invoice_repository import InvoiceRepository
from .errors import InvoiceNumberExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


def format_invoice_number(on_date: date, suffix: int) -> str:
    return f"INV-{on_date:%Y%m%d}-{suffix:06d}"


class InvoiceNumberAllocator:

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None,
    ):
        self.invoice_repo = invoice_repo
        self.max_attempts = max_attempts
        self.rng = rng or random.SystemRandom()

    async def allocate(self, tenant_id: str, on_date: date) -> str:
        """
        Find an invoice number not yet used by the tenant

        Raises:
            InvoiceNumberExhaustedError: every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = format_invoice_number(on_date, self.rng.randint(100000, 999999))
            if not await self.invoice_repo.exists_by_invoice_number(tenant_id, candidate):
                return candidate
            logger.debug(
                "Invoice number collision for tenant %s on attempt %d: %s",
                tenant_id, attempt, candidate,
            )

        logger.error(
            "Invoice number allocation exhausted for tenant %s after %d attempts",
            tenant_id, self.max_attempts,
        )
        raise InvoiceNumberExhaustedError(self.max_attempts)

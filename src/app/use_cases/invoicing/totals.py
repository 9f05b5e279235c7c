"""Money math for invoices

All amounts are Decimals at 2-digit currency scale, rounded half-up.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional

CURRENCY_SCALE = Decimal("0.01")
HUNDRED = Decimal("100")
DEFAULT_TAX_RATE = Decimal("18.00")
MAX_TAX_RATE = Decimal("100")


def round_money(value) -> Decimal:
    """Round to 2 decimals, half-up"""
    return Decimal(value).quantize(CURRENCY_SCALE, rounding=ROUND_HALF_UP)


def line_amount(quantity: Decimal, unit_price: Decimal) -> Decimal:
    """amount = round(quantity * unit_price, 2)"""
    return round_money(Decimal(quantity) * Decimal(unit_price))


def validate_tax_rate(tax_rate) -> Optional[str]:
    """
    Check a caller-supplied tax rate

    Returns:
        None if valid, otherwise the reason it was rejected
    """
    try:
        rate = Decimal(tax_rate)
    except (InvalidOperation, TypeError, ValueError):
        return "Tax rate must be a decimal number"
    if not rate.is_finite():
        return "Tax rate must be a finite number"
    if rate < 0 or rate > MAX_TAX_RATE:
        return "Tax rate must be between 0 and 100"
    if rate != rate.quantize(CURRENCY_SCALE, rounding=ROUND_HALF_UP):
        return "Tax rate must have at most 2 decimal places"
    return None


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


def calculate_totals(amounts: Iterable[Decimal], tax_rate: Decimal = DEFAULT_TAX_RATE) -> Totals:
    """
    Sum already-rounded line amounts and apply a flat tax rate

    subtotal   = sum(amounts)
    tax_amount = round(subtotal * tax_rate / 100, 2)
    total      = round(subtotal + tax_amount, 2)
    """
    subtotal = round_money(sum((Decimal(a) for a in amounts), Decimal("0")))
    rate = round_money(tax_rate)
    tax_amount = round_money(subtotal * rate / HUNDRED)
    total = round_money(subtotal + tax_amount)
    return Totals(subtotal=subtotal, tax_rate=rate, tax_amount=tax_amount, total=total)

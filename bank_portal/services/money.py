"""Decimal money helpers shared by the ledger services."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from bank_portal.core.errors import ValidationError

TWO_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")
ZERO = Decimal("0.00")

# Balances at or below this are treated as paid off / fully settled
EPSILON = Decimal("0.01")


def round_money(amount) -> Decimal:
    """Round to cents, half up. ``None`` becomes zero."""
    if amount is None:
        return ZERO
    return Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _to_decimal(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def parse_amount(value, field: str) -> Decimal:
    """Optional amount: absent or non-numeric input counts as zero, negatives are rejected."""
    amount = _to_decimal(value)
    if amount is None:
        return ZERO
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return round_money(amount)


def require_amount(value, field: str) -> Decimal:
    """Required non-negative amount."""
    amount = _to_decimal(value)
    if amount is None:
        raise ValidationError(f"A valid {field} is required")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return round_money(amount)


def percent_to_rate(percent) -> Decimal:
    """Convert a percentage (``1.5``) to the stored monthly fraction (``0.015``)."""
    value = _to_decimal(percent)
    if value is None:
        raise ValidationError("A valid interest_rate is required")
    if value < 0:
        raise ValidationError("interest_rate cannot be negative")
    return (value / Decimal("100")).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def format_money(amount) -> str:
    return f"{round_money(amount):,.2f}"

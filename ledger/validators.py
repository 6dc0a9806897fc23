"""Validation helpers shared across the ledger services."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Iterable, Optional

from .exceptions import ValidationError
from .models import TransactionType, parse_date

TRANSACTION_TYPES = {member.value for member in TransactionType}

# Largest decimal exponent a double can hold; anything above is not a finite number there.
MAX_AMOUNT_EXPONENT = 308


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    with localcontext() as ctx:
        # Room for every integer digit plus the two fraction digits.
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a finite, non-zero Decimal with two fraction digits.

    The sign is kept as given; callers normalise it against the transaction type.
    """
    if raw is None or isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount and amount.adjusted() > MAX_AMOUNT_EXPONENT:
        raise ValidationError(f"{field} is too large")

    try:
        amount = _quantize_two_decimals(amount)
    except InvalidOperation as exc:
        raise ValidationError(f"{field} must be a finite number") from exc
    if amount == 0:
        raise ValidationError(f"{field} must not be zero")
    return amount


def validate_required_str(value: object, field: str, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if max_length is not None and len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_date(value: object, field: str) -> date:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} cannot be empty")
    try:
        return parse_date(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD form") from exc


def validate_enum(value: object, field: str, allowed: Iterable[str]) -> str:
    if isinstance(value, TransactionType):
        value = value.value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    if not canonical:
        raise ValidationError(f"{field} cannot be empty")
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")
    return canonical


def signed_amount(amount: Decimal, transaction_type: TransactionType) -> Decimal:
    """Return ``amount`` with the sign implied by ``transaction_type``."""
    magnitude = abs(amount)
    return magnitude if transaction_type is TransactionType.INCOME else -magnitude

"""Sanitizer for provider-extracted transfer arguments. Pure functions, no I/O."""

import re
from decimal import Decimal, InvalidOperation

from arcflow.domain.exceptions import DomainValidationError
from arcflow.domain.models.intent import TransactionIntent

_AMOUNT_NOISE = re.compile(r"[^0-9.]")
# Below this adjusted exponent str(Decimal) switches to scientific notation.
_MIN_ADJUSTED_EXPONENT = -6


def sanitize_recipient(raw_recipient: str) -> str:
    """
    Lowercase-normalize the recipient. No checksum validation: a mixed-case address
    with a bad checksum is accepted in lowercase form, and the allow-list and caps
    bound the risk.
    """
    recipient = (raw_recipient or "").strip().lower()
    if not recipient:
        raise DomainValidationError("recipient must not be empty")
    return recipient


def sanitize_amount(raw_amount: str) -> Decimal:
    """Strip everything but digits and '.', then parse. '0.1 USDC' -> Decimal('0.1')."""
    cleaned = _AMOUNT_NOISE.sub("", raw_amount or "")
    if not cleaned:
        raise DomainValidationError(f"amount {raw_amount!r} contains no numeric value")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise DomainValidationError(f"amount {raw_amount!r} is not a valid decimal") from e
    if not amount.is_finite() or amount < 0:
        raise DomainValidationError(f"amount {raw_amount!r} must be a non-negative number")
    if amount.is_zero():
        return Decimal(0)
    if amount.adjusted() < _MIN_ADJUSTED_EXPONENT:
        raise DomainValidationError(f"amount {raw_amount!r} is below the smallest supported unit")
    return amount


def sanitize(raw_recipient: str, raw_amount: str) -> TransactionIntent:
    """Build the canonical intent. Raises DomainValidationError on unusable input."""
    return TransactionIntent(
        recipient=sanitize_recipient(raw_recipient),
        amount=sanitize_amount(raw_amount),
        raw_recipient=raw_recipient,
        raw_amount=raw_amount,
    )

"""Sanitized transfer intent. Pure business semantics."""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class TransactionIntent:
    """
    Canonical form of a provider-extracted transfer request.
    Raw values are kept for display only; equality is over the canonical fields.
    """

    recipient: str
    amount: Decimal
    raw_recipient: str = field(default="", compare=False)
    raw_amount: str = field(default="", compare=False)

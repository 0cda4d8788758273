"""Domain validators. Pure validation functions."""

from arcflow.domain.validators.sanitizer import sanitize, sanitize_amount, sanitize_recipient

__all__ = [
    "sanitize",
    "sanitize_amount",
    "sanitize_recipient",
]

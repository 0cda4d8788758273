"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from arcflow.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidStatusTransitionError,
)
from arcflow.domain.models import (
    ExecutionOutcome,
    FactorCode,
    PolicyConfiguration,
    RiskAssessment,
    RiskStatus,
    TransactionIntent,
    TransactionReceipt,
)
from arcflow.domain.validators import sanitize

__all__ = [
    "DomainError",
    "DomainValidationError",
    "ExecutionOutcome",
    "FactorCode",
    "InvalidStatusTransitionError",
    "PolicyConfiguration",
    "RiskAssessment",
    "RiskStatus",
    "TransactionIntent",
    "TransactionReceipt",
    "sanitize",
]

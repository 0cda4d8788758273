"""Domain models. Pure business entities."""

from arcflow.domain.models.assessment import (
    FactorCode,
    RiskAssessment,
    RiskStatus,
)
from arcflow.domain.models.intent import TransactionIntent
from arcflow.domain.models.outcome import ExecutionOutcome, TransactionReceipt
from arcflow.domain.models.policy import PolicyConfiguration

__all__ = [
    "ExecutionOutcome",
    "FactorCode",
    "PolicyConfiguration",
    "RiskAssessment",
    "RiskStatus",
    "TransactionIntent",
    "TransactionReceipt",
]

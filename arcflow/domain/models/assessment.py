"""Risk assessment and its status lifecycle. Immutable; transitions return a new assessment."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet

from pydantic import BaseModel, Field

from arcflow.domain.exceptions import InvalidStatusTransitionError


class RiskStatus(str, Enum):
    """Lifecycle status of one intent. Everything except PENDING and BROADCASTED is terminal."""

    PENDING = "PENDING"
    BLOCKED_CRITICAL = "BLOCKED_CRITICAL"
    BLOCKED_POLICY = "BLOCKED_POLICY"
    BROADCASTED = "BROADCASTED"
    FAILED_EVM = "FAILED_EVM"
    UNCONFIRMED = "UNCONFIRMED"  # execution call timed out; the transfer may still settle


class FactorCode(str, Enum):
    UNKNOWN_ENTITY = "UNKNOWN_ENTITY"
    HIGH_VOLUME_TX = "HIGH_VOLUME_TX"


# Allowed status transitions: from_status -> set of valid next statuses
_STATUS_TRANSITIONS: Dict[RiskStatus, FrozenSet[RiskStatus]] = {
    RiskStatus.PENDING: frozenset(
        {RiskStatus.BLOCKED_CRITICAL, RiskStatus.BLOCKED_POLICY, RiskStatus.BROADCASTED}
    ),
    RiskStatus.BROADCASTED: frozenset({RiskStatus.FAILED_EVM, RiskStatus.UNCONFIRMED}),
    RiskStatus.BLOCKED_CRITICAL: frozenset(),
    RiskStatus.BLOCKED_POLICY: frozenset(),
    RiskStatus.FAILED_EVM: frozenset(),
    RiskStatus.UNCONFIRMED: frozenset(),
}


def _validate_transition(current: RiskStatus, new: RiskStatus) -> None:
    """Validate that transition from current to new is allowed. Raises if invalid."""
    allowed = _STATUS_TRANSITIONS.get(current, frozenset())
    if new not in allowed:
        raise InvalidStatusTransitionError(
            f"Invalid status transition from {current.value} to {new.value}"
        )


class RiskAssessment(BaseModel):
    """
    Additive, explainable score for one intent. Produced once by the risk engine;
    the kernel records the terminal status through transition(), never by mutation.
    """

    score: int = 0
    factors: tuple[FactorCode, ...] = ()
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: RiskStatus = RiskStatus.PENDING

    model_config = {"frozen": True}

    @property
    def is_terminal(self) -> bool:
        return not _STATUS_TRANSITIONS[self.status]

    def transition(self, new_status: RiskStatus) -> "RiskAssessment":
        """Return a copy carrying new_status. Raises InvalidStatusTransitionError if not allowed."""
        _validate_transition(self.status, new_status)
        return self.model_copy(update={"status": new_status})

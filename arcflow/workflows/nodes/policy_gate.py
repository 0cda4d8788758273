"""Policy gate: risk threshold first, hard cap second. First match wins."""

import logging
from enum import Enum

from arcflow.domain.models.assessment import RiskAssessment, RiskStatus
from arcflow.domain.models.intent import TransactionIntent
from arcflow.domain.models.policy import PolicyConfiguration

logger = logging.getLogger(__name__)


class GateDecision(str, Enum):
    ALLOW = "ALLOW"
    BLOCK_CRITICAL = "BLOCK_CRITICAL"
    BLOCK_POLICY = "BLOCK_POLICY"

    @property
    def blocked_status(self) -> RiskStatus | None:
        return _BLOCKED_STATUS.get(self)


_BLOCKED_STATUS = {
    GateDecision.BLOCK_CRITICAL: RiskStatus.BLOCKED_CRITICAL,
    GateDecision.BLOCK_POLICY: RiskStatus.BLOCKED_POLICY,
}


def evaluate_gate(
    intent: TransactionIntent,
    assessment: RiskAssessment,
    config: PolicyConfiguration,
) -> GateDecision:
    """
    1. score >= critical_risk_threshold -> BLOCK_CRITICAL (even under the cap)
    2. amount > hard_cap -> BLOCK_POLICY
    3. otherwise ALLOW
    """
    if assessment.score >= config.critical_risk_threshold:
        return GateDecision.BLOCK_CRITICAL
    if intent.amount > config.hard_cap:
        return GateDecision.BLOCK_POLICY
    if assessment.score >= config.policy_risk_threshold:
        logger.warning(
            "elevated_risk_allowed",
            extra={
                "recipient": intent.recipient,
                "risk_score": assessment.score,
                "factors": [f.value for f in assessment.factors],
            },
        )
    return GateDecision.ALLOW


def _factor_suffix(assessment: RiskAssessment) -> str:
    if not assessment.factors:
        return ""
    return " Factors: " + ", ".join(f.value for f in assessment.factors)


def block_message(
    decision: GateDecision,
    intent: TransactionIntent,
    assessment: RiskAssessment,
    config: PolicyConfiguration,
) -> str:
    """Explainable reason for a blocked decision, including the triggering factors."""
    if decision is GateDecision.BLOCK_CRITICAL:
        return (
            f"[BLOCK] Risk Threshold Exceeded ({assessment.score}/100). Execution Halted."
            + _factor_suffix(assessment)
        )
    if decision is GateDecision.BLOCK_POLICY:
        return (
            f"[BLOCK] Policy Limit Exceeded (Req: {intent.amount} > Cap: {config.hard_cap})."
            + _factor_suffix(assessment)
        )
    raise ValueError(f"{decision.value} is not a blocking decision")

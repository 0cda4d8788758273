"""Risk engine: deterministic, additive scoring over an ordered list of heuristics."""

from typing import Callable, Optional, Sequence

from arcflow.domain.models.assessment import FactorCode, RiskAssessment
from arcflow.domain.models.intent import TransactionIntent
from arcflow.domain.models.policy import PolicyConfiguration

UNKNOWN_ENTITY_WEIGHT = 40
HIGH_VOLUME_WEIGHT = 50

Heuristic = Callable[[TransactionIntent, PolicyConfiguration], Optional[tuple[int, FactorCode]]]


def identity_heuristic(intent: TransactionIntent, config: PolicyConfiguration) -> Optional[tuple[int, FactorCode]]:
    """Recipient outside the allow-list."""
    if not config.is_trusted(intent.recipient):
        return UNKNOWN_ENTITY_WEIGHT, FactorCode.UNKNOWN_ENTITY
    return None


def volume_heuristic(intent: TransactionIntent, config: PolicyConfiguration) -> Optional[tuple[int, FactorCode]]:
    """Amount strictly above the high-volume threshold."""
    if intent.amount > config.high_volume_threshold:
        return HIGH_VOLUME_WEIGHT, FactorCode.HIGH_VOLUME_TX
    return None


DEFAULT_HEURISTICS: tuple[Heuristic, ...] = (identity_heuristic, volume_heuristic)


def score_risk(
    intent: TransactionIntent,
    config: PolicyConfiguration,
    heuristics: Sequence[Heuristic] = DEFAULT_HEURISTICS,
) -> RiskAssessment:
    """
    Fold every heuristic into one assessment with status PENDING.
    All heuristics always run; order only affects the factor list.
    """
    score = 0
    factors: list[FactorCode] = []
    for heuristic in heuristics:
        hit = heuristic(intent, config)
        if hit is None:
            continue
        weight, factor = hit
        score += weight
        factors.append(factor)
    return RiskAssessment(score=score, factors=tuple(factors))

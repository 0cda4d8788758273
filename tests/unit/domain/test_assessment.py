"""RiskAssessment: immutable transitions validated against the lifecycle table."""

import pytest
from pydantic import ValidationError

from arcflow.domain.exceptions import InvalidStatusTransitionError
from arcflow.domain.models.assessment import FactorCode, RiskAssessment, RiskStatus


def test_new_assessment_is_pending():
    a = RiskAssessment()
    assert a.status == RiskStatus.PENDING
    assert a.score == 0
    assert a.factors == ()
    assert a.timestamp.tzinfo is not None


def test_transition_returns_new_assessment():
    a = RiskAssessment(score=90, factors=(FactorCode.UNKNOWN_ENTITY, FactorCode.HIGH_VOLUME_TX))
    b = a.transition(RiskStatus.BLOCKED_CRITICAL)
    assert b.status == RiskStatus.BLOCKED_CRITICAL
    assert a.status == RiskStatus.PENDING
    assert b.score == 90
    assert b.factors == a.factors
    assert b.timestamp == a.timestamp


@pytest.mark.parametrize(
    "path",
    [
        [RiskStatus.BLOCKED_CRITICAL],
        [RiskStatus.BLOCKED_POLICY],
        [RiskStatus.BROADCASTED],
        [RiskStatus.BROADCASTED, RiskStatus.FAILED_EVM],
        [RiskStatus.BROADCASTED, RiskStatus.UNCONFIRMED],
    ],
)
def test_allowed_paths(path):
    a = RiskAssessment()
    for status in path:
        a = a.transition(status)
    assert a.status == path[-1]


@pytest.mark.parametrize(
    "start,target",
    [
        (RiskStatus.BLOCKED_CRITICAL, RiskStatus.BROADCASTED),
        (RiskStatus.BLOCKED_POLICY, RiskStatus.BROADCASTED),
        (RiskStatus.FAILED_EVM, RiskStatus.BROADCASTED),
        (RiskStatus.PENDING, RiskStatus.FAILED_EVM),
        (RiskStatus.PENDING, RiskStatus.PENDING),
    ],
)
def test_invalid_transition_raises(start, target):
    a = RiskAssessment(status=start)
    with pytest.raises(InvalidStatusTransitionError):
        a.transition(target)


def test_terminal_flags():
    assert not RiskAssessment().is_terminal
    assert RiskAssessment(status=RiskStatus.BLOCKED_POLICY).is_terminal
    assert not RiskAssessment(status=RiskStatus.BROADCASTED).is_terminal


def test_assessment_is_frozen():
    a = RiskAssessment()
    with pytest.raises(ValidationError):
        a.status = RiskStatus.BROADCASTED

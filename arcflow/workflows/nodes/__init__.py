"""Kernel nodes: synchronous, pure scoring and gating. No I/O."""

from arcflow.workflows.nodes.policy_gate import GateDecision, block_message, evaluate_gate
from arcflow.workflows.nodes.risk_scoring import (
    DEFAULT_HEURISTICS,
    Heuristic,
    identity_heuristic,
    score_risk,
    volume_heuristic,
)

__all__ = [
    "DEFAULT_HEURISTICS",
    "GateDecision",
    "Heuristic",
    "block_message",
    "evaluate_gate",
    "identity_heuristic",
    "score_risk",
    "volume_heuristic",
]

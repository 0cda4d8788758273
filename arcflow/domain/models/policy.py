"""Policy configuration. Loaded once at startup and never mutated."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet


@dataclass(frozen=True)
class PolicyConfiguration:
    """Thresholds and allow-list the risk engine and policy gate read. Safe to share across turns."""

    hard_cap: Decimal = Decimal("50.0")
    high_volume_threshold: Decimal = Decimal("20")
    critical_risk_threshold: int = 80
    policy_risk_threshold: int = 40
    trusted_recipients: FrozenSet[str] = field(default_factory=frozenset)

    def is_trusted(self, recipient: str) -> bool:
        return recipient in self.trusted_recipients

"""Transaction kernel: sanitize -> score -> gate -> [execute]. One submission at most per intent."""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Optional, Sequence

from arcflow.application.exceptions import ExecutionError
from arcflow.domain.models.assessment import RiskAssessment, RiskStatus
from arcflow.domain.models.intent import TransactionIntent
from arcflow.domain.models.outcome import ExecutionOutcome, TransactionReceipt
from arcflow.domain.models.policy import PolicyConfiguration
from arcflow.domain.validators.sanitizer import sanitize
from arcflow.workflows.interface import ExecutionAdapter
from arcflow.workflows.nodes.policy_gate import GateDecision, block_message, evaluate_gate
from arcflow.workflows.nodes.risk_scoring import DEFAULT_HEURISTICS, Heuristic, score_risk

if TYPE_CHECKING:
    from arcflow.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)


UNCONFIRMED_MESSAGE = (
    "[PENDING] Settlement outcome unknown: confirmation timed out. "
    "Do not resend before checking the explorer."
)


def _success_message(receipt: TransactionReceipt) -> str:
    message = f"[SUCCESS] TX_HASH: {receipt.transaction_id}"
    if receipt.explorer_url:
        message += f" Proof: {receipt.explorer_url}"
    return message


class TransactionKernel:
    """
    Financial-control kernel. Collaborators are injected; nothing is read from globals.
    Blocked intents never reach the adapter. Adapter failures become FAILED_EVM and are
    not retried. A timed-out submission becomes UNCONFIRMED since the transfer may still settle.
    """

    def __init__(
        self,
        config: PolicyConfiguration,
        adapter: ExecutionAdapter,
        *,
        execution_timeout_seconds: Optional[float] = None,
        heuristics: Sequence[Heuristic] = DEFAULT_HEURISTICS,
        metrics_collector: Optional["MetricsCollector"] = None,
    ) -> None:
        self._config = config
        self._adapter = adapter
        self._execution_timeout = execution_timeout_seconds
        self._heuristics = tuple(heuristics)
        self._metrics = metrics_collector

    @property
    def config(self) -> PolicyConfiguration:
        return self._config

    def _outcome(
        self,
        intent: TransactionIntent,
        assessment: RiskAssessment,
        message: str,
        transaction_id: Optional[str] = None,
    ) -> ExecutionOutcome:
        if self._metrics:
            self._metrics.increment("gate_decision_count", 1, category=assessment.status.value)
        return ExecutionOutcome(
            status=assessment.status,
            message=message,
            transaction_id=transaction_id,
            recipient=intent.recipient,
            amount=intent.amount,
            assessment=assessment,
        )

    async def execute_intent(self, raw_recipient: str, raw_amount: str) -> ExecutionOutcome:
        """
        Run one intent through the state machine.
        Raises DomainValidationError before any assessment if the arguments are unusable.
        """
        intent = sanitize(raw_recipient, raw_amount)
        assessment = score_risk(intent, self._config, self._heuristics)
        decision = evaluate_gate(intent, assessment, self._config)

        logger.info(
            "intent_assessed",
            extra={
                "recipient": intent.recipient,
                "amount": str(intent.amount),
                "risk_score": assessment.score,
                "factors": [f.value for f in assessment.factors],
                "decision": decision.value,
            },
        )

        if decision is not GateDecision.ALLOW:
            assessment = assessment.transition(decision.blocked_status)
            return self._outcome(
                intent, assessment, block_message(decision, intent, assessment, self._config)
            )

        assessment = assessment.transition(RiskStatus.BROADCASTED)
        if self._metrics:
            self._metrics.increment("execution_count")
        start = time.perf_counter()
        try:
            receipt = await asyncio.wait_for(
                self._adapter.submit(intent.recipient, intent.amount),
                timeout=self._execution_timeout,
            )
        except asyncio.TimeoutError:
            assessment = assessment.transition(RiskStatus.UNCONFIRMED)
            logger.error(
                "execution_timeout",
                extra={"recipient": intent.recipient, "amount": str(intent.amount)},
            )
            return self._outcome(intent, assessment, UNCONFIRMED_MESSAGE)
        except ExecutionError as e:
            assessment = assessment.transition(RiskStatus.FAILED_EVM)
            logger.error(
                "execution_failed",
                extra={"recipient": intent.recipient, "amount": str(intent.amount), "error": e.message},
            )
            return self._outcome(intent, assessment, f"[ERROR] RPC Rejection: {e.message}")
        finally:
            if self._metrics:
                self._metrics.observe_latency(
                    "execution_latency", (time.perf_counter() - start) * 1000
                )

        logger.info(
            "execution_confirmed",
            extra={"recipient": intent.recipient, "transaction_id": receipt.transaction_id},
        )
        return self._outcome(intent, assessment, _success_message(receipt), receipt.transaction_id)

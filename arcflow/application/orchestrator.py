"""Reasoning orchestrator: ordered-candidate fallback around one tool-calling turn."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from arcflow.application.exceptions import AllProvidersExhaustedError, ProviderError
from arcflow.application.reasoning import (
    PAYMENT_TOOL_ALIASES,
    PAYMENT_TOOL_SCHEMA,
    SYSTEM_CONTEXT,
    PlainText,
    ProviderReply,
    ReasoningProvider,
    StructuredCall,
)
from arcflow.domain.exceptions import DomainValidationError
from arcflow.domain.models.outcome import ExecutionOutcome
from arcflow.domain.schemas.chat import ConversationTurn
from arcflow.scalability.circuit_breaker import CircuitBreaker, CircuitOpenError
from arcflow.workflows.transaction_kernel import TransactionKernel

if TYPE_CHECKING:
    from arcflow.observability.failure_classifier import FailureClassifier
    from arcflow.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)

TX_ATTEMPT = "TX_ATTEMPT"
DEADLINE_PENDING_MESSAGE = (
    "[PENDING] Settlement outcome unknown: the turn deadline passed while the transfer was in flight. "
    "Do not resend before checking the explorer."
)

# Kernel calls that outlived their turn; held until they finish.
_background_settlements: set["asyncio.Task[ExecutionOutcome]"] = set()


@dataclass
class TurnResult:
    """Final reply for one turn plus, when a transfer was attempted, its machine-readable record."""

    reply: str
    provider: str
    action: Optional[str] = None
    call_args: Optional[dict[str, str]] = None
    tool_output: Optional[str] = None
    outcome: Optional[ExecutionOutcome] = None


@dataclass
class _PaymentDispatch:
    candidate: str
    call_args: dict[str, str] = field(default_factory=dict)
    tool_output: str = ""
    outcome: Optional[ExecutionOutcome] = None
    settlement: Optional["asyncio.Task[ExecutionOutcome]"] = None


def _reply_text(reply: ProviderReply, fallback: str) -> str:
    if isinstance(reply, PlainText) and reply.text.strip():
        return reply.text
    return fallback


def _log_late_settlement(task: "asyncio.Task[ExecutionOutcome]") -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("late_settlement_failed", extra={"error": str(error)})
        return
    outcome = task.result()
    logger.warning(
        "late_settlement_finished",
        extra={"status": outcome.status.value, "transaction_id": outcome.transaction_id},
    )


class ReasoningOrchestrator:
    """
    Tries candidates in order; the first that completes a turn wins. A plain-text answer is a
    valid outcome. Only ProviderError triggers fallback. The kernel runs at most once per turn:
    if a candidate fails after a transfer was dispatched, the outcome is returned as-is rather
    than replayed on the next candidate. A turn deadline never cancels a kernel call; once a
    transfer is in flight the turn ends with a pending reply instead of a timeout.
    """

    def __init__(
        self,
        candidates: Sequence[str],
        provider: ReasoningProvider,
        kernel: TransactionKernel,
        *,
        system_context: str = SYSTEM_CONTEXT,
        tool_schema: Optional[dict[str, Any]] = None,
        breakers: Optional[Mapping[str, CircuitBreaker]] = None,
        metrics_collector: Optional["MetricsCollector"] = None,
        failure_classifier: Optional["FailureClassifier"] = None,
    ) -> None:
        self._candidates = tuple(candidates)
        self._provider = provider
        self._kernel = kernel
        self._system_context = system_context
        self._tool_schema = tool_schema or PAYMENT_TOOL_SCHEMA
        self._breakers = dict(breakers or {})
        self._metrics = metrics_collector
        self._failure_classifier = failure_classifier

    @property
    def candidates(self) -> tuple[str, ...]:
        return self._candidates

    async def run_turn(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        *,
        timeout: Optional[float] = None,
    ) -> TurnResult:
        """
        Run one user turn. Raises AllProvidersExhaustedError when no candidate completes it,
        and asyncio.TimeoutError when timeout expires before any transfer was dispatched.
        """
        dispatch: list[_PaymentDispatch] = []
        try:
            return await asyncio.wait_for(self._run_candidates(message, history, dispatch), timeout)
        except asyncio.TimeoutError:
            if not dispatch:
                raise
            return self._deadline_result(dispatch[0])

    async def _run_candidates(
        self,
        message: str,
        history: Sequence[ConversationTurn],
        dispatch: list[_PaymentDispatch],
    ) -> TurnResult:
        attempted: list[str] = []
        errors: dict[str, str] = {}

        for candidate in self._candidates:
            breaker = self._breakers.get(candidate)
            if breaker is not None:
                try:
                    await breaker.acquire()
                except CircuitOpenError:
                    logger.info("provider_candidate_skipped", extra={"candidate": candidate})
                    continue

            attempted.append(candidate)
            if self._metrics:
                self._metrics.increment("provider_attempt_count", 1, candidate=candidate)
            start = time.perf_counter()
            try:
                result = await self._run_candidate(candidate, message, history, dispatch)
            except ProviderError as e:
                if breaker is not None:
                    await breaker.record_failure()
                self._record_failure(candidate, e)
                if dispatch:
                    return self._dispatched_result(dispatch[0])
                errors[candidate] = e.message
                continue
            finally:
                if self._metrics:
                    self._metrics.observe_latency(
                        "provider_turn_latency",
                        (time.perf_counter() - start) * 1000,
                        candidate=candidate,
                    )

            if breaker is not None:
                await breaker.record_success()
            logger.info(
                "turn_completed",
                extra={"candidate": candidate, "action": result.action},
            )
            return result

        logger.error(
            "all_providers_exhausted",
            extra={"attempted": attempted, "errors": errors},
        )
        raise AllProvidersExhaustedError(attempted, errors)

    async def _run_candidate(
        self,
        candidate: str,
        message: str,
        history: Sequence[ConversationTurn],
        dispatch: list[_PaymentDispatch],
    ) -> TurnResult:
        session = self._provider.start_session(
            candidate,
            system_context=self._system_context,
            tool_schema=self._tool_schema,
            history=history,
        )
        reply = await session.send_message(message)

        if isinstance(reply, PlainText):
            return TurnResult(reply=reply.text, provider=candidate)

        if isinstance(reply, StructuredCall):
            if reply.name not in PAYMENT_TOOL_ALIASES:
                logger.warning(
                    "unknown_tool_call",
                    extra={"candidate": candidate, "tool": reply.name},
                )
                return TurnResult(
                    reply=f"Unsupported action requested ({reply.name}). No transfer was made.",
                    provider=candidate,
                )
            payment = _PaymentDispatch(candidate=candidate)
            dispatch.append(payment)
            await self._dispatch_payment(reply, payment)
            follow_up = await session.send_tool_result(reply.name, payment.tool_output)
            result = self._dispatched_result(payment)
            result.reply = _reply_text(follow_up, payment.tool_output)
            return result

        raise TypeError(f"Unexpected provider reply type: {type(reply).__name__}")

    async def _dispatch_payment(self, call: StructuredCall, payment: _PaymentDispatch) -> None:
        to = call.args.get("to")
        amount = call.args.get("amount")
        payment.call_args = {
            "to": "" if to is None else str(to),
            "amount": "" if amount is None else str(amount),
        }
        if to is None or amount is None:
            payment.tool_output = "[REJECTED] Invalid payment parameters: 'to' and 'amount' are required"
            return
        if not isinstance(to, str) or not isinstance(amount, str):
            payment.tool_output = "[REJECTED] Invalid payment parameters: 'to' and 'amount' must be strings"
            return

        # Run as its own task so a cancelled turn cannot interrupt a submission.
        payment.settlement = asyncio.ensure_future(self._kernel.execute_intent(to, amount))
        await asyncio.wait({payment.settlement})
        self._apply_settlement(payment)

    def _apply_settlement(self, payment: _PaymentDispatch) -> None:
        """Copy the finished kernel call into the dispatch record. Unexpected errors propagate."""
        try:
            payment.outcome = payment.settlement.result()
        except DomainValidationError as e:
            logger.warning("intent_rejected", extra={"reason": e.message})
            if self._metrics:
                self._metrics.increment("intent_rejected_count")
            payment.tool_output = f"[REJECTED] Invalid payment parameters: {e.message}"
        else:
            payment.tool_output = payment.outcome.message

    def _deadline_result(self, payment: _PaymentDispatch) -> TurnResult:
        settlement = payment.settlement
        if settlement is not None and payment.outcome is None and not payment.tool_output:
            if settlement.done():
                self._apply_settlement(payment)
            else:
                _background_settlements.add(settlement)
                settlement.add_done_callback(_background_settlements.discard)
                settlement.add_done_callback(_log_late_settlement)
                payment.tool_output = DEADLINE_PENDING_MESSAGE
        logger.warning(
            "turn_deadline_after_dispatch",
            extra={"candidate": payment.candidate, "settled": payment.outcome is not None},
        )
        return self._dispatched_result(payment)

    @staticmethod
    def _dispatched_result(payment: _PaymentDispatch) -> TurnResult:
        return TurnResult(
            reply=payment.tool_output,
            provider=payment.candidate,
            action=TX_ATTEMPT,
            call_args=payment.call_args,
            tool_output=payment.tool_output,
            outcome=payment.outcome,
        )

    def _record_failure(self, candidate: str, error: ProviderError) -> None:
        category = (
            self._failure_classifier.classify(error).value
            if self._failure_classifier
            else "PROVIDER_ERROR"
        )
        if self._metrics:
            self._metrics.increment("provider_failure_count", 1, candidate=candidate)
            self._metrics.increment("failure_count", 1, category=category)
        logger.warning(
            "provider_attempt_failed",
            extra={
                "candidate": candidate,
                "error": error.message,
                "status_code": error.status_code,
                "category": category,
            },
        )

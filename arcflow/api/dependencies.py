"""FastAPI dependency injection: policy, settlement adapter, reasoning provider, kernel, orchestrator."""

from typing import Annotated

from fastapi import Depends

from arcflow.application.orchestrator import ReasoningOrchestrator
from arcflow.application.reasoning import ReasoningProvider
from arcflow.config.settings import AppSettings, get_settings
from arcflow.domain.models.policy import PolicyConfiguration
from arcflow.infrastructure.reasoning.gemini_provider import GeminiProvider
from arcflow.infrastructure.settlement.evm_adapter import EvmSettlementAdapter
from arcflow.observability.failure_classifier import FailureClassifier
from arcflow.observability.metrics import MetricsCollector
from arcflow.scalability.bulkhead import BulkheadExecutor
from arcflow.scalability.circuit_breaker import CircuitBreaker
from arcflow.workflows.interface import ExecutionAdapter
from arcflow.workflows.transaction_kernel import TransactionKernel

_policy: PolicyConfiguration | None = None
_adapter: EvmSettlementAdapter | None = None
_provider: GeminiProvider | None = None
_metrics: MetricsCollector | None = None
_breakers: dict[str, CircuitBreaker] | None = None


def get_policy_configuration(
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> PolicyConfiguration:
    """Return singleton policy configuration."""
    global _policy
    if _policy is None:
        _policy = settings.to_policy_configuration()
    return _policy


def get_metrics_collector(
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> MetricsCollector | None:
    """Return singleton metrics collector, or None when metrics are disabled."""
    global _metrics
    if not settings.enable_metrics:
        return None
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_execution_adapter(
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> ExecutionAdapter:
    """Return singleton settlement adapter. It owns the signing key and serializes submissions."""
    global _adapter
    if _adapter is None:
        _adapter = EvmSettlementAdapter.from_rpc_url(
            settings.arc_rpc_url,
            settings.arc_private_key,
            settings.usdc_contract_address,
            decimals=settings.usdc_decimals,
            confirmation_timeout_seconds=settings.confirmation_timeout_seconds,
            explorer_tx_url=settings.explorer_tx_url,
            submission_queue=BulkheadExecutor(max_concurrent=1, max_queued=settings.settlement_max_queued),
        )
    return _adapter


def get_reasoning_provider(
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> ReasoningProvider:
    """Return singleton Gemini provider."""
    global _provider
    if _provider is None:
        _provider = GeminiProvider(
            settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            timeout=settings.provider_timeout_seconds,
        )
    return _provider


def get_provider_breakers(
    settings: Annotated[AppSettings, Depends(get_settings)],
    metrics: Annotated[MetricsCollector | None, Depends(get_metrics_collector)],
) -> dict[str, CircuitBreaker]:
    """Return one circuit breaker per provider candidate, shared across requests."""
    global _breakers
    if _breakers is None:
        _breakers = {
            candidate: CircuitBreaker(
                failure_threshold=settings.provider_failure_threshold,
                recovery_timeout_seconds=settings.provider_recovery_timeout_seconds,
                name=candidate,
                metrics_callback=metrics,
            )
            for candidate in settings.provider_candidates
        }
    return _breakers


def get_transaction_kernel(
    settings: Annotated[AppSettings, Depends(get_settings)],
    policy: Annotated[PolicyConfiguration, Depends(get_policy_configuration)],
    adapter: Annotated[ExecutionAdapter, Depends(get_execution_adapter)],
    metrics: Annotated[MetricsCollector | None, Depends(get_metrics_collector)],
) -> TransactionKernel:
    """Build the kernel with injected policy and adapter."""
    return TransactionKernel(
        policy,
        adapter,
        execution_timeout_seconds=settings.execution_timeout_seconds,
        metrics_collector=metrics,
    )


def get_orchestrator(
    settings: Annotated[AppSettings, Depends(get_settings)],
    provider: Annotated[ReasoningProvider, Depends(get_reasoning_provider)],
    kernel: Annotated[TransactionKernel, Depends(get_transaction_kernel)],
    breakers: Annotated[dict[str, CircuitBreaker], Depends(get_provider_breakers)],
    metrics: Annotated[MetricsCollector | None, Depends(get_metrics_collector)],
) -> ReasoningOrchestrator:
    """Build the orchestrator over the configured candidate list."""
    return ReasoningOrchestrator(
        settings.provider_candidates,
        provider,
        kernel,
        breakers=breakers,
        metrics_collector=metrics,
        failure_classifier=FailureClassifier(),
    )


async def close_clients() -> None:
    """Release network clients on shutdown."""
    global _provider
    if _provider is not None:
        await _provider.aclose()
        _provider = None

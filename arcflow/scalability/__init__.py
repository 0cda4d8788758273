"""Scalability layer: circuit breaker and bulkhead. No FastAPI."""

from arcflow.scalability.bulkhead import BulkheadExecutor, BulkheadFullError
from arcflow.scalability.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState

__all__ = [
    "BulkheadExecutor",
    "BulkheadFullError",
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
]

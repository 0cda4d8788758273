"""Circuit breaker pattern: CLOSED, OPEN, HALF_OPEN. Failure threshold and recovery timeout. Metrics tracking."""

import asyncio
import time
from enum import Enum
from typing import Any


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(RuntimeError):
    """Raised when a call is attempted while the circuit is OPEN or its probe is taken."""


class CircuitBreaker:
    """
    Circuit breaker: after failure_threshold failures, open for recovery_timeout_seconds,
    then half-open for one probe. Async-safe via asyncio.Lock.
    Callers bracket their own work with acquire() and record_success()/record_failure().
    A probe that never reports back is given up after another recovery_timeout_seconds.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout_seconds: float = 30.0,
        name: str = "default",
        metrics_callback: Any = None,
    ) -> None:
        self._threshold = failure_threshold
        self._recovery_timeout = recovery_timeout_seconds
        self._name = name
        self._metrics = metrics_callback
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure_time: float | None = None
        self._probe_started: float | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def name(self) -> str:
        return self._name

    async def acquire(self) -> None:
        """
        Admit a caller. CLOSED admits everyone. OPEN raises CircuitOpenError until the
        recovery timeout passes, then admits exactly one probe and moves to HALF_OPEN.
        """
        async with self._lock:
            now = time.monotonic()
            if self._state == CircuitState.CLOSED:
                return
            if self._state == CircuitState.HALF_OPEN:
                if self._probe_started is not None and now - self._probe_started < self._recovery_timeout:
                    raise CircuitOpenError(f"Circuit breaker {self._name} is HALF_OPEN; probe in flight")
                self._probe_started = now
                return
            if (
                self._last_failure_time is not None
                and now - self._last_failure_time >= self._recovery_timeout
            ):
                self._state = CircuitState.HALF_OPEN
                self._probe_started = now
                return
            raise CircuitOpenError(f"Circuit breaker {self._name} is OPEN")

    async def record_success(self) -> None:
        async with self._lock:
            self._failures = 0
            self._state = CircuitState.CLOSED
            self._probe_started = None
            if self._metrics and hasattr(self._metrics, "increment"):
                self._metrics.increment("circuit_breaker_success", 1, candidate=self._name)

    async def record_failure(self) -> None:
        async with self._lock:
            self._last_failure_time = time.monotonic()
            self._failures += 1
            self._probe_started = None
            if self._metrics and hasattr(self._metrics, "increment"):
                self._metrics.increment("circuit_breaker_failure", 1, candidate=self._name)
            if self._failures >= self._threshold or self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN

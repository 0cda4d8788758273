"""Application layer: reasoning orchestration over the transaction kernel."""

from arcflow.application.exceptions import (
    AllProvidersExhaustedError,
    ApplicationError,
    ExecutionError,
    ProviderError,
)

__all__ = [
    "AllProvidersExhaustedError",
    "ApplicationError",
    "ExecutionError",
    "ProviderError",
]

"""Failure categorization for metrics and logs. Maps exceptions to taxonomy."""

import asyncio
from enum import Enum

from arcflow.application.exceptions import (
    AllProvidersExhaustedError,
    ApplicationError,
    ExecutionError,
    ProviderError,
)
from arcflow.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidStatusTransitionError,
)


class FailureCategory(str, Enum):
    """Taxonomy for failure classification."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    EXECUTION_ERROR = "EXECUTION_ERROR"
    TIMEOUT = "TIMEOUT"
    WORKFLOW_ERROR = "WORKFLOW_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class FailureClassifier:
    """Classifies exceptions into FailureCategory. Callers increment metrics with the result."""

    @staticmethod
    def classify(exception: BaseException) -> FailureCategory:
        """Map exception to FailureCategory. Unknown -> UNEXPECTED_ERROR."""
        if isinstance(exception, DomainValidationError):
            return FailureCategory.VALIDATION_ERROR
        if isinstance(exception, InvalidStatusTransitionError):
            return FailureCategory.WORKFLOW_ERROR
        if isinstance(exception, (ProviderError, AllProvidersExhaustedError)):
            return FailureCategory.PROVIDER_ERROR
        if isinstance(exception, ExecutionError):
            return FailureCategory.EXECUTION_ERROR
        if isinstance(exception, asyncio.TimeoutError):
            return FailureCategory.TIMEOUT
        if isinstance(exception, ApplicationError):
            return FailureCategory.WORKFLOW_ERROR
        if isinstance(exception, DomainError):
            return FailureCategory.VALIDATION_ERROR
        return FailureCategory.UNEXPECTED_ERROR

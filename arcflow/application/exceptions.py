"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ProviderError(ApplicationError):
    """Raised when one reasoning candidate fails (network, auth, quota, unsupported model)."""

    def __init__(self, message: str, *, candidate: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.candidate = candidate
        self.status_code = status_code


class AllProvidersExhaustedError(ApplicationError):
    """Raised when every reasoning candidate failed for a turn."""

    def __init__(self, attempted: list[str], errors: dict[str, str] | None = None) -> None:
        super().__init__(
            "All reasoning providers failed: " + (", ".join(attempted) if attempted else "none available")
        )
        self.attempted = attempted
        self.errors = errors or {}


class ExecutionError(ApplicationError):
    """Raised by the settlement adapter when a transfer is rejected or cannot be submitted."""

"""Settlement boundary. The kernel depends on this protocol, never on a concrete chain client."""

from decimal import Decimal
from typing import Protocol

from arcflow.domain.models.outcome import TransactionReceipt


class ExecutionAdapter(Protocol):
    """Submits one allowed transfer and awaits its confirmation."""

    async def submit(self, recipient: str, amount: Decimal) -> TransactionReceipt:
        """
        Transfer amount (in whole currency units) to recipient. Returns the receipt once
        confirmed. Raises ExecutionError with a human-readable message on failure, and
        asyncio.TimeoutError when the transfer was sent but its outcome is unknown.
        """
        ...

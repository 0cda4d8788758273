# Transaction kernel: settlement boundary, scoring and gating nodes, state machine.

from arcflow.workflows.interface import ExecutionAdapter
from arcflow.workflows.transaction_kernel import TransactionKernel

__all__ = [
    "ExecutionAdapter",
    "TransactionKernel",
]

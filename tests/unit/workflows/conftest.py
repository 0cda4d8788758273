"""Fixtures for kernel tests."""

import pytest

from arcflow.observability.metrics import MetricsCollector
from arcflow.workflows.transaction_kernel import TransactionKernel


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def kernel(policy_config, fake_adapter, metrics):
    return TransactionKernel(policy_config, fake_adapter, metrics_collector=metrics)

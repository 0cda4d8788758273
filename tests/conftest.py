"""Shared fixtures: required settings, policy configuration, fake adapter and scripted provider."""

import os
from decimal import Decimal

import pytest

# Required credentials must exist before arcflow.main is imported.
os.environ.setdefault("ARC_RPC_URL", "http://localhost:8545")
os.environ.setdefault("ARC_PRIVATE_KEY", "0x" + "11" * 32)
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")

from arcflow.application.exceptions import ExecutionError, ProviderError  # noqa: E402
from arcflow.application.reasoning import PlainText  # noqa: E402
from arcflow.domain.models.outcome import TransactionReceipt  # noqa: E402
from arcflow.domain.models.policy import PolicyConfiguration  # noqa: E402

TRUSTED = "0x937402b657c91d9e74fcf373187f1758c0d8e933"
TRUSTED_2 = "0xd8da6bf26964af9d7eed9e03e53415d37aa96045"
UNKNOWN = "0x1111111111111111111111111111111111111111"


class FakeExecutionAdapter:
    """Records submissions; succeeds with a fixed hash unless told to fail."""

    def __init__(self, *, error: Exception | None = None, tx_hash: str = "0xabc123") -> None:
        self.calls: list[tuple[str, Decimal]] = []
        self.error = error
        self.tx_hash = tx_hash

    async def submit(self, recipient: str, amount: Decimal) -> TransactionReceipt:
        self.calls.append((recipient, amount))
        if self.error is not None:
            raise self.error
        return TransactionReceipt(
            transaction_id=self.tx_hash,
            explorer_url=f"https://explorer.test/tx/{self.tx_hash}",
        )


class ScriptedSession:
    def __init__(self, script: list, log: list) -> None:
        self._script = script
        self._log = log

    def _next(self):
        if not self._script:
            raise ProviderError("script exhausted")
        step = self._script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    async def send_message(self, text: str):
        self._log.append(("message", text))
        return self._next()

    async def send_tool_result(self, name: str, result: str):
        self._log.append(("tool_result", name, result))
        return self._next()


class ScriptedProvider:
    """
    Per-candidate scripts of replies or exceptions. A candidate mapped to an
    exception fails on start; otherwise each session call pops the next step.
    """

    def __init__(self, scripts: dict) -> None:
        self._scripts = {k: (list(v) if isinstance(v, list) else v) for k, v in scripts.items()}
        self.sessions: list[str] = []
        self.log: dict[str, list] = {}
        self.histories: dict[str, list] = {}

    def start_session(self, candidate, *, system_context, tool_schema, history):
        self.sessions.append(candidate)
        self.histories[candidate] = list(history)
        script = self._scripts.get(candidate, [PlainText("ok")])
        if isinstance(script, Exception):
            raise script
        return ScriptedSession(script, self.log.setdefault(candidate, []))


@pytest.fixture
def policy_config() -> PolicyConfiguration:
    return PolicyConfiguration(
        hard_cap=Decimal("50.0"),
        high_volume_threshold=Decimal("20"),
        critical_risk_threshold=80,
        policy_risk_threshold=40,
        trusted_recipients=frozenset({TRUSTED, TRUSTED_2}),
    )


@pytest.fixture
def fake_adapter() -> FakeExecutionAdapter:
    return FakeExecutionAdapter()


@pytest.fixture
def failing_adapter() -> FakeExecutionAdapter:
    return FakeExecutionAdapter(error=ExecutionError("insufficient funds for gas"))


@pytest.fixture
def scripted_provider():
    return ScriptedProvider

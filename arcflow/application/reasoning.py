"""Reasoning-provider boundary: reply variants, session and provider protocols, tool schema."""

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, Union

from arcflow.domain.schemas.chat import ConversationTurn

PAYMENT_TOOL_NAME = "execute_payment"
# Older prompts and models emit the name used by the first agent script.
PAYMENT_TOOL_ALIASES = frozenset({PAYMENT_TOOL_NAME, "send_payment"})

PAYMENT_TOOL_SCHEMA: dict[str, Any] = {
    "name": PAYMENT_TOOL_NAME,
    "description": "Execute a USDC transfer on Arc Testnet.",
    "parameters": {
        "type": "OBJECT",
        "properties": {
            "to": {"type": "STRING", "description": "Wallet address (0x...)"},
            "amount": {"type": "STRING", "description": "Amount in USDC"},
        },
        "required": ["to", "amount"],
    },
}

SYSTEM_CONTEXT = """
ROLE: ArcFlow Deterministic Financial Kernel.
NETWORK: Arc Testnet (Circle Infrastructure).

PROTOCOL:
1. OUTPUT_FORMAT: JSON-RPC style brevity. No conversational filler.
2. DATA_STRICTNESS: Extract exact values.
3. TONE: Neutral, efficient, system-level.

INTERACTION_MODEL:
- User: "Send 10 USDC to 0x..."
- System: "INTENT_RECEIVED. Awaiting Authorization."
""".strip()


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class StructuredCall:
    name: str
    args: dict[str, str] = field(default_factory=dict)


ProviderReply = Union[PlainText, StructuredCall]


class ReasoningSession(Protocol):
    """One conversation with one candidate. Raises ProviderError on any provider-level failure."""

    async def send_message(self, text: str) -> ProviderReply:
        ...

    async def send_tool_result(self, name: str, result: str) -> ProviderReply:
        ...


class ReasoningProvider(Protocol):
    """Opens sessions against a named candidate model."""

    def start_session(
        self,
        candidate: str,
        *,
        system_context: str,
        tool_schema: dict[str, Any],
        history: Sequence[ConversationTurn],
    ) -> ReasoningSession:
        ...

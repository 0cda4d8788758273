"""Domain schemas. Request/response and validation."""

from arcflow.domain.schemas.chat import (
    ChatRequest,
    ChatResponse,
    ConversationTurn,
    ErrorResponse,
    TransactionDetails,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ConversationTurn",
    "ErrorResponse",
    "TransactionDetails",
]

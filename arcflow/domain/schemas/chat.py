"""Pydantic schemas for the chat API. Strict validation, no infrastructure."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from arcflow.domain.models.assessment import RiskAssessment


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ConversationTurn(BaseModel):
    """One prior exchange supplied by the caller. Not stored between requests."""

    role: Literal["user", "model"]
    text: str


class ChatRequest(BaseModel):
    """Request schema for one conversational turn."""

    message: str = Field(..., min_length=1, description="User instruction in natural language")
    history: List[ConversationTurn] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TransactionDetails(BaseModel):
    """Machine-readable record of a transfer attempt."""

    to: str
    amount: str
    output: str
    analysis: Optional[RiskAssessment] = None


class ChatResponse(BaseModel):
    reply: str
    action: Optional[Literal["TX_ATTEMPT"]] = None
    details: Optional[TransactionDetails] = None


class ErrorResponse(BaseModel):
    error: str

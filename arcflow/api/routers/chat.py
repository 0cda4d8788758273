"""Chat API router: POST /api/chat. One conversational turn through the orchestrator."""

from typing import Annotated

from fastapi import APIRouter, Depends

from arcflow.api.dependencies import get_orchestrator
from arcflow.application.orchestrator import ReasoningOrchestrator, TurnResult
from arcflow.config.settings import AppSettings, get_settings
from arcflow.domain.schemas.chat import ChatRequest, ChatResponse, ErrorResponse, TransactionDetails

router = APIRouter()


def _turn_to_response(result: TurnResult) -> ChatResponse:
    if result.action is None:
        return ChatResponse(reply=result.reply)
    call_args = result.call_args or {}
    return ChatResponse(
        reply=result.reply,
        action=result.action,
        details=TransactionDetails(
            to=call_args.get("to", ""),
            amount=call_args.get("amount", ""),
            output=result.tool_output or "",
            analysis=result.outcome.assessment if result.outcome else None,
        ),
    )


_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Unusable request"},
    503: {"model": ErrorResponse, "description": "All reasoning providers failed"},
    504: {"model": ErrorResponse, "description": "Turn deadline passed before any transfer was dispatched"},
}


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def chat(
    body: ChatRequest,
    orchestrator: Annotated[ReasoningOrchestrator, Depends(get_orchestrator)],
    settings: Annotated[AppSettings, Depends(get_settings)],
):
    """Run one turn. Errors are mapped to {error} responses by the app exception handlers."""
    result = await orchestrator.run_turn(
        body.message,
        body.history,
        timeout=settings.turn_timeout_seconds,
    )
    return _turn_to_response(result)

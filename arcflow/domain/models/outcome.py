"""Results crossing the kernel and adapter boundaries."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from arcflow.domain.models.assessment import RiskAssessment, RiskStatus


class TransactionReceipt(BaseModel):
    """What the settlement adapter reports once a transfer is confirmed."""

    transaction_id: str
    explorer_url: Optional[str] = None

    model_config = {"frozen": True}


class ExecutionOutcome(BaseModel):
    """Terminal result of one execute_intent call. Returned to the caller, never persisted."""

    status: RiskStatus
    message: str
    transaction_id: Optional[str] = None
    recipient: str
    amount: Decimal
    assessment: RiskAssessment

    model_config = {"frozen": True}

"""Transaction request/response schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from services.unit_wallet_service.models.enums import TransactionStatus, TransactionType


class TransactionResponse(BaseModel):
    id: uuid.UUID
    wallet_id: uuid.UUID
    transaction_type: TransactionType
    amount: Decimal
    description: str
    vpay_reference: Optional[str] = None
    status: TransactionStatus
    initiated_by: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FellowshipTransactionResponse(TransactionResponse):
    """Oversight listing row; carries the owning unit."""

    unit_department: str


class TransactionListResponse(BaseModel):
    transactions: list[FellowshipTransactionResponse]
    total: int

"""Commission report schemas."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class CommissionResponse(BaseModel):
    id: uuid.UUID
    fellowship_id: int
    transaction_id: uuid.UUID
    original_amount: Decimal
    vpay_fee: Decimal
    brainiac_cut: Decimal
    net_amount: Decimal
    commission_rate: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommissionTotalsResponse(BaseModel):
    total_commission: Decimal
    total_vpay_fees: Decimal
    total_processed: Decimal
    total_net: Decimal
    count: int


class CommissionReportResponse(BaseModel):
    commissions: list[CommissionResponse]
    totals: CommissionTotalsResponse

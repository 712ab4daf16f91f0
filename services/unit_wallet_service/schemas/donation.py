"""Donation request/response schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.unit_wallet_service.models.enums import DonationPaymentMethod
from services.unit_wallet_service.schemas.transaction import TransactionResponse


class DonationResponse(BaseModel):
    id: uuid.UUID
    wallet_id: uuid.UUID
    member_id: Optional[str] = None
    amount: Decimal
    gross_amount: Decimal
    payment_method: DonationPaymentMethod
    vpay_reference: Optional[str] = None
    donation_note: Optional[str] = None
    payer_name: Optional[str] = None
    is_anonymous: bool
    transaction_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DonationCreateRequest(BaseModel):
    wallet_id: uuid.UUID
    amount: Decimal = Field(..., description="Gross amount in Naira")
    payment_method: DonationPaymentMethod = DonationPaymentMethod.VPAY_TRANSFER
    member_id: Optional[str] = None
    vpay_reference: Optional[str] = None
    donation_note: Optional[str] = None
    is_anonymous: bool = False


class DonationReceiptResponse(BaseModel):
    donation: DonationResponse
    transaction: TransactionResponse
    net_amount: Decimal


class DonationListResponse(BaseModel):
    donations: list[DonationResponse]
    total: int

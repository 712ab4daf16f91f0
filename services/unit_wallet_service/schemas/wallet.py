"""Wallet request/response schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.unit_wallet_service.models.enums import WalletStatus
from services.unit_wallet_service.schemas.donation import DonationResponse
from services.unit_wallet_service.schemas.transaction import TransactionResponse


class WalletResponse(BaseModel):
    id: uuid.UUID
    fellowship_id: int
    unit_department: str
    balance: Decimal
    vpay_virtual_account: Optional[str] = None
    vpay_account_name: Optional[str] = None
    status: WalletStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WalletSummaryResponse(WalletResponse):
    transaction_count: int = 0
    donation_count: int = 0


class WalletListResponse(BaseModel):
    wallets: list[WalletSummaryResponse]
    total: int


class WalletDetailResponse(BaseModel):
    """Wallet with its most recent activity."""

    wallet: WalletResponse
    recent_transactions: list[TransactionResponse]
    recent_donations: list[DonationResponse]


class WalletCreateRequest(BaseModel):
    unit_department: str = Field(..., min_length=1, max_length=64)
    # Defaults to the caller's fellowship
    fellowship_id: Optional[int] = None


class FundWalletRequest(BaseModel):
    amount: Decimal
    description: str = Field(..., min_length=1)


class FundWalletResponse(BaseModel):
    wallet: WalletResponse
    transaction: TransactionResponse


class VirtualAccountRequest(BaseModel):
    account_number: str = Field(..., min_length=1, max_length=32)
    account_name: Optional[str] = None


class WalletStatusRequest(BaseModel):
    status: WalletStatus

"""Withdrawal and approval-chain schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.unit_wallet_service.models.enums import ApprovalStatus, OrgRole
from services.unit_wallet_service.schemas.transaction import TransactionResponse


class ApprovalResponse(BaseModel):
    id: uuid.UUID
    transaction_id: uuid.UUID
    approver_role: OrgRole
    approval_order: int
    label: Optional[str] = None
    status: ApprovalStatus
    approver_id: Optional[str] = None
    comments: Optional[str] = None
    acted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WithdrawalRequest(BaseModel):
    wallet_id: uuid.UUID
    amount: Decimal
    description: str = Field(..., min_length=1)


class WithdrawalResponse(BaseModel):
    transaction: TransactionResponse
    approvals: list[ApprovalResponse]
    next_approver_role: Optional[OrgRole] = None


class ApprovalActionRequest(BaseModel):
    comments: Optional[str] = None


class ApprovalActionResponse(WithdrawalResponse):
    acted_on: ApprovalResponse


class PendingApprovalResponse(BaseModel):
    approval: ApprovalResponse
    transaction: TransactionResponse
    unit_department: str


class PendingApprovalListResponse(BaseModel):
    approvals: list[PendingApprovalResponse]
    total: int

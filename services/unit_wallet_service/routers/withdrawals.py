"""Withdrawal requests and the approval chain."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import Unauthorized
from libs.db.session import get_async_db
from services.unit_wallet_service.models import ApprovalDecision
from services.unit_wallet_service.schemas import (
    ApprovalActionRequest,
    ApprovalActionResponse,
    ApprovalResponse,
    PendingApprovalListResponse,
    PendingApprovalResponse,
    TransactionResponse,
    WithdrawalRequest,
    WithdrawalResponse,
)
from services.unit_wallet_service.services import approval_workflow, wallet_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


def _action_response(outcome: approval_workflow.ApprovalOutcome) -> ApprovalActionResponse:
    return ApprovalActionResponse(
        transaction=TransactionResponse.model_validate(outcome.transaction),
        approvals=[ApprovalResponse.model_validate(a) for a in outcome.approvals],
        acted_on=ApprovalResponse.model_validate(outcome.acted_on),
        next_approver_role=outcome.next_role,
    )


@router.post("/request", response_model=WithdrawalResponse, status_code=status.HTTP_201_CREATED)
async def request_withdrawal(
    body: WithdrawalRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Unit head requests a withdrawal; it waits on the full approval chain."""
    txn, approvals = await wallet_ops.request_withdrawal(
        db,
        wallet_id=body.wallet_id,
        amount=body.amount,
        description=body.description,
        actor=current_user,
    )
    return WithdrawalResponse(
        transaction=TransactionResponse.model_validate(txn),
        approvals=[ApprovalResponse.model_validate(a) for a in approvals],
        next_approver_role=approval_workflow.next_actionable_role(txn, approvals),
    )


@router.get("/pending-approvals", response_model=PendingApprovalListResponse)
async def list_pending_approvals(
    fellowship_id: Optional[int] = Query(None, description="Defaults to your fellowship"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Withdrawals currently waiting on the caller's role."""
    if fellowship_id is not None and fellowship_id != current_user.fellowship_id:
        raise Unauthorized("Cannot view approvals of another fellowship")
    pending = await approval_workflow.list_actionable(
        db, current_user.role, current_user.fellowship_id
    )
    approvals = [
        PendingApprovalResponse(
            approval=ApprovalResponse.model_validate(p.approval),
            transaction=TransactionResponse.model_validate(p.transaction),
            unit_department=p.wallet.unit_department,
        )
        for p in pending
    ]
    return PendingApprovalListResponse(approvals=approvals, total=len(approvals))


@router.get("/{transaction_id}", response_model=WithdrawalResponse)
async def get_withdrawal(
    transaction_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    detail = await approval_workflow.get_withdrawal(
        db, transaction_id=transaction_id, actor=current_user
    )
    return WithdrawalResponse(
        transaction=TransactionResponse.model_validate(detail.transaction),
        approvals=[ApprovalResponse.model_validate(a) for a in detail.approvals],
        next_approver_role=detail.next_role,
    )


@router.post("/{transaction_id}/approve", response_model=ApprovalActionResponse)
async def approve_withdrawal(
    transaction_id: uuid.UUID,
    body: ApprovalActionRequest = ApprovalActionRequest(),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    outcome = await approval_workflow.act_on_approval(
        db,
        transaction_id=transaction_id,
        actor=current_user,
        decision=ApprovalDecision.APPROVE,
        comments=body.comments,
    )
    return _action_response(outcome)


@router.post("/{transaction_id}/reject", response_model=ApprovalActionResponse)
async def reject_withdrawal(
    transaction_id: uuid.UUID,
    body: ApprovalActionRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Reject the caller's step; ``comments`` is required and becomes the failure reason."""
    outcome = await approval_workflow.act_on_approval(
        db,
        transaction_id=transaction_id,
        actor=current_user,
        decision=ApprovalDecision.REJECT,
        comments=body.comments,
    )
    return _action_response(outcome)

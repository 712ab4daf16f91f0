"""Donation endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.unit_wallet_service.schemas import (
    DonationCreateRequest,
    DonationListResponse,
    DonationReceiptResponse,
    DonationResponse,
    TransactionResponse,
)
from services.unit_wallet_service.services import donation_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/donations", tags=["donations"])


@router.post("", response_model=DonationReceiptResponse, status_code=status.HTTP_201_CREATED)
async def record_donation(
    body: DonationCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Record a donation; the wallet is credited the amount net of commission."""
    receipt = await donation_service.record_donation(
        db,
        wallet_id=body.wallet_id,
        amount=body.amount,
        payment_method=body.payment_method,
        actor=current_user,
        member_id=body.member_id,
        reference=body.vpay_reference,
        note=body.donation_note,
        is_anonymous=body.is_anonymous,
    )
    return DonationReceiptResponse(
        donation=DonationResponse.model_validate(receipt.donation),
        transaction=TransactionResponse.model_validate(receipt.transaction),
        net_amount=receipt.net_amount,
    )


@router.get("/wallet/{wallet_id}", response_model=DonationListResponse)
async def list_wallet_donations(
    wallet_id: uuid.UUID,
    limit: int = Query(donation_service.DEFAULT_DONATION_LIST_LIMIT, ge=1, le=200),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    donations = await donation_service.list_donations(
        db, wallet_id=wallet_id, actor=current_user, limit=limit
    )
    return DonationListResponse(donations=donations, total=len(donations))

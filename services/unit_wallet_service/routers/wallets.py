"""Unit wallet endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user, require_executive, require_super_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.unit_wallet_service.models import TransactionType
from services.unit_wallet_service.schemas import (
    DonationResponse,
    FellowshipTransactionResponse,
    FundWalletRequest,
    FundWalletResponse,
    TransactionListResponse,
    TransactionResponse,
    VirtualAccountRequest,
    WalletCreateRequest,
    WalletDetailResponse,
    WalletListResponse,
    WalletResponse,
    WalletStatusRequest,
    WalletSummaryResponse,
)
from services.unit_wallet_service.services import reports, wallet_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/wallets", tags=["wallets"])


def _detail(activity: wallet_ops.WalletActivity) -> WalletDetailResponse:
    return WalletDetailResponse(
        wallet=WalletResponse.model_validate(activity.wallet),
        recent_transactions=[
            TransactionResponse.model_validate(t) for t in activity.transactions
        ],
        recent_donations=[DonationResponse.model_validate(d) for d in activity.donations],
    )


# ---------------------------------------------------------------------------
# Wallets
# ---------------------------------------------------------------------------


@router.get("", response_model=WalletListResponse)
async def list_fellowship_wallets(
    fellowship_id: Optional[int] = Query(None, description="Defaults to your fellowship"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """All unit wallets of a fellowship, by department."""
    summaries = await wallet_ops.list_wallets(
        db,
        fellowship_id=fellowship_id or current_user.fellowship_id,
        actor=current_user,
    )
    wallets = [
        WalletSummaryResponse(
            **WalletResponse.model_validate(s.wallet).model_dump(),
            transaction_count=s.transaction_count,
            donation_count=s.donation_count,
        )
        for s in summaries
    ]
    return WalletListResponse(wallets=wallets, total=len(wallets))


@router.post("", response_model=WalletResponse, status_code=status.HTTP_201_CREATED)
async def create_unit_wallet(
    body: WalletCreateRequest,
    current_user: AuthUser = Depends(require_executive),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a wallet for a department (executives only)."""
    return await wallet_ops.create_wallet(
        db,
        fellowship_id=body.fellowship_id or current_user.fellowship_id,
        department=body.unit_department,
        actor=current_user,
    )


@router.get("/my-unit", response_model=WalletDetailResponse)
async def get_my_unit_wallet(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Wallet of the caller's own department, created on first access."""
    return _detail(await wallet_ops.get_my_unit_wallet(db, actor=current_user))


@router.get("/department/{department}", response_model=WalletDetailResponse)
async def get_department_wallet(
    department: str,
    fellowship_id: Optional[int] = Query(None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Department wallet with recent activity; anonymous donations are hidden."""
    activity = await wallet_ops.get_wallet_by_department(
        db,
        fellowship_id=fellowship_id or current_user.fellowship_id,
        department=department,
        actor=current_user,
    )
    return _detail(activity)


@router.get("/transactions/all", response_model=TransactionListResponse)
async def list_all_transactions(
    fellowship_id: Optional[int] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    transaction_type: Optional[TransactionType] = Query(None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Every unit-wallet transaction of the fellowship (finance oversight)."""
    rows = await reports.list_all_transactions(
        db,
        fellowship_id=fellowship_id or current_user.fellowship_id,
        actor=current_user,
        start=start_date,
        end=end_date,
        transaction_type=transaction_type,
    )
    transactions = [
        FellowshipTransactionResponse(
            **TransactionResponse.model_validate(txn).model_dump(),
            unit_department=wallet.unit_department,
        )
        for txn, wallet in rows
    ]
    return TransactionListResponse(transactions=transactions, total=len(transactions))


@router.get("/{wallet_id}", response_model=WalletDetailResponse)
async def get_wallet(
    wallet_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Wallet with its recent transactions and donations."""
    activity = await wallet_ops.get_wallet_activity(
        db, wallet_id=wallet_id, actor=current_user
    )
    return _detail(activity)


# ---------------------------------------------------------------------------
# Funding & administration
# ---------------------------------------------------------------------------


@router.post("/{wallet_id}/fund", response_model=FundWalletResponse)
async def fund_wallet_from_treasury(
    wallet_id: uuid.UUID,
    body: FundWalletRequest,
    current_user: AuthUser = Depends(require_executive),
    db: AsyncSession = Depends(get_async_db),
):
    """Transfer from the fellowship treasury into a unit wallet."""
    wallet, txn = await wallet_ops.fund_from_treasury(
        db,
        wallet_id=wallet_id,
        amount=body.amount,
        description=body.description,
        approver=current_user,
    )
    return FundWalletResponse(
        wallet=WalletResponse.model_validate(wallet),
        transaction=TransactionResponse.model_validate(txn),
    )


@router.post("/{wallet_id}/virtual-account", response_model=WalletResponse)
async def link_virtual_account(
    wallet_id: uuid.UUID,
    body: VirtualAccountRequest,
    current_user: AuthUser = Depends(require_executive),
    db: AsyncSession = Depends(get_async_db),
):
    """Attach the VPay virtual account that routes transfers to this wallet."""
    return await wallet_ops.link_virtual_account(
        db,
        wallet_id=wallet_id,
        account_number=body.account_number,
        account_name=body.account_name,
        actor=current_user,
    )


@router.post("/{wallet_id}/status", response_model=WalletResponse)
async def set_wallet_status(
    wallet_id: uuid.UUID,
    body: WalletStatusRequest,
    current_user: AuthUser = Depends(require_super_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Suspend or reactivate a wallet."""
    return await wallet_ops.set_wallet_status(
        db, wallet_id=wallet_id, status=body.status, actor=current_user
    )

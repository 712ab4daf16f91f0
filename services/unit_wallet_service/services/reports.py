"""Oversight reads: fellowship-wide transaction listing and commission report."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from libs.auth.models import AuthUser, OrgRole
from libs.common.datetime_utils import to_utc
from libs.common.errors import Unauthorized, ValidationError
from services.unit_wallet_service.models import (
    BrainiacCommission,
    TransactionType,
    UnitWallet,
    WalletTransaction,
)
from services.unit_wallet_service.services import ledger_store
from sqlalchemy.ext.asyncio import AsyncSession

FINANCE_DEPARTMENT = "FINANCE"
_OVERSIGHT_ROLES = frozenset({OrgRole.FINANCIAL_SECRETARY, OrgRole.SUPER_ADMIN})


@dataclass
class CommissionTotals:
    total_commission_kobo: int = 0
    total_vpay_fees_kobo: int = 0
    total_processed_kobo: int = 0
    total_net_kobo: int = 0
    count: int = 0


@dataclass
class CommissionReport:
    commissions: list[BrainiacCommission] = field(default_factory=list)
    totals: CommissionTotals = field(default_factory=CommissionTotals)


def can_view_all_transactions(actor: AuthUser) -> bool:
    return actor.role in _OVERSIGHT_ROLES or actor.department == FINANCE_DEPARTMENT


def _check_range(
    start: Optional[datetime], end: Optional[datetime]
) -> tuple[Optional[datetime], Optional[datetime]]:
    start, end = to_utc(start), to_utc(end)
    if start and end and start > end:
        raise ValidationError("start must not be after end")
    return start, end


async def list_all_transactions(
    db: AsyncSession,
    *,
    fellowship_id: int,
    actor: AuthUser,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    transaction_type: Optional[TransactionType] = None,
) -> list[tuple[WalletTransaction, UnitWallet]]:
    """Every unit-wallet transaction of a fellowship, newest first."""
    if not can_view_all_transactions(actor):
        raise Unauthorized("Only finance can view all transactions")
    if actor.fellowship_id != fellowship_id and actor.role != OrgRole.SUPER_ADMIN:
        raise Unauthorized("Cannot view transactions of another fellowship")
    start, end = _check_range(start, end)
    return await ledger_store.list_fellowship_transactions(
        db, fellowship_id, start=start, end=end, transaction_type=transaction_type
    )


def summarize_commissions(commissions: list[BrainiacCommission]) -> CommissionTotals:
    totals = CommissionTotals(count=len(commissions))
    for row in commissions:
        totals.total_commission_kobo += row.brainiac_cut_kobo
        totals.total_vpay_fees_kobo += row.vpay_fee_kobo
        totals.total_processed_kobo += row.original_amount_kobo
        totals.total_net_kobo += row.net_amount_kobo
    return totals


async def get_commission_report(
    db: AsyncSession,
    *,
    actor: AuthUser,
    fellowship_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> CommissionReport:
    """Platform commission across fellowships (super admin only)."""
    if actor.role != OrgRole.SUPER_ADMIN:
        raise Unauthorized("Admin privileges required")
    start, end = _check_range(start, end)
    commissions = await ledger_store.list_commissions(
        db, fellowship_id=fellowship_id, start=start, end=end
    )
    return CommissionReport(commissions=commissions, totals=summarize_commissions(commissions))

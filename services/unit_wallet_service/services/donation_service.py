"""Donation recording — manual entry and the shared atomic credit unit.

A donation is four writes that succeed or fail together: the MemberDonation,
its COMPLETED deposit, the balance increment by the net amount and, for
externally routed payments, the BrainiacCommission row.
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.currency import MoneyInput, format_naira, kobo_to_naira
from libs.common.errors import Conflict, InvalidAmount
from libs.common.logging import get_logger
from services.unit_wallet_service.models import (
    EXTERNAL_PAYMENT_METHODS,
    BrainiacCommission,
    DonationPaymentMethod,
    MemberDonation,
    UnitWallet,
    WalletTransaction,
)
from services.unit_wallet_service.services import ledger_store, wallet_ops
from services.unit_wallet_service.services.commission import (
    CommissionBreakdown,
    calculate_commission,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_DONATION_LIST_LIMIT = 50


@dataclass
class DonationReceipt:
    donation: MemberDonation
    transaction: WalletTransaction
    commission: Optional[BrainiacCommission]
    balance_after_kobo: int

    @property
    def net_amount(self) -> Decimal:
        return kobo_to_naira(self.donation.amount_kobo)


def breakdown_for(gross_kobo: int, payment_method: DonationPaymentMethod) -> CommissionBreakdown:
    try:
        return calculate_commission(gross_kobo, payment_method)
    except ValueError as exc:
        raise InvalidAmount(str(exc)) from exc


async def stage_donation(
    db: AsyncSession,
    *,
    wallet: UnitWallet,
    breakdown: CommissionBreakdown,
    payment_method: DonationPaymentMethod,
    description: str,
    reference: Optional[str] = None,
    member_id: Optional[str] = None,
    note: Optional[str] = None,
    payer_name: Optional[str] = None,
    payer_phone: Optional[str] = None,
    is_anonymous: bool = False,
    initiated_by: Optional[str] = None,
) -> DonationReceipt:
    """Stage every write of a donation in the caller's unit of work."""
    txn, balance_after = await wallet_ops.stage_deposit(
        db,
        wallet_id=wallet.id,
        amount_kobo=breakdown.net_kobo,
        description=description,
        reference=reference,
        initiated_by=initiated_by,
    )
    donation = MemberDonation(
        id=uuid.uuid4(),
        wallet_id=wallet.id,
        member_id=member_id,
        amount_kobo=breakdown.net_kobo,
        gross_amount_kobo=breakdown.gross_kobo,
        payment_method=payment_method,
        vpay_reference=reference,
        donation_note=note,
        payer_name=payer_name,
        payer_phone=payer_phone,
        is_anonymous=is_anonymous,
        transaction_id=txn.id,
    )
    db.add(donation)

    commission = None
    if payment_method in EXTERNAL_PAYMENT_METHODS:
        commission = BrainiacCommission(
            fellowship_id=wallet.fellowship_id,
            transaction_id=txn.id,
            original_amount_kobo=breakdown.gross_kobo,
            vpay_fee_kobo=breakdown.processor_fee_kobo,
            brainiac_cut_kobo=breakdown.platform_cut_kobo,
            net_amount_kobo=breakdown.net_kobo,
            commission_rate=breakdown.commission_rate,
        )
        db.add(commission)
    await db.flush()
    return DonationReceipt(
        donation=donation,
        transaction=txn,
        commission=commission,
        balance_after_kobo=balance_after,
    )


async def record_donation(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    amount: MoneyInput,
    payment_method: DonationPaymentMethod,
    actor: AuthUser,
    member_id: Optional[str] = None,
    reference: Optional[str] = None,
    note: Optional[str] = None,
    is_anonymous: bool = False,
) -> DonationReceipt:
    """Record a donation entered by a fellowship user.

    ``amount`` is gross; the wallet is credited the net after commission.
    A reference that was already recorded raises Conflict.
    """
    gross_kobo = wallet_ops.parse_amount(amount)
    breakdown = breakdown_for(gross_kobo, payment_method)
    reference = (reference or "").strip() or None
    note = (note or "").strip() or None
    duplicate = f"Payment reference {reference} already recorded" if reference else None

    async with ledger_store.unit_of_work(db, "donation", conflict_detail=duplicate):
        wallet = await ledger_store.get_wallet(db, wallet_id)
        wallet_ops.ensure_same_fellowship(actor, wallet)
        if reference and await ledger_store.find_transaction_by_reference(db, reference):
            raise Conflict(duplicate)
        receipt = await stage_donation(
            db,
            wallet=wallet,
            breakdown=breakdown,
            payment_method=payment_method,
            description=f"Donation from member: {note}" if note else "Donation from member",
            reference=reference,
            member_id=member_id,
            note=note,
            is_anonymous=is_anonymous,
            initiated_by=actor.user_id,
        )

    logger.info(
        "Donation %s (%s gross, %s net via %s) to unit wallet %s recorded by %s, balance now %s",
        receipt.donation.id,
        format_naira(breakdown.gross_kobo),
        format_naira(breakdown.net_kobo),
        payment_method.value,
        wallet.id,
        actor.user_id,
        format_naira(receipt.balance_after_kobo),
    )
    return receipt


async def list_donations(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    actor: AuthUser,
    limit: int = DEFAULT_DONATION_LIST_LIMIT,
) -> list[MemberDonation]:
    """Most recent donations to a wallet, newest first."""
    wallet = await ledger_store.get_wallet(db, wallet_id)
    wallet_ops.ensure_same_fellowship(actor, wallet)
    return await ledger_store.recent_donations(db, wallet.id, limit)

"""Ledger store — queries and atomic primitives over the unit-wallet tables.

Balances are only ever changed by a single UPDATE that bypasses the identity map,
so wallet reads always repopulate from the database.

Nothing here commits. Callers compose these helpers into one unit of work and
commit once inside ``unit_of_work`` so a failure leaves no partial state.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional, Sequence

from libs.common.errors import Conflict, LedgerError, NotFound, PersistenceError
from libs.common.logging import get_logger
from services.unit_wallet_service.models import (
    BrainiacCommission,
    MemberDonation,
    TransactionApproval,
    TransactionType,
    UnitWallet,
    WalletTransaction,
)
from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------


@asynccontextmanager
async def unit_of_work(
    db: AsyncSession, operation: str, *, conflict_detail: Optional[str] = None
) -> AsyncIterator[None]:
    """Run the enclosed writes as one commit; any failure rolls all of them back.

    A constraint violation becomes ``Conflict(conflict_detail)`` when the
    caller expects one (duplicate references), otherwise every storage failure
    surfaces as ``PersistenceError``. Ledger errors raised inside the block
    roll back and propagate unchanged.
    """
    try:
        yield
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    except IntegrityError as exc:
        await db.rollback()
        if conflict_detail:
            logger.info("Rejected %s: %s", operation, conflict_detail)
            raise Conflict(conflict_detail) from exc
        logger.error("Rolled back %s: %s", operation, exc)
        raise PersistenceError(f"Could not complete {operation}; nothing was applied") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Rolled back %s: %s", operation, exc)
        raise PersistenceError(f"Could not complete {operation}; nothing was applied") from exc


# ---------------------------------------------------------------------------
# Wallets
# ---------------------------------------------------------------------------


def normalize_department(department: str) -> str:
    return department.strip().upper()


async def get_wallet(db: AsyncSession, wallet_id: uuid.UUID) -> UnitWallet:
    """Get wallet by ID. Raises NotFound if absent."""
    result = await db.execute(
        select(UnitWallet)
        .where(UnitWallet.id == wallet_id)
        .execution_options(populate_existing=True)
    )
    wallet = result.scalar_one_or_none()
    if not wallet:
        raise NotFound("Wallet not found")
    return wallet


async def lock_wallet(db: AsyncSession, wallet_id: uuid.UUID) -> UnitWallet:
    """SELECT ... FOR UPDATE on the wallet row, refreshing any cached copy."""
    result = await db.execute(
        select(UnitWallet)
        .where(UnitWallet.id == wallet_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    wallet = result.scalar_one_or_none()
    if not wallet:
        raise NotFound("Wallet not found")
    return wallet


async def find_wallet_by_department(
    db: AsyncSession, fellowship_id: int, department: str
) -> Optional[UnitWallet]:
    result = await db.execute(
        select(UnitWallet)
        .where(
            UnitWallet.fellowship_id == fellowship_id,
            UnitWallet.unit_department == normalize_department(department),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_wallet_by_virtual_account(
    db: AsyncSession, account_number: str
) -> Optional[UnitWallet]:
    result = await db.execute(
        select(UnitWallet)
        .where(UnitWallet.vpay_virtual_account == account_number.strip())
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_wallets_with_counts(
    db: AsyncSession, fellowship_id: int
) -> list[tuple[UnitWallet, int, int]]:
    """Wallets of a fellowship ordered by department, with activity counts."""
    txn_counts = (
        select(WalletTransaction.wallet_id, func.count().label("n"))
        .group_by(WalletTransaction.wallet_id)
        .subquery()
    )
    donation_counts = (
        select(MemberDonation.wallet_id, func.count().label("n"))
        .group_by(MemberDonation.wallet_id)
        .subquery()
    )
    result = await db.execute(
        select(
            UnitWallet,
            func.coalesce(txn_counts.c.n, 0),
            func.coalesce(donation_counts.c.n, 0),
        )
        .outerjoin(txn_counts, txn_counts.c.wallet_id == UnitWallet.id)
        .outerjoin(donation_counts, donation_counts.c.wallet_id == UnitWallet.id)
        .where(UnitWallet.fellowship_id == fellowship_id)
        .order_by(UnitWallet.unit_department)
        .execution_options(populate_existing=True)
    )
    return [(wallet, int(t), int(d)) for wallet, t, d in result.all()]


async def increment_balance(db: AsyncSession, wallet_id: uuid.UUID, amount_kobo: int) -> int:
    """Atomically add ``amount_kobo`` to the wallet balance. Returns the new balance.

    A single UPDATE ... SET balance = balance + n, never read-then-write.
    """
    result = await db.execute(
        update(UnitWallet)
        .where(UnitWallet.id == wallet_id)
        .values(balance_kobo=UnitWallet.balance_kobo + amount_kobo)
        .returning(UnitWallet.balance_kobo)
        .execution_options(synchronize_session=False)
    )
    new_balance = result.scalar_one_or_none()
    if new_balance is None:
        raise NotFound("Wallet not found")
    return new_balance


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


async def get_transaction(db: AsyncSession, transaction_id: uuid.UUID) -> WalletTransaction:
    result = await db.execute(
        select(WalletTransaction).where(WalletTransaction.id == transaction_id)
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise NotFound("Transaction not found")
    return txn


async def lock_transaction(db: AsyncSession, transaction_id: uuid.UUID) -> WalletTransaction:
    """Row-lock a transaction; serializes approval actions on it."""
    result = await db.execute(
        select(WalletTransaction)
        .where(WalletTransaction.id == transaction_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise NotFound("Transaction not found")
    return txn


async def find_transaction_by_reference(
    db: AsyncSession, reference: str
) -> Optional[WalletTransaction]:
    """Existence check by external payment reference (idempotency)."""
    result = await db.execute(
        select(WalletTransaction).where(WalletTransaction.vpay_reference == reference)
    )
    return result.scalar_one_or_none()


async def recent_transactions(
    db: AsyncSession, wallet_id: uuid.UUID, limit: int
) -> list[WalletTransaction]:
    result = await db.execute(
        select(WalletTransaction)
        .where(WalletTransaction.wallet_id == wallet_id)
        .order_by(desc(WalletTransaction.created_at))
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_fellowship_transactions(
    db: AsyncSession,
    fellowship_id: int,
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    transaction_type: Optional[TransactionType] = None,
) -> list[tuple[WalletTransaction, UnitWallet]]:
    query = (
        select(WalletTransaction, UnitWallet)
        .join(UnitWallet, UnitWallet.id == WalletTransaction.wallet_id)
        .where(UnitWallet.fellowship_id == fellowship_id)
    )
    if transaction_type:
        query = query.where(WalletTransaction.transaction_type == transaction_type)
    if start:
        query = query.where(WalletTransaction.created_at >= start)
    if end:
        query = query.where(WalletTransaction.created_at <= end)
    result = await db.execute(query.order_by(desc(WalletTransaction.created_at)))
    return [(txn, wallet) for txn, wallet in result.all()]


# ---------------------------------------------------------------------------
# Approvals
# ---------------------------------------------------------------------------


async def list_approvals(
    db: AsyncSession, transaction_ids: Sequence[uuid.UUID]
) -> list[TransactionApproval]:
    """Approval rows for the given transactions, ordered by chain position."""
    if not transaction_ids:
        return []
    result = await db.execute(
        select(TransactionApproval)
        .where(TransactionApproval.transaction_id.in_(transaction_ids))
        .order_by(TransactionApproval.transaction_id, TransactionApproval.approval_order)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Donations & commissions
# ---------------------------------------------------------------------------


async def recent_donations(
    db: AsyncSession,
    wallet_id: uuid.UUID,
    limit: int,
    *,
    include_anonymous: bool = True,
) -> list[MemberDonation]:
    query = select(MemberDonation).where(MemberDonation.wallet_id == wallet_id)
    if not include_anonymous:
        query = query.where(MemberDonation.is_anonymous.is_(False))
    result = await db.execute(query.order_by(desc(MemberDonation.created_at)).limit(limit))
    return list(result.scalars().all())


async def find_donation_for_transaction(
    db: AsyncSession, transaction_id: uuid.UUID
) -> Optional[MemberDonation]:
    result = await db.execute(
        select(MemberDonation).where(MemberDonation.transaction_id == transaction_id)
    )
    return result.scalar_one_or_none()


async def list_commissions(
    db: AsyncSession,
    *,
    fellowship_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[BrainiacCommission]:
    query = select(BrainiacCommission)
    if fellowship_id is not None:
        query = query.where(BrainiacCommission.fellowship_id == fellowship_id)
    if start:
        query = query.where(BrainiacCommission.created_at >= start)
    if end:
        query = query.where(BrainiacCommission.created_at <= end)
    result = await db.execute(query.order_by(desc(BrainiacCommission.created_at)))
    return list(result.scalars().all())

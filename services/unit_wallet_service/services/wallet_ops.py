"""Core unit-wallet operations — atomic credit, withdrawal reservation and treasury funding."""

import uuid
from dataclasses import dataclass, field
from typing import Optional

from libs.auth.models import AuthUser, OrgRole
from libs.common.config import get_settings
from libs.common.currency import (
    MoneyInput,
    format_naira,
    has_sub_kobo_precision,
    naira_to_kobo,
    to_decimal,
)
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    Conflict,
    InsufficientBalance,
    InvalidAmount,
    NotFound,
    PersistenceError,
    Unauthorized,
    ValidationError,
)
from libs.common.logging import get_logger
from services.unit_wallet_service.models import (
    MemberDonation,
    TransactionApproval,
    TransactionStatus,
    TransactionType,
    TreasuryTransaction,
    UnitWallet,
    WalletStatus,
    WalletTransaction,
)
from services.unit_wallet_service.services import ledger_store
from services.unit_wallet_service.services.approval_workflow import (
    ApprovalChainStep,
    approval_chain_for,
    initiate,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
settings = get_settings()


@dataclass
class WalletActivity:
    wallet: UnitWallet
    transactions: list[WalletTransaction] = field(default_factory=list)
    donations: list[MemberDonation] = field(default_factory=list)


@dataclass
class WalletSummary:
    wallet: UnitWallet
    transaction_count: int
    donation_count: int


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def parse_amount(amount: Optional[MoneyInput]) -> int:
    """Validate a Naira amount and convert it to kobo.

    Raises InvalidAmount for missing, non-positive or sub-kobo amounts.
    """
    if amount is None:
        raise InvalidAmount("Amount is required")
    try:
        value = to_decimal(amount)
    except ValueError as exc:
        raise InvalidAmount(str(exc)) from exc
    if not value.is_finite() or value <= 0:
        raise InvalidAmount("Amount must be greater than 0")
    if has_sub_kobo_precision(value):
        raise InvalidAmount("Amount cannot have more than 2 decimal places")
    return naira_to_kobo(value)


def ensure_same_fellowship(actor: AuthUser, wallet: UnitWallet) -> None:
    if actor.fellowship_id != wallet.fellowship_id:
        raise Unauthorized("Wallet belongs to another fellowship")


def ensure_executive(actor: AuthUser) -> None:
    if not actor.is_executive:
        raise Unauthorized("Executive privileges required")


# ---------------------------------------------------------------------------
# Wallet creation
# ---------------------------------------------------------------------------


async def get_or_create_wallet(
    db: AsyncSession, *, fellowship_id: int, department: str
) -> UnitWallet:
    """Return the wallet for (fellowship, department), creating it if absent.

    Idempotent — a concurrent creator losing the unique-constraint race gets
    the winner's row.
    """
    if not department or not department.strip():
        raise ValidationError("Department is required")

    existing = await ledger_store.find_wallet_by_department(db, fellowship_id, department)
    if existing:
        return existing

    wallet = UnitWallet(
        fellowship_id=fellowship_id,
        unit_department=ledger_store.normalize_department(department),
        balance_kobo=0,
        status=WalletStatus.ACTIVE,
    )
    try:
        async with ledger_store.unit_of_work(
            db, "wallet creation", conflict_detail="Wallet already exists for this department"
        ):
            db.add(wallet)
    except Conflict as exc:
        existing = await ledger_store.find_wallet_by_department(db, fellowship_id, department)
        if existing:
            return existing
        raise PersistenceError("Could not create unit wallet") from exc
    await db.refresh(wallet)

    logger.info(
        "Created unit wallet %s for fellowship %s department %s",
        wallet.id,
        fellowship_id,
        wallet.unit_department,
    )
    return wallet


async def create_wallet(
    db: AsyncSession, *, fellowship_id: int, department: str, actor: AuthUser
) -> UnitWallet:
    """Explicit creation by an executive. Conflict if the wallet already exists."""
    ensure_executive(actor)
    if actor.fellowship_id != fellowship_id:
        raise Unauthorized("Cannot create wallets for another fellowship")
    if await ledger_store.find_wallet_by_department(db, fellowship_id, department):
        raise Conflict("Wallet already exists for this department")
    return await get_or_create_wallet(db, fellowship_id=fellowship_id, department=department)


# ---------------------------------------------------------------------------
# Credit (atomic)
# ---------------------------------------------------------------------------


async def stage_deposit(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    amount_kobo: int,
    description: str,
    reference: Optional[str] = None,
    initiated_by: Optional[str] = None,
) -> tuple[WalletTransaction, int]:
    """Add a COMPLETED deposit and increment the balance, without committing.

    Returns ``(transaction, balance_after)`` for callers that bundle more rows
    into the same unit of work.
    """
    txn = WalletTransaction(
        id=uuid.uuid4(),
        wallet_id=wallet_id,
        transaction_type=TransactionType.DEPOSIT,
        amount_kobo=amount_kobo,
        description=description,
        vpay_reference=reference,
        status=TransactionStatus.COMPLETED,
        initiated_by=initiated_by,
        completed_at=utc_now(),
    )
    db.add(txn)
    balance_after = await ledger_store.increment_balance(db, wallet_id, amount_kobo)
    await db.flush()
    return txn, balance_after


async def credit(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    amount: MoneyInput,
    description: str,
    reference: Optional[str] = None,
    initiated_by: Optional[str] = None,
) -> WalletTransaction:
    """Record a COMPLETED deposit and atomically increment the balance.

    Credits are accepted on suspended wallets.
    """
    amount_kobo = parse_amount(amount)
    duplicate = f"Payment reference {reference} already recorded" if reference else None

    async with ledger_store.unit_of_work(db, "wallet credit", conflict_detail=duplicate):
        await ledger_store.get_wallet(db, wallet_id)
        if reference and await ledger_store.find_transaction_by_reference(db, reference):
            raise Conflict(duplicate)
        txn, balance_after = await stage_deposit(
            db,
            wallet_id=wallet_id,
            amount_kobo=amount_kobo,
            description=description,
            reference=reference,
            initiated_by=initiated_by,
        )

    logger.info(
        "Credit %s to unit wallet %s by %s, balance now %s",
        format_naira(amount_kobo),
        wallet_id,
        initiated_by or "system",
        format_naira(balance_after),
    )
    return txn


# ---------------------------------------------------------------------------
# Withdrawal reservation
# ---------------------------------------------------------------------------


async def debit_reserve(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    amount: MoneyInput,
    description: str,
    initiator: AuthUser,
    chain: Optional[tuple[ApprovalChainStep, ...]] = None,
) -> tuple[WalletTransaction, list[TransactionApproval]]:
    """Create a PENDING withdrawal and its approval chain in one commit.

    The balance is checked under a row lock but not decremented; money only
    leaves the wallet at disbursement, which happens outside this service.
    """
    amount_kobo = parse_amount(amount)
    if not description or not description.strip():
        raise ValidationError("Description is required")

    async with ledger_store.unit_of_work(db, "withdrawal request"):
        wallet = await ledger_store.lock_wallet(db, wallet_id)
        ensure_same_fellowship(initiator, wallet)
        ensure_executive(initiator)
        if initiator.department != wallet.unit_department:
            raise Unauthorized("Only unit heads can request withdrawals for their department")
        if wallet.status != WalletStatus.ACTIVE:
            raise ValidationError("Wallet temporarily suspended")
        if wallet.balance_kobo < amount_kobo:
            raise InsufficientBalance(
                f"Insufficient wallet balance: requested {format_naira(amount_kobo)}, "
                f"available {format_naira(wallet.balance_kobo)}"
            )

        txn = WalletTransaction(
            id=uuid.uuid4(),
            wallet_id=wallet.id,
            transaction_type=TransactionType.WITHDRAWAL,
            amount_kobo=amount_kobo,
            description=description.strip(),
            status=TransactionStatus.PENDING,
            initiated_by=initiator.user_id,
        )
        db.add(txn)
        await db.flush()
        steps = initiate(db, txn, chain or approval_chain_for(wallet.fellowship_id))
        await db.flush()

    logger.info(
        "Withdrawal %s of %s requested on unit wallet %s by %s (balance %s, %d approvals)",
        txn.id,
        format_naira(amount_kobo),
        wallet.id,
        initiator.user_id,
        format_naira(wallet.balance_kobo),
        len(steps),
    )
    return txn, steps


async def request_withdrawal(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    amount: MoneyInput,
    description: str,
    actor: AuthUser,
) -> tuple[WalletTransaction, list[TransactionApproval]]:
    """Withdrawal request as exposed over HTTP: the fellowship's configured chain."""
    return await debit_reserve(
        db, wallet_id=wallet_id, amount=amount, description=description, initiator=actor
    )


# ---------------------------------------------------------------------------
# Treasury funding (atomic)
# ---------------------------------------------------------------------------


async def fund_from_treasury(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    amount: MoneyInput,
    description: str,
    approver: AuthUser,
) -> tuple[UnitWallet, WalletTransaction]:
    """Move money from the fellowship treasury into a unit wallet.

    The treasury expense, the wallet deposit and the balance increment share
    one commit.
    """
    ensure_executive(approver)
    amount_kobo = parse_amount(amount)
    description = (description or "").strip() or "Unit funding"

    async with ledger_store.unit_of_work(db, "treasury funding"):
        wallet = await ledger_store.get_wallet(db, wallet_id)
        ensure_same_fellowship(approver, wallet)
        txn, balance_after = await stage_deposit(
            db,
            wallet_id=wallet.id,
            amount_kobo=amount_kobo,
            description=f"Received from Main Treasury: {description}",
            initiated_by=approver.user_id,
        )
        db.add(
            TreasuryTransaction(
                fellowship_id=wallet.fellowship_id,
                amount_kobo=amount_kobo,
                description=f"Funding for {wallet.unit_department}: {description}",
                approved_by=approver.user_id,
                approved_at=utc_now(),
                wallet_transaction_id=txn.id,
            )
        )
    await db.refresh(wallet)

    logger.info(
        "Treasury funded unit wallet %s with %s by %s, balance now %s",
        wallet.id,
        format_naira(amount_kobo),
        approver.user_id,
        format_naira(balance_after),
    )
    return wallet, txn


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


async def link_virtual_account(
    db: AsyncSession,
    *,
    wallet_id: uuid.UUID,
    account_number: str,
    account_name: Optional[str],
    actor: AuthUser,
) -> UnitWallet:
    """Attach the VPay virtual account that webhook deliveries are routed by."""
    ensure_executive(actor)
    account_number = (account_number or "").strip()
    if not account_number:
        raise ValidationError("Account number is required")

    taken = "Virtual account is already linked to another wallet"
    async with ledger_store.unit_of_work(db, "virtual account link", conflict_detail=taken):
        wallet = await ledger_store.get_wallet(db, wallet_id)
        ensure_same_fellowship(actor, wallet)
        holder = await ledger_store.find_wallet_by_virtual_account(db, account_number)
        if holder and holder.id != wallet.id:
            raise Conflict(taken)
        wallet.vpay_virtual_account = account_number
        wallet.vpay_account_name = account_name
        await db.flush()

    logger.info(
        "Linked virtual account %s to unit wallet %s by %s",
        account_number,
        wallet.id,
        actor.user_id,
    )
    return wallet


async def set_wallet_status(
    db: AsyncSession, *, wallet_id: uuid.UUID, status: WalletStatus, actor: AuthUser
) -> UnitWallet:
    if actor.role != OrgRole.SUPER_ADMIN:
        raise Unauthorized("Admin privileges required")
    async with ledger_store.unit_of_work(db, "wallet status change"):
        wallet = await ledger_store.lock_wallet(db, wallet_id)
        ensure_same_fellowship(actor, wallet)
        wallet.status = status
        await db.flush()
    logger.info("Unit wallet %s set to %s by %s", wallet.id, status.value, actor.user_id)
    return wallet


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_wallet_activity(
    db: AsyncSession, *, wallet_id: uuid.UUID, actor: AuthUser
) -> WalletActivity:
    """Wallet plus its most recent transactions and donations."""
    wallet = await ledger_store.get_wallet(db, wallet_id)
    ensure_same_fellowship(actor, wallet)
    return await _with_activity(db, wallet, settings.WALLET_RECENT_ACTIVITY_LIMIT)


async def get_wallet_by_department(
    db: AsyncSession, *, fellowship_id: int, department: str, actor: AuthUser
) -> WalletActivity:
    if actor.fellowship_id != fellowship_id:
        raise Unauthorized("Wallet belongs to another fellowship")
    wallet = await ledger_store.find_wallet_by_department(db, fellowship_id, department)
    if not wallet:
        raise NotFound("Wallet not found for this department")
    return await _with_activity(db, wallet, 10, include_anonymous=False)


async def get_my_unit_wallet(db: AsyncSession, *, actor: AuthUser) -> WalletActivity:
    """The actor's own department wallet, created on first access."""
    if not actor.department:
        raise ValidationError("User does not belong to a department")
    wallet = await get_or_create_wallet(
        db, fellowship_id=actor.fellowship_id, department=actor.department
    )
    return await _with_activity(db, wallet, 10)


async def list_wallets(
    db: AsyncSession, *, fellowship_id: int, actor: AuthUser
) -> list[WalletSummary]:
    if actor.fellowship_id != fellowship_id:
        raise Unauthorized("Cannot list wallets of another fellowship")
    rows = await ledger_store.list_wallets_with_counts(db, fellowship_id)
    return [WalletSummary(wallet=w, transaction_count=t, donation_count=d) for w, t, d in rows]


async def _with_activity(
    db: AsyncSession, wallet: UnitWallet, limit: int, *, include_anonymous: bool = True
) -> WalletActivity:
    return WalletActivity(
        wallet=wallet,
        transactions=await ledger_store.recent_transactions(db, wallet.id, limit),
        donations=await ledger_store.recent_donations(
            db, wallet.id, limit, include_anonymous=include_anonymous
        ),
    )
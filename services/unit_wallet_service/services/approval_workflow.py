"""Sequential approval chain for unit-wallet withdrawals.

A withdrawal carries one TransactionApproval row per chain position. A step is
actionable only when every lower-order step on the same transaction is
APPROVED and the parent transaction is still PENDING; the same role may hold
more than one position, so actions always target the earliest matching step.

Every action locks the parent transaction row before reading the chain, and
the step update is guarded by ``status = 'pending'`` so two approvers racing
for one position produce exactly one success.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Sequence

from libs.auth.models import AuthUser, OrgRole
from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, OutOfOrder, Unauthorized, ValidationError
from libs.common.logging import get_logger
from services.unit_wallet_service.models import (
    TRANSACTION_TRANSITIONS,
    ApprovalDecision,
    ApprovalStatus,
    TransactionApproval,
    TransactionStatus,
    TransactionType,
    UnitWallet,
    WalletTransaction,
)
from services.unit_wallet_service.services import ledger_store
from sqlalchemy import and_, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

logger = get_logger(__name__)


@dataclass(frozen=True)
class ApprovalChainStep:
    order: int
    role: OrgRole
    label: str


DEFAULT_APPROVAL_CHAIN: tuple[ApprovalChainStep, ...] = (
    ApprovalChainStep(1, OrgRole.SECRETARY_GENERAL, "Secretary General (Initial)"),
    ApprovalChainStep(2, OrgRole.PRESIDENCY, "President"),
    ApprovalChainStep(3, OrgRole.VICE_PRESIDENT, "Vice President"),
    ApprovalChainStep(4, OrgRole.SECRETARY_GENERAL, "Secretary General (Final)"),
    ApprovalChainStep(5, OrgRole.FINANCIAL_SECRETARY, "Financial Secretary"),
)


@dataclass
class PendingApproval:
    """An approval step that is the caller's turn, with its withdrawal."""

    approval: TransactionApproval
    transaction: WalletTransaction
    wallet: UnitWallet


@dataclass
class WithdrawalDetail:
    transaction: WalletTransaction
    wallet: UnitWallet
    approvals: list[TransactionApproval] = field(default_factory=list)

    @property
    def next_role(self) -> Optional[OrgRole]:
        return next_actionable_role(self.transaction, self.approvals)


@dataclass
class ApprovalOutcome:
    transaction: WalletTransaction
    approvals: list[TransactionApproval]
    acted_on: TransactionApproval
    next_role: Optional[OrgRole] = None


# ---------------------------------------------------------------------------
# Chain configuration
# ---------------------------------------------------------------------------


def approval_chain_for(fellowship_id: int) -> tuple[ApprovalChainStep, ...]:
    """Chain used for new withdrawals in a fellowship.

    Every fellowship uses the default chain; the lookup is keyed by fellowship
    so a per-fellowship chain can be stored without touching callers.
    """
    return DEFAULT_APPROVAL_CHAIN


def validate_chain(chain: Sequence[ApprovalChainStep]) -> None:
    if not chain:
        raise ValueError("Approval chain must have at least one step")
    orders = sorted(step.order for step in chain)
    if orders != list(range(1, len(chain) + 1)):
        raise ValueError(f"Approval chain orders must run 1..{len(chain)}, got {orders}")


def initiate(
    db: AsyncSession, txn: WalletTransaction, chain: Sequence[ApprovalChainStep]
) -> list[TransactionApproval]:
    """Add one PENDING approval per chain step to the caller's unit of work."""
    validate_chain(chain)
    steps = [
        TransactionApproval(
            id=uuid.uuid4(),
            transaction_id=txn.id,
            approver_role=step.role,
            approval_order=step.order,
            label=step.label,
            status=ApprovalStatus.PENDING,
        )
        for step in sorted(chain, key=lambda s: s.order)
    ]
    db.add_all(steps)
    return steps


# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------


def can_act_on_approval(actor: AuthUser, step: TransactionApproval) -> bool:
    """Role match only; department never gates an approval."""
    return actor.role == step.approver_role


def is_ready(step: TransactionApproval, chain: Sequence[TransactionApproval]) -> bool:
    return step.status == ApprovalStatus.PENDING and all(
        other.status == ApprovalStatus.APPROVED
        for other in chain
        if other.approval_order < step.approval_order
    )


def next_actionable_role(
    txn: WalletTransaction, chain: Sequence[TransactionApproval]
) -> Optional[OrgRole]:
    if txn.status != TransactionStatus.PENDING:
        return None
    for step in sorted(chain, key=lambda s: s.approval_order):
        if step.status == ApprovalStatus.PENDING:
            return step.approver_role if is_ready(step, chain) else None
    return None


async def list_actionable(
    db: AsyncSession, role: OrgRole, fellowship_id: int
) -> list[PendingApproval]:
    """Steps that are ``role``'s turn right now, oldest withdrawal first.

    Readiness is evaluated in the query on every call.
    """
    prior = aliased(TransactionApproval)
    predecessors_open = exists().where(
        and_(
            prior.transaction_id == TransactionApproval.transaction_id,
            prior.approval_order < TransactionApproval.approval_order,
            prior.status != ApprovalStatus.APPROVED,
        )
    )
    result = await db.execute(
        select(TransactionApproval, WalletTransaction, UnitWallet)
        .join(WalletTransaction, WalletTransaction.id == TransactionApproval.transaction_id)
        .join(UnitWallet, UnitWallet.id == WalletTransaction.wallet_id)
        .where(
            TransactionApproval.approver_role == role,
            TransactionApproval.status == ApprovalStatus.PENDING,
            WalletTransaction.status == TransactionStatus.PENDING,
            UnitWallet.fellowship_id == fellowship_id,
            ~predecessors_open,
        )
        .order_by(WalletTransaction.created_at, TransactionApproval.approval_order)
        .execution_options(populate_existing=True)
    )
    return [
        PendingApproval(approval=approval, transaction=txn, wallet=wallet)
        for approval, txn, wallet in result.all()
    ]


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def _transition(txn: WalletTransaction, target: TransactionStatus) -> None:
    if (txn.status, target) not in TRANSACTION_TRANSITIONS:
        raise OutOfOrder(f"Withdrawal cannot move from {txn.status.value} to {target.value}")
    txn.status = target


async def _load_withdrawal(
    db: AsyncSession, transaction_id: uuid.UUID, actor: AuthUser, *, lock: bool
) -> tuple[WalletTransaction, UnitWallet]:
    if lock:
        txn = await ledger_store.lock_transaction(db, transaction_id)
    else:
        txn = await ledger_store.get_transaction(db, transaction_id)
    if txn.transaction_type != TransactionType.WITHDRAWAL:
        raise NotFound("Withdrawal not found")
    wallet = await ledger_store.get_wallet(db, txn.wallet_id)
    if wallet.fellowship_id != actor.fellowship_id:
        raise Unauthorized("Withdrawal belongs to another fellowship")
    return txn, wallet


async def act_on_approval(
    db: AsyncSession,
    *,
    transaction_id: uuid.UUID,
    actor: AuthUser,
    decision: ApprovalDecision,
    comments: Optional[str] = None,
) -> ApprovalOutcome:
    """Approve or reject the actor's current step on a withdrawal.

    Raises:
        NotFound: no PENDING step on this withdrawal matches the actor's role.
        OutOfOrder: the withdrawal is terminal, an earlier step is not yet
            approved, or a concurrent action took the step first.
        ValidationError: rejection without comments.
    """
    comments = (comments or "").strip() or None
    if decision == ApprovalDecision.REJECT and not comments:
        raise ValidationError("Comments are required when rejecting a withdrawal")

    async with ledger_store.unit_of_work(db, f"withdrawal {decision.value}"):
        txn, wallet = await _load_withdrawal(db, transaction_id, actor, lock=True)
        if txn.status != TransactionStatus.PENDING:
            raise OutOfOrder(f"Withdrawal is already {txn.status.value}")

        chain = await ledger_store.list_approvals(db, [txn.id])
        step = next(
            (
                s
                for s in chain
                if s.status == ApprovalStatus.PENDING and can_act_on_approval(actor, s)
            ),
            None,
        )
        if step is None:
            raise NotFound("No pending approval for your role on this withdrawal")
        waiting_on = [
            s
            for s in chain
            if s.approval_order < step.approval_order and s.status != ApprovalStatus.APPROVED
        ]
        if waiting_on:
            raise OutOfOrder(
                f"Awaiting {waiting_on[0].label or waiting_on[0].approver_role.value} first"
            )

        if decision == ApprovalDecision.APPROVE:
            step_status = ApprovalStatus.APPROVED
        elif decision == ApprovalDecision.REJECT:
            step_status = ApprovalStatus.REJECTED
        else:
            raise ValidationError(f"Unsupported decision {decision!r}")

        result = await db.execute(
            update(TransactionApproval)
            .where(
                TransactionApproval.id == step.id,
                TransactionApproval.status == ApprovalStatus.PENDING,
            )
            .values(
                status=step_status,
                approver_id=actor.user_id,
                comments=comments,
                acted_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise OutOfOrder("Approval step was already acted on")

        chain = await ledger_store.list_approvals(db, [txn.id])
        acted_on = next(s for s in chain if s.id == step.id)

        if step_status == ApprovalStatus.REJECTED:
            _transition(txn, TransactionStatus.REJECTED)
            txn.failure_reason = comments
        elif all(s.status == ApprovalStatus.APPROVED for s in chain):
            _transition(txn, TransactionStatus.APPROVED)
        await db.flush()

    next_role = next_actionable_role(txn, chain)
    logger.info(
        "Withdrawal %s step %d (%s) %s by %s on unit wallet %s; transaction %s, next %s",
        txn.id,
        acted_on.approval_order,
        acted_on.approver_role.value,
        step_status.value,
        actor.user_id,
        wallet.id,
        txn.status.value,
        next_role.value if next_role else "none",
    )
    return ApprovalOutcome(
        transaction=txn, approvals=chain, acted_on=acted_on, next_role=next_role
    )


async def approve(
    db: AsyncSession,
    *,
    transaction_id: uuid.UUID,
    actor: AuthUser,
    comments: Optional[str] = None,
) -> ApprovalOutcome:
    return await act_on_approval(
        db,
        transaction_id=transaction_id,
        actor=actor,
        decision=ApprovalDecision.APPROVE,
        comments=comments,
    )


async def reject(
    db: AsyncSession,
    *,
    transaction_id: uuid.UUID,
    actor: AuthUser,
    comments: str,
) -> ApprovalOutcome:
    return await act_on_approval(
        db,
        transaction_id=transaction_id,
        actor=actor,
        decision=ApprovalDecision.REJECT,
        comments=comments,
    )


async def get_withdrawal(
    db: AsyncSession, *, transaction_id: uuid.UUID, actor: AuthUser
) -> WithdrawalDetail:
    """Withdrawal with its full approval chain, for status polling."""
    txn, wallet = await _load_withdrawal(db, transaction_id, actor, lock=False)
    approvals = await ledger_store.list_approvals(db, [txn.id])
    return WithdrawalDetail(transaction=txn, wallet=wallet, approvals=approvals)

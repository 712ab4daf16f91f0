"""Unit tests for wallet_ops core business logic.

Tests call wallet_ops functions directly with the db_session fixture.
No HTTP layer involved — pure business logic validation.
"""

import uuid
from decimal import Decimal

import pytest
from libs.auth.models import OrgRole
from libs.common.errors import (
    Conflict,
    InsufficientBalance,
    InvalidAmount,
    NotFound,
    PersistenceError,
    Unauthorized,
    ValidationError,
)
from services.unit_wallet_service.models import (
    ApprovalStatus,
    TransactionStatus,
    TransactionType,
    TreasuryTransaction,
    WalletStatus,
)
from services.unit_wallet_service.services import ledger_store, wallet_ops
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from tests.factories import (
    MemberDonationFactory,
    UnitWalletFactory,
    WalletTransactionFactory,
    make_office_holder,
    make_unit_head,
    make_user,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_active_wallet(db, balance_kobo=0, department="MEDIA", **overrides):
    """Insert an active wallet directly and return it."""
    wallet = UnitWalletFactory.create(
        unit_department=department, balance_kobo=balance_kobo, **overrides
    )
    db.add(wallet)
    await db.commit()
    return wallet


# ---------------------------------------------------------------------------
# parse_amount
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "amount, kobo",
    [("1000", 100_000), (Decimal("0.01"), 1), (25, 2_500), ("10000.33", 1_000_033)],
)
def test_parse_amount_converts_to_kobo(amount, kobo):
    assert wallet_ops.parse_amount(amount) == kobo


@pytest.mark.unit
@pytest.mark.parametrize("amount", [None, "0", "-5", "1.005", "abc", "NaN", "Infinity"])
def test_parse_amount_rejects_invalid(amount):
    with pytest.raises(InvalidAmount):
        wallet_ops.parse_amount(amount)


# ---------------------------------------------------------------------------
# Wallet creation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_create_wallet_starts_active_with_zero_balance(db_session):
    wallet = await wallet_ops.get_or_create_wallet(
        db_session, fellowship_id=1, department="media"
    )

    assert wallet.unit_department == "MEDIA"
    assert wallet.balance_kobo == 0
    assert wallet.status == WalletStatus.ACTIVE


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_create_wallet_is_idempotent(db_session):
    first = await wallet_ops.get_or_create_wallet(db_session, fellowship_id=1, department="MEDIA")
    second = await wallet_ops.get_or_create_wallet(
        db_session, fellowship_id=1, department=" media "
    )

    assert first.id == second.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_same_department_in_two_fellowships_gets_two_wallets(db_session):
    one = await wallet_ops.get_or_create_wallet(db_session, fellowship_id=1, department="MEDIA")
    two = await wallet_ops.get_or_create_wallet(db_session, fellowship_id=2, department="MEDIA")

    assert one.id != two.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_create_wallet_requires_department(db_session):
    with pytest.raises(ValidationError):
        await wallet_ops.get_or_create_wallet(db_session, fellowship_id=1, department="  ")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_create_wallet_storage_failure_is_persistence_error(
    db_session, monkeypatch
):
    async def _broken_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "commit", _broken_commit)

    with pytest.raises(PersistenceError):
        await wallet_ops.get_or_create_wallet(db_session, fellowship_id=1, department="USHERS")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_wallet_conflicts_when_department_has_one(db_session):
    await _make_active_wallet(db_session, department="MEDIA")

    with pytest.raises(Conflict):
        await wallet_ops.create_wallet(
            db_session, fellowship_id=1, department="MEDIA", actor=make_unit_head()
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_wallet_requires_executive(db_session):
    with pytest.raises(Unauthorized):
        await wallet_ops.create_wallet(
            db_session, fellowship_id=1, department="MEDIA", actor=make_user()
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_wallet_rejects_other_fellowship(db_session):
    with pytest.raises(Unauthorized):
        await wallet_ops.create_wallet(
            db_session, fellowship_id=2, department="MEDIA", actor=make_unit_head()
        )


# ---------------------------------------------------------------------------
# credit
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_records_completed_deposit_and_increments_balance(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=50_000)

    txn = await wallet_ops.credit(
        db_session, wallet_id=wallet.id, amount="250.50", description="Offering"
    )

    assert txn.transaction_type == TransactionType.DEPOSIT
    assert txn.status == TransactionStatus.COMPLETED
    assert txn.amount_kobo == 25_050
    assert txn.completed_at is not None
    refreshed = await ledger_store.get_wallet(db_session, wallet.id)
    assert refreshed.balance_kobo == 75_050


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_duplicate_reference_conflicts_and_leaves_balance(db_session):
    wallet = await _make_active_wallet(db_session)
    wallet_id = wallet.id
    await wallet_ops.credit(
        db_session, wallet_id=wallet_id, amount="100", description="First", reference="ref-1"
    )

    with pytest.raises(Conflict):
        await wallet_ops.credit(
            db_session, wallet_id=wallet_id, amount="100", description="Again", reference="ref-1"
        )

    refreshed = await ledger_store.get_wallet(db_session, wallet_id)
    assert refreshed.balance_kobo == 10_000


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("amount", ["0", "-10", "1.001"])
async def test_credit_rejects_invalid_amounts(db_session, amount):
    wallet = await _make_active_wallet(db_session)
    wallet_id = wallet.id

    with pytest.raises(InvalidAmount):
        await wallet_ops.credit(db_session, wallet_id=wallet_id, amount=amount, description="x")

    refreshed = await ledger_store.get_wallet(db_session, wallet_id)
    assert refreshed.balance_kobo == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_unknown_wallet_not_found(db_session):
    with pytest.raises(NotFound):
        await wallet_ops.credit(
            db_session, wallet_id=uuid.uuid4(), amount="10", description="Nowhere"
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_accepted_on_suspended_wallet(db_session):
    wallet = await _make_active_wallet(db_session, status=WalletStatus.SUSPENDED)

    await wallet_ops.credit(db_session, wallet_id=wallet.id, amount="5", description="Late gift")

    refreshed = await ledger_store.get_wallet(db_session, wallet.id)
    assert refreshed.balance_kobo == 500


# ---------------------------------------------------------------------------
# debit_reserve
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_creates_pending_withdrawal_with_chain(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=500_000)

    txn, steps = await wallet_ops.debit_reserve(
        db_session,
        wallet_id=wallet.id,
        amount="2000",
        description="Camera repairs",
        initiator=make_unit_head("MEDIA"),
    )

    assert txn.transaction_type == TransactionType.WITHDRAWAL
    assert txn.status == TransactionStatus.PENDING
    assert txn.amount_kobo == 200_000
    assert [s.approval_order for s in steps] == [1, 2, 3, 4, 5]
    assert [s.approver_role for s in steps] == [
        OrgRole.SECRETARY_GENERAL,
        OrgRole.PRESIDENCY,
        OrgRole.VICE_PRESIDENT,
        OrgRole.SECRETARY_GENERAL,
        OrgRole.FINANCIAL_SECRETARY,
    ]
    assert all(s.status == ApprovalStatus.PENDING for s in steps)
    # Reservation checks the balance but never moves it
    refreshed = await ledger_store.get_wallet(db_session, wallet.id)
    assert refreshed.balance_kobo == 500_000


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_insufficient_balance_writes_nothing(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=100_000)
    wallet_id = wallet.id

    with pytest.raises(InsufficientBalance):
        await wallet_ops.debit_reserve(
            db_session,
            wallet_id=wallet_id,
            amount="1000.01",
            description="Too much",
            initiator=make_unit_head("MEDIA"),
        )

    assert await ledger_store.recent_transactions(db_session, wallet_id, 10) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_exact_balance_allowed(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=100_000)

    txn, _ = await wallet_ops.debit_reserve(
        db_session,
        wallet_id=wallet.id,
        amount="1000",
        description="Everything",
        initiator=make_unit_head("MEDIA"),
    )

    assert txn.amount_kobo == 100_000


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_rejects_other_department(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=100_000, department="MEDIA")

    with pytest.raises(Unauthorized):
        await wallet_ops.debit_reserve(
            db_session,
            wallet_id=wallet.id,
            amount="10",
            description="Not mine",
            initiator=make_unit_head("CHOIR"),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_rejects_plain_member_of_the_unit(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=500_000, department="MEDIA")
    wallet_id = wallet.id

    with pytest.raises(Unauthorized):
        await wallet_ops.debit_reserve(
            db_session,
            wallet_id=wallet_id,
            amount="2000",
            description="Camera lens",
            initiator=make_user(role=OrgRole.MEMBER, department="MEDIA"),
        )

    assert await ledger_store.recent_transactions(db_session, wallet_id, 10) == []
    refreshed = await ledger_store.get_wallet(db_session, wallet_id)
    assert refreshed.balance_kobo == 500_000


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_rejects_other_fellowship(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=100_000)

    with pytest.raises(Unauthorized):
        await wallet_ops.debit_reserve(
            db_session,
            wallet_id=wallet.id,
            amount="10",
            description="Elsewhere",
            initiator=make_unit_head("MEDIA", fellowship_id=2),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_rejects_suspended_wallet(db_session):
    wallet = await _make_active_wallet(
        db_session, balance_kobo=100_000, status=WalletStatus.SUSPENDED
    )

    with pytest.raises(ValidationError):
        await wallet_ops.debit_reserve(
            db_session,
            wallet_id=wallet.id,
            amount="10",
            description="Frozen",
            initiator=make_unit_head("MEDIA"),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_reserve_requires_description(db_session):
    wallet = await _make_active_wallet(db_session, balance_kobo=100_000)

    with pytest.raises(ValidationError):
        await wallet_ops.debit_reserve(
            db_session,
            wallet_id=wallet.id,
            amount="10",
            description="   ",
            initiator=make_unit_head("MEDIA"),
        )


# ---------------------------------------------------------------------------
# fund_from_treasury
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_fund_from_treasury_credits_wallet_and_records_expense(db_session):
    wallet = await _make_active_wallet(db_session)
    approver = make_office_holder(OrgRole.FINANCIAL_SECRETARY)

    funded, txn = await wallet_ops.fund_from_treasury(
        db_session,
        wallet_id=wallet.id,
        amount="5000",
        description="Quarterly budget",
        approver=approver,
    )

    assert funded.balance_kobo == 500_000
    assert txn.description == "Received from Main Treasury: Quarterly budget"
    assert txn.initiated_by == approver.user_id
    expense = (
        await db_session.execute(
            select(TreasuryTransaction).where(TreasuryTransaction.wallet_transaction_id == txn.id)
        )
    ).scalar_one()
    assert expense.amount_kobo == 500_000
    assert expense.description == "Funding for MEDIA: Quarterly budget"
    assert expense.approved_by == approver.user_id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_fund_from_treasury_requires_executive(db_session):
    wallet = await _make_active_wallet(db_session)

    with pytest.raises(Unauthorized):
        await wallet_ops.fund_from_treasury(
            db_session, wallet_id=wallet.id, amount="10", description="x", approver=make_user()
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_funding_then_withdrawal_leaves_balance_untouched(db_session):
    """Fund 5000, reserve 2000: balance stays at 5000 while approvals run."""
    wallet = await _make_active_wallet(db_session)
    await wallet_ops.fund_from_treasury(
        db_session,
        wallet_id=wallet.id,
        amount="5000",
        description="Budget",
        approver=make_office_holder(OrgRole.FINANCIAL_SECRETARY),
    )

    txn, steps = await wallet_ops.request_withdrawal(
        db_session,
        wallet_id=wallet.id,
        amount="2000",
        description="Cables",
        actor=make_unit_head("MEDIA"),
    )

    refreshed = await ledger_store.get_wallet(db_session, wallet.id)
    assert refreshed.balance_kobo == 500_000
    assert txn.status == TransactionStatus.PENDING
    assert len(steps) == 5


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_link_virtual_account(db_session):
    wallet = await _make_active_wallet(db_session)

    linked = await wallet_ops.link_virtual_account(
        db_session,
        wallet_id=wallet.id,
        account_number=" 4600012345 ",
        account_name="Fellowship Media",
        actor=make_unit_head(),
    )

    assert linked.vpay_virtual_account == "4600012345"
    found = await ledger_store.find_wallet_by_virtual_account(db_session, "4600012345")
    assert found.id == wallet.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_link_virtual_account_taken_by_another_wallet(db_session):
    await _make_active_wallet(db_session, department="CHOIR", vpay_virtual_account="4600012345")
    wallet = await _make_active_wallet(db_session, department="MEDIA")

    with pytest.raises(Conflict):
        await wallet_ops.link_virtual_account(
            db_session,
            wallet_id=wallet.id,
            account_number="4600012345",
            account_name=None,
            actor=make_unit_head(),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_set_wallet_status_requires_super_admin(db_session):
    wallet = await _make_active_wallet(db_session)

    with pytest.raises(Unauthorized):
        await wallet_ops.set_wallet_status(
            db_session, wallet_id=wallet.id, status=WalletStatus.SUSPENDED, actor=make_unit_head()
        )

    suspended = await wallet_ops.set_wallet_status(
        db_session,
        wallet_id=wallet.id,
        status=WalletStatus.SUSPENDED,
        actor=make_office_holder(OrgRole.SUPER_ADMIN),
    )
    assert suspended.status == WalletStatus.SUSPENDED


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_department_view_hides_anonymous_donations(db_session):
    wallet = await _make_active_wallet(db_session)
    public_txn = WalletTransactionFactory.create(wallet_id=wallet.id)
    hidden_txn = WalletTransactionFactory.create(wallet_id=wallet.id)
    db_session.add_all([public_txn, hidden_txn])
    await db_session.flush()
    db_session.add_all(
        [
            MemberDonationFactory.create(wallet_id=wallet.id, transaction_id=public_txn.id),
            MemberDonationFactory.create(
                wallet_id=wallet.id, transaction_id=hidden_txn.id, is_anonymous=True
            ),
        ]
    )
    await db_session.commit()

    public = await wallet_ops.get_wallet_by_department(
        db_session, fellowship_id=1, department="media", actor=make_user()
    )
    full = await wallet_ops.get_wallet_activity(
        db_session, wallet_id=wallet.id, actor=make_unit_head()
    )

    assert len(public.donations) == 1
    assert public.donations[0].is_anonymous is False
    assert len(full.donations) == 2
    assert len(full.transactions) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_wallet_by_department_not_found(db_session):
    with pytest.raises(NotFound):
        await wallet_ops.get_wallet_by_department(
            db_session, fellowship_id=1, department="NOBODY", actor=make_user()
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_my_unit_wallet_creates_on_first_access(db_session):
    activity = await wallet_ops.get_my_unit_wallet(db_session, actor=make_unit_head("USHERS"))

    assert activity.wallet.unit_department == "USHERS"
    assert activity.transactions == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_my_unit_wallet_requires_department(db_session):
    with pytest.raises(ValidationError):
        await wallet_ops.get_my_unit_wallet(db_session, actor=make_user())


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_wallets_counts_activity(db_session):
    media = await _make_active_wallet(db_session, department="MEDIA")
    await _make_active_wallet(db_session, department="CHOIR")
    await _make_active_wallet(db_session, department="MEDIA", fellowship_id=2)
    await wallet_ops.credit(db_session, wallet_id=media.id, amount="10", description="a")
    await wallet_ops.credit(db_session, wallet_id=media.id, amount="20", description="b")

    summaries = await wallet_ops.list_wallets(db_session, fellowship_id=1, actor=make_user())

    assert [s.wallet.unit_department for s in summaries] == ["CHOIR", "MEDIA"]
    assert summaries[1].transaction_count == 2
    assert summaries[1].donation_count == 0
    assert summaries[1].wallet.balance_kobo == 3_000
    assert summaries[0].transaction_count == 0

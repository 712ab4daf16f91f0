"""create_unit_wallet_tables

Revision ID: 3f9c1e7a2b40
Revises:
Create Date: 2026-10-19 09:12:00.000000
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9c1e7a2b40"
down_revision = None
branch_labels = None
depends_on = None


def _enum(name, *values):
    return sa.Enum(*values, name=name)


def upgrade() -> None:
    op.create_table(
        "unit_wallets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("fellowship_id", sa.Integer(), nullable=False),
        sa.Column("unit_department", sa.String(length=64), nullable=False),
        sa.Column("balance_kobo", sa.Integer(), nullable=False),
        sa.Column("vpay_virtual_account", sa.String(length=32), nullable=True),
        sa.Column("vpay_account_name", sa.String(), nullable=True),
        sa.Column(
            "status", _enum("unit_wallet_status_enum", "active", "suspended"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("balance_kobo >= 0", name="ck_unit_wallets_balance_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_unit_wallets"),
        sa.UniqueConstraint(
            "fellowship_id", "unit_department", name="uq_unit_wallets_fellowship_department"
        ),
        sa.UniqueConstraint(
            "vpay_virtual_account", name="uq_unit_wallets_vpay_virtual_account"
        ),
    )
    op.create_index("ix_unit_wallets_fellowship_id", "unit_wallets", ["fellowship_id"])

    op.create_table(
        "unit_wallet_transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("wallet_id", sa.Uuid(), nullable=False),
        sa.Column(
            "transaction_type",
            _enum("unit_wallet_transaction_type_enum", "deposit", "withdrawal"),
            nullable=False,
        ),
        sa.Column("amount_kobo", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("vpay_reference", sa.String(), nullable=True),
        sa.Column(
            "status",
            _enum(
                "unit_wallet_transaction_status_enum",
                "pending",
                "approved",
                "completed",
                "rejected",
            ),
            nullable=False,
        ),
        sa.Column("initiated_by", sa.String(), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount_kobo > 0", name="ck_unit_wallet_transactions_amount_positive"),
        sa.ForeignKeyConstraint(
            ["wallet_id"],
            ["unit_wallets.id"],
            name="fk_unit_wallet_transactions_wallet_id_unit_wallets",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_unit_wallet_transactions"),
        sa.UniqueConstraint(
            "vpay_reference", name="uq_unit_wallet_transactions_vpay_reference"
        ),
    )
    op.create_index(
        "ix_unit_wallet_transactions_wallet_id", "unit_wallet_transactions", ["wallet_id"]
    )
    op.create_index(
        "ix_unit_wallet_transactions_wallet_created",
        "unit_wallet_transactions",
        ["wallet_id", "created_at"],
    )

    op.create_table(
        "transaction_approvals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column(
            "approver_role",
            _enum(
                "approver_role_enum",
                "member",
                "worker",
                "executive",
                "super_admin",
                "secretary_general",
                "presidency",
                "vice_president",
                "financial_secretary",
            ),
            nullable=False,
        ),
        sa.Column("approval_order", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(), nullable=True),
        sa.Column(
            "status",
            _enum("approval_status_enum", "pending", "approved", "rejected"),
            nullable=False,
        ),
        sa.Column("approver_id", sa.String(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("acted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "approval_order >= 1", name="ck_transaction_approvals_approval_order_positive"
        ),
        sa.ForeignKeyConstraint(
            ["transaction_id"],
            ["unit_wallet_transactions.id"],
            name="fk_transaction_approvals_transaction_id_unit_wallet_transactions",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_transaction_approvals"),
        sa.UniqueConstraint(
            "transaction_id", "approval_order", name="uq_transaction_approvals_order"
        ),
    )
    op.create_index(
        "ix_transaction_approvals_transaction_id", "transaction_approvals", ["transaction_id"]
    )

    op.create_table(
        "member_donations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("wallet_id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.String(), nullable=True),
        sa.Column("amount_kobo", sa.Integer(), nullable=False),
        sa.Column("gross_amount_kobo", sa.Integer(), nullable=False),
        sa.Column(
            "payment_method",
            _enum("donation_payment_method_enum", "vpay_transfer", "cash", "bank_transfer", "pos"),
            nullable=False,
        ),
        sa.Column("vpay_reference", sa.String(), nullable=True),
        sa.Column("donation_note", sa.Text(), nullable=True),
        sa.Column("payer_name", sa.String(), nullable=True),
        sa.Column("payer_phone", sa.String(), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False),
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount_kobo > 0", name="ck_member_donations_amount_positive"),
        sa.CheckConstraint(
            "gross_amount_kobo >= amount_kobo", name="ck_member_donations_net_within_gross"
        ),
        sa.ForeignKeyConstraint(
            ["wallet_id"], ["unit_wallets.id"], name="fk_member_donations_wallet_id_unit_wallets"
        ),
        sa.ForeignKeyConstraint(
            ["transaction_id"],
            ["unit_wallet_transactions.id"],
            name="fk_member_donations_transaction_id_unit_wallet_transactions",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_member_donations"),
        sa.UniqueConstraint("transaction_id", name="uq_member_donations_transaction_id"),
    )
    op.create_index("ix_member_donations_wallet_id", "member_donations", ["wallet_id"])
    op.create_index("ix_member_donations_member_id", "member_donations", ["member_id"])
    op.create_index(
        "ix_member_donations_wallet_created", "member_donations", ["wallet_id", "created_at"]
    )

    op.create_table(
        "brainiac_commissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("fellowship_id", sa.Integer(), nullable=False),
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column("original_amount_kobo", sa.Integer(), nullable=False),
        sa.Column("vpay_fee_kobo", sa.Integer(), nullable=False),
        sa.Column("brainiac_cut_kobo", sa.Integer(), nullable=False),
        sa.Column("net_amount_kobo", sa.Integer(), nullable=False),
        sa.Column("commission_rate", sa.Numeric(6, 4), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "original_amount_kobo = vpay_fee_kobo + brainiac_cut_kobo + net_amount_kobo",
            name="ck_brainiac_commissions_split_balances",
        ),
        sa.ForeignKeyConstraint(
            ["transaction_id"],
            ["unit_wallet_transactions.id"],
            name="fk_brainiac_commissions_transaction_id_unit_wallet_transactions",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_brainiac_commissions"),
        sa.UniqueConstraint("transaction_id", name="uq_brainiac_commissions_transaction_id"),
    )
    op.create_index(
        "ix_brainiac_commissions_fellowship_id", "brainiac_commissions", ["fellowship_id"]
    )
    op.create_index(
        "ix_brainiac_commissions_fellowship_created",
        "brainiac_commissions",
        ["fellowship_id", "created_at"],
    )

    op.create_table(
        "treasury_transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("fellowship_id", sa.Integer(), nullable=False),
        sa.Column(
            "transaction_type", _enum("treasury_transaction_type_enum", "expense"), nullable=False
        ),
        sa.Column("category", _enum("treasury_category_enum", "unit_funding"), nullable=False),
        sa.Column("amount_kobo", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("status", _enum("treasury_status_enum", "approved"), nullable=False),
        sa.Column("approved_by", sa.String(), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("wallet_transaction_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount_kobo > 0", name="ck_treasury_transactions_amount_positive"),
        sa.ForeignKeyConstraint(
            ["wallet_transaction_id"],
            ["unit_wallet_transactions.id"],
            name="fk_treasury_transactions_wallet_transaction_id_unit_wallet_transactions",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_treasury_transactions"),
    )
    op.create_index(
        "ix_treasury_transactions_fellowship_id", "treasury_transactions", ["fellowship_id"]
    )


def downgrade() -> None:
    op.drop_table("treasury_transactions")
    op.drop_table("brainiac_commissions")
    op.drop_table("member_donations")
    op.drop_table("transaction_approvals")
    op.drop_table("unit_wallet_transactions")
    op.drop_table("unit_wallets")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name in (
            "treasury_status_enum",
            "treasury_category_enum",
            "treasury_transaction_type_enum",
            "donation_payment_method_enum",
            "approval_status_enum",
            "approver_role_enum",
            "unit_wallet_transaction_status_enum",
            "unit_wallet_transaction_type_enum",
            "unit_wallet_status_enum",
        ):
            op.execute(f"DROP TYPE IF EXISTS {name}")

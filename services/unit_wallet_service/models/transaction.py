"""WalletTransaction model — ledger entry against exactly one unit wallet."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import kobo_to_naira
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.unit_wallet_service.models.enums import (
    TransactionStatus,
    TransactionType,
    enum_values,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class WalletTransaction(Base):
    """Deposits are created COMPLETED; withdrawals start PENDING."""

    __tablename__ = "unit_wallet_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("unit_wallets.id"), nullable=False, index=True
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="unit_wallet_transaction_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    amount_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    # External payment reference; unique so provider retries cannot double-credit
    vpay_reference: Mapped[Optional[str]] = mapped_column(
        String, unique=True, nullable=True
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(
            TransactionStatus,
            name="unit_wallet_transaction_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TransactionStatus.PENDING,
        nullable=False,
    )
    initiated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    # Relationships
    wallet: Mapped["UnitWallet"] = relationship(  # noqa: F821
        back_populates="transactions", lazy="raise"
    )
    approvals: Mapped[list["TransactionApproval"]] = relationship(  # noqa: F821
        back_populates="transaction",
        lazy="raise",
        order_by="TransactionApproval.approval_order",
    )

    __table_args__ = (
        CheckConstraint("amount_kobo > 0", name="amount_positive"),
        Index("ix_unit_wallet_transactions_wallet_created", "wallet_id", "created_at"),
    )

    @property
    def amount(self) -> Decimal:
        """Amount in Naira."""
        return kobo_to_naira(self.amount_kobo)

    def __repr__(self) -> str:
        return (
            f"<WalletTransaction {self.id} {self.transaction_type.value} "
            f"{self.amount_kobo} {self.status.value}>"
        )

"""BrainiacCommission model — fee split recorded for externally routed deposits."""

import uuid
from datetime import datetime
from decimal import Decimal

from libs.common.currency import kobo_to_naira
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class BrainiacCommission(Base):
    """1:1 with a VPay-sourced deposit. Immutable."""

    __tablename__ = "brainiac_commissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    fellowship_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("unit_wallet_transactions.id"), unique=True, nullable=False
    )
    original_amount_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    vpay_fee_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    brainiac_cut_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    net_amount_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(
        Numeric(6, 4, asdecimal=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "original_amount_kobo = vpay_fee_kobo + brainiac_cut_kobo + net_amount_kobo",
            name="split_balances",
        ),
        Index("ix_brainiac_commissions_fellowship_created", "fellowship_id", "created_at"),
    )

    @property
    def original_amount(self) -> Decimal:
        return kobo_to_naira(self.original_amount_kobo)

    @property
    def vpay_fee(self) -> Decimal:
        return kobo_to_naira(self.vpay_fee_kobo)

    @property
    def brainiac_cut(self) -> Decimal:
        return kobo_to_naira(self.brainiac_cut_kobo)

    @property
    def net_amount(self) -> Decimal:
        return kobo_to_naira(self.net_amount_kobo)

"""MemberDonation model — a contribution credited to a unit wallet."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import kobo_to_naira
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.unit_wallet_service.models.enums import (
    DonationPaymentMethod,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class MemberDonation(Base):
    """Immutable. ``amount_kobo`` is the net credited after commission."""

    __tablename__ = "member_donations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("unit_wallets.id"), nullable=False, index=True
    )
    # Null when an external payer could not be matched to a member
    member_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    amount_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    gross_amount_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_method: Mapped[DonationPaymentMethod] = mapped_column(
        SAEnum(
            DonationPaymentMethod,
            name="donation_payment_method_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    vpay_reference: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    donation_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payer_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    payer_phone: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("unit_wallet_transactions.id"), unique=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    wallet: Mapped["UnitWallet"] = relationship(  # noqa: F821
        back_populates="donations", lazy="raise"
    )

    __table_args__ = (
        CheckConstraint("amount_kobo > 0", name="amount_positive"),
        CheckConstraint("gross_amount_kobo >= amount_kobo", name="net_within_gross"),
        Index("ix_member_donations_wallet_created", "wallet_id", "created_at"),
    )

    @property
    def amount(self) -> Decimal:
        """Net amount in Naira."""
        return kobo_to_naira(self.amount_kobo)

    @property
    def gross_amount(self) -> Decimal:
        return kobo_to_naira(self.gross_amount_kobo)

    def __repr__(self) -> str:
        return f"<MemberDonation {self.id} wallet={self.wallet_id} net={self.amount_kobo}>"

"""UnitWallet model — department-scoped sub-account of a fellowship."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import kobo_to_naira
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.unit_wallet_service.models.enums import WalletStatus, enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class UnitWallet(Base):
    """One wallet per (fellowship, department). Never deleted."""

    __tablename__ = "unit_wallets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    fellowship_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    unit_department: Mapped[str] = mapped_column(String(64), nullable=False)
    balance_kobo: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    vpay_virtual_account: Mapped[Optional[str]] = mapped_column(
        String(32), unique=True, nullable=True
    )
    vpay_account_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[WalletStatus] = mapped_column(
        SAEnum(
            WalletStatus,
            name="unit_wallet_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=WalletStatus.ACTIVE,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    # Relationships (within service)
    transactions: Mapped[list["WalletTransaction"]] = relationship(  # noqa: F821
        back_populates="wallet", lazy="raise"
    )
    donations: Mapped[list["MemberDonation"]] = relationship(  # noqa: F821
        back_populates="wallet", lazy="raise"
    )

    __table_args__ = (
        UniqueConstraint(
            "fellowship_id", "unit_department", name="uq_unit_wallets_fellowship_department"
        ),
        CheckConstraint("balance_kobo >= 0", name="balance_non_negative"),
    )

    @property
    def balance(self) -> Decimal:
        """Balance in Naira."""
        return kobo_to_naira(self.balance_kobo)

    def __repr__(self) -> str:
        return (
            f"<UnitWallet {self.id} fellowship={self.fellowship_id} "
            f"department={self.unit_department} balance_kobo={self.balance_kobo}>"
        )

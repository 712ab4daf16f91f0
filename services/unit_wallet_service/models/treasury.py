"""TreasuryTransaction model — fellowship-level outflow that funds a unit wallet."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.unit_wallet_service.models.enums import (
    TreasuryCategory,
    TreasuryStatus,
    TreasuryTransactionType,
    enum_values,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class TreasuryTransaction(Base):
    __tablename__ = "treasury_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    fellowship_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    transaction_type: Mapped[TreasuryTransactionType] = mapped_column(
        SAEnum(
            TreasuryTransactionType,
            name="treasury_transaction_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TreasuryTransactionType.EXPENSE,
        nullable=False,
    )
    category: Mapped[TreasuryCategory] = mapped_column(
        SAEnum(
            TreasuryCategory,
            name="treasury_category_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TreasuryCategory.UNIT_FUNDING,
        nullable=False,
    )
    amount_kobo: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[TreasuryStatus] = mapped_column(
        SAEnum(
            TreasuryStatus,
            name="treasury_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TreasuryStatus.APPROVED,
        nullable=False,
    )
    approved_by: Mapped[str] = mapped_column(String, nullable=False)
    approved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    wallet_transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("unit_wallet_transactions.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (CheckConstraint("amount_kobo > 0", name="amount_positive"),)

"""TransactionApproval model — one row per required sign-off on a withdrawal."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.unit_wallet_service.models.enums import (
    ApprovalStatus,
    OrgRole,
    enum_values,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class TransactionApproval(Base):
    """Created in bulk when a withdrawal is requested; each row changes at most once."""

    __tablename__ = "transaction_approvals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("unit_wallet_transactions.id"), nullable=False, index=True
    )
    approver_role: Mapped[OrgRole] = mapped_column(
        SAEnum(
            OrgRole,
            name="approver_role_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    approval_order: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[ApprovalStatus] = mapped_column(
        SAEnum(
            ApprovalStatus,
            name="approval_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ApprovalStatus.PENDING,
        nullable=False,
    )
    approver_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    acted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    transaction: Mapped["WalletTransaction"] = relationship(  # noqa: F821
        back_populates="approvals", lazy="raise"
    )

    __table_args__ = (
        UniqueConstraint(
            "transaction_id", "approval_order", name="uq_transaction_approvals_order"
        ),
        CheckConstraint("approval_order >= 1", name="approval_order_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionApproval {self.transaction_id} #{self.approval_order} "
            f"{self.approver_role.value} {self.status.value}>"
        )

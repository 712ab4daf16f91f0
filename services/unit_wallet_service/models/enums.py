"""Enums for the Unit Wallet Service models."""

import enum

from libs.auth.models import OrgRole


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class WalletStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class TransactionType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"


# Legal status moves; COMPLETED and REJECTED are terminal.
TRANSACTION_TRANSITIONS: frozenset[tuple[TransactionStatus, TransactionStatus]] = frozenset(
    {
        (TransactionStatus.PENDING, TransactionStatus.APPROVED),
        (TransactionStatus.PENDING, TransactionStatus.REJECTED),
        (TransactionStatus.APPROVED, TransactionStatus.COMPLETED),
    }
)


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalDecision(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class DonationPaymentMethod(str, enum.Enum):
    VPAY_TRANSFER = "vpay_transfer"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    POS = "pos"


# Payment methods routed through an external rail; these carry commission.
EXTERNAL_PAYMENT_METHODS = frozenset({DonationPaymentMethod.VPAY_TRANSFER})


class TreasuryTransactionType(str, enum.Enum):
    EXPENSE = "expense"


class TreasuryCategory(str, enum.Enum):
    UNIT_FUNDING = "unit_funding"


class TreasuryStatus(str, enum.Enum):
    APPROVED = "approved"


__all__ = [
    "ApprovalDecision",
    "ApprovalStatus",
    "DonationPaymentMethod",
    "EXTERNAL_PAYMENT_METHODS",
    "OrgRole",
    "TRANSACTION_TRANSITIONS",
    "TransactionStatus",
    "TransactionType",
    "TreasuryCategory",
    "TreasuryStatus",
    "TreasuryTransactionType",
    "WalletStatus",
    "enum_values",
]

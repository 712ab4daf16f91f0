"""Unit Wallet Service models package.

Re-exports all models and enums so that:
  - ``from services.unit_wallet_service.models import UnitWallet`` works
  - Alembic env.py imports see every table
  - SQLAlchemy's mapper registry sees every model class on import

IMPORTANT: Every model class AND enum must be listed here.
When adding a new model, add both its import and its __all__ entry.
"""

from services.unit_wallet_service.models.approval import (  # noqa: F401
    TransactionApproval,
)
from services.unit_wallet_service.models.commission import (  # noqa: F401
    BrainiacCommission,
)
from services.unit_wallet_service.models.donation import MemberDonation  # noqa: F401

# Enums
from services.unit_wallet_service.models.enums import (  # noqa: F401
    EXTERNAL_PAYMENT_METHODS,
    TRANSACTION_TRANSITIONS,
    ApprovalDecision,
    ApprovalStatus,
    DonationPaymentMethod,
    OrgRole,
    TransactionStatus,
    TransactionType,
    TreasuryCategory,
    TreasuryStatus,
    TreasuryTransactionType,
    WalletStatus,
)
from services.unit_wallet_service.models.transaction import (  # noqa: F401
    WalletTransaction,
)
from services.unit_wallet_service.models.treasury import (  # noqa: F401
    TreasuryTransaction,
)
from services.unit_wallet_service.models.wallet import UnitWallet  # noqa: F401

__all__ = [
    # Enums
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
    # Ledger
    "UnitWallet",
    "WalletTransaction",
    "TransactionApproval",
    "MemberDonation",
    "BrainiacCommission",
    "TreasuryTransaction",
]

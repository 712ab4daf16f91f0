"""Unit Wallet Service schemas package.

Re-exports all schemas so that:
  - ``from services.unit_wallet_service.schemas import WalletResponse`` works
  - Router files import from one place

IMPORTANT: Every schema class must be listed here.
When adding a new schema, add its import and __all__ entry.
"""

from services.unit_wallet_service.schemas.approval import (  # noqa: F401
    ApprovalActionRequest,
    ApprovalActionResponse,
    ApprovalResponse,
    PendingApprovalListResponse,
    PendingApprovalResponse,
    WithdrawalRequest,
    WithdrawalResponse,
)
from services.unit_wallet_service.schemas.commission import (  # noqa: F401
    CommissionReportResponse,
    CommissionResponse,
    CommissionTotalsResponse,
)
from services.unit_wallet_service.schemas.donation import (  # noqa: F401
    DonationCreateRequest,
    DonationListResponse,
    DonationReceiptResponse,
    DonationResponse,
)
from services.unit_wallet_service.schemas.transaction import (  # noqa: F401
    FellowshipTransactionResponse,
    TransactionListResponse,
    TransactionResponse,
)
from services.unit_wallet_service.schemas.wallet import (  # noqa: F401
    FundWalletRequest,
    FundWalletResponse,
    VirtualAccountRequest,
    WalletCreateRequest,
    WalletDetailResponse,
    WalletListResponse,
    WalletResponse,
    WalletStatusRequest,
    WalletSummaryResponse,
)
from services.unit_wallet_service.schemas.webhook import (  # noqa: F401
    VPayWebhookPayload,
    WebhookAckResponse,
)

__all__ = [
    # Wallet
    "FundWalletRequest",
    "FundWalletResponse",
    "VirtualAccountRequest",
    "WalletCreateRequest",
    "WalletDetailResponse",
    "WalletListResponse",
    "WalletResponse",
    "WalletStatusRequest",
    "WalletSummaryResponse",
    # Transaction
    "FellowshipTransactionResponse",
    "TransactionListResponse",
    "TransactionResponse",
    # Donation
    "DonationCreateRequest",
    "DonationListResponse",
    "DonationReceiptResponse",
    "DonationResponse",
    # Withdrawal / approval
    "ApprovalActionRequest",
    "ApprovalActionResponse",
    "ApprovalResponse",
    "PendingApprovalListResponse",
    "PendingApprovalResponse",
    "WithdrawalRequest",
    "WithdrawalResponse",
    # Commission
    "CommissionReportResponse",
    "CommissionResponse",
    "CommissionTotalsResponse",
    # Webhook
    "VPayWebhookPayload",
    "WebhookAckResponse",
]

"""Unit wallet service routers."""

from services.unit_wallet_service.routers.donations import router as donations_router
from services.unit_wallet_service.routers.reports import router as reports_router
from services.unit_wallet_service.routers.wallets import router as wallets_router
from services.unit_wallet_service.routers.webhooks import router as webhooks_router
from services.unit_wallet_service.routers.withdrawals import router as withdrawals_router

__all__ = [
    "donations_router",
    "reports_router",
    "wallets_router",
    "webhooks_router",
    "withdrawals_router",
]

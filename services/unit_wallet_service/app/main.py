"""FastAPI application for the Unit Wallet Service."""

from fastapi import FastAPI
from libs.common.errors import register_error_handlers
from libs.common.middleware import add_observability_middleware
from services.unit_wallet_service.routers import (
    donations_router,
    reports_router,
    wallets_router,
    webhooks_router,
    withdrawals_router,
)


def create_app() -> FastAPI:
    """Create and configure the Unit Wallet Service FastAPI app."""
    app = FastAPI(
        title="Fellowship Unit Wallet Service",
        version="0.1.0",
        description="Department wallets, donations and withdrawal approvals for fellowships.",
    )
    add_observability_middleware(app)
    register_error_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "unit_wallet"}

    app.include_router(wallets_router)
    app.include_router(donations_router)

    # Withdrawal requests and the approval chain
    app.include_router(withdrawals_router)

    # Provider callbacks (signature-verified, no bearer token)
    app.include_router(webhooks_router)

    # Super-admin reporting
    app.include_router(reports_router)

    return app


app = create_app()

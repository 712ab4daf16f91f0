"""Payment provider webhooks (no bearer auth; verified by signature)."""

from fastapi import APIRouter, Depends, Request
from libs.common.errors import ValidationError
from libs.db.session import get_async_db
from pydantic import ValidationError as PayloadError
from services.unit_wallet_service.schemas import VPayWebhookPayload, WebhookAckResponse
from services.unit_wallet_service.services import webhook_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/vpay", response_model=WebhookAckResponse)
async def vpay_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
):
    """
    VPay transfer notification, verified by x-vpay-signature.

    Any error response makes VPay redeliver; redeliveries are idempotent.
    """
    raw = await request.body()
    webhook_service.verify_vpay_signature(
        raw, request.headers.get(webhook_service.SIGNATURE_HEADER)
    )
    try:
        payload = VPayWebhookPayload.model_validate_json(raw or b"{}")
    except PayloadError as exc:
        raise ValidationError(f"Malformed webhook payload: {exc.error_count()} error(s)") from exc

    result = await webhook_service.ingest_payment_webhook(db, payload)
    return WebhookAckResponse.model_validate(result)

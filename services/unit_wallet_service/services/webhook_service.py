"""VPay payment webhook ingestion.

Deliveries are authenticated by an HMAC-SHA512 of the raw body, keyed by the
shared webhook secret. Ingestion is idempotent on the provider reference: a
redelivery returns the first delivery's result without touching the wallet,
and the unique constraint on ``vpay_reference`` settles concurrent
redeliveries that both pass the existence check.
"""

import hashlib
import hmac
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import format_naira, kobo_to_naira
from libs.common.errors import (
    Conflict,
    InvalidAmount,
    UnknownAccount,
    UpstreamAuthenticationError,
)
from libs.common.logging import get_logger
from services.unit_wallet_service.models import DonationPaymentMethod, WalletTransaction
from services.unit_wallet_service.schemas.webhook import VPayWebhookPayload
from services.unit_wallet_service.services import ledger_store, wallet_ops
from services.unit_wallet_service.services.donation_service import (
    breakdown_for,
    stage_donation,
)
from services.unit_wallet_service.services.member_matching import resolve_member
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SIGNATURE_HEADER = "x-vpay-signature"


@dataclass
class WebhookResult:
    accepted: bool
    reference: str
    transaction_id: uuid.UUID
    net_amount: Decimal
    duplicate: bool = False


def sign_payload(raw_body: bytes, secret: Optional[str] = None) -> str:
    key = (secret or get_settings().VPAY_WEBHOOK_SECRET).encode("utf-8")
    return hmac.new(key, raw_body, hashlib.sha512).hexdigest()


def verify_vpay_signature(raw_body: bytes, signature: Optional[str]) -> None:
    """Raise UpstreamAuthenticationError unless ``signature`` signs ``raw_body``."""
    if not signature or not hmac.compare_digest(sign_payload(raw_body), signature.strip()):
        raise UpstreamAuthenticationError("Invalid webhook signature")


def _prior_result(txn: WalletTransaction) -> WebhookResult:
    return WebhookResult(
        accepted=True,
        reference=txn.vpay_reference,
        transaction_id=txn.id,
        net_amount=kobo_to_naira(txn.amount_kobo),
        duplicate=True,
    )


async def ingest_payment_webhook(
    db: AsyncSession, payload: VPayWebhookPayload
) -> WebhookResult:
    """Credit a unit wallet from a verified VPay transfer notification."""
    reference = payload.reference.strip()
    try:
        gross_kobo = wallet_ops.parse_amount(payload.amount)
    except InvalidAmount as exc:
        # The provider redelivers on any error, so this reference will keep coming back
        logger.warning(
            "VPay transfer %s to account %s has unusable amount %s: %s",
            reference,
            payload.account_number,
            payload.amount,
            exc.detail,
        )
        raise
    breakdown = breakdown_for(gross_kobo, DonationPaymentMethod.VPAY_TRANSFER)

    prior = await ledger_store.find_transaction_by_reference(db, reference)
    if prior:
        await db.commit()
        logger.info("VPay reference %s already processed, returning prior result", reference)
        return _prior_result(prior)

    wallet = await ledger_store.find_wallet_by_virtual_account(db, payload.account_number)
    if not wallet:
        await db.commit()
        logger.warning(
            "VPay transfer %s to unknown virtual account %s", reference, payload.account_number
        )
        raise UnknownAccount(f"No unit wallet linked to account {payload.account_number}")

    # End the read transaction before calling out to the members service
    await db.commit()

    member_id = await resolve_member(
        wallet.fellowship_id,
        payer_name=payload.payer_name,
        payer_phone=payload.payer_phone,
    )

    payer = payload.payer_name or "unknown payer"
    duplicate = f"Payment reference {reference} already recorded"
    try:
        async with ledger_store.unit_of_work(db, "vpay webhook", conflict_detail=duplicate):
            if await ledger_store.find_transaction_by_reference(db, reference):
                raise Conflict(duplicate)
            receipt = await stage_donation(
                db,
                wallet=wallet,
                breakdown=breakdown,
                payment_method=DonationPaymentMethod.VPAY_TRANSFER,
                description=f"VPay transfer from {payer}",
                reference=reference,
                member_id=member_id,
                note=f"Payment from {payer}",
                payer_name=payload.payer_name,
                payer_phone=payload.payer_phone,
            )
    except Conflict:
        prior = await ledger_store.find_transaction_by_reference(db, reference)
        await db.commit()
        if prior is None:
            raise
        logger.info("VPay reference %s recorded by a concurrent delivery", reference)
        return _prior_result(prior)

    logger.info(
        "VPay transfer %s credited unit wallet %s: gross %s, fee %s, commission %s, "
        "net %s, member %s, balance now %s",
        reference,
        wallet.id,
        format_naira(breakdown.gross_kobo),
        format_naira(breakdown.processor_fee_kobo),
        format_naira(breakdown.platform_cut_kobo),
        format_naira(breakdown.net_kobo),
        member_id or "unmatched",
        format_naira(receipt.balance_after_kobo),
    )
    return WebhookResult(
        accepted=True,
        reference=reference,
        transaction_id=receipt.transaction.id,
        net_amount=receipt.net_amount,
    )

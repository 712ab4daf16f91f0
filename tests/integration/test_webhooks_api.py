"""Integration tests for the VPay webhook endpoint."""

import json
from decimal import Decimal

import pytest
from services.unit_wallet_service.services.webhook_service import SIGNATURE_HEADER, sign_payload
from tests.factories import UnitWalletFactory, vpay_payload

ACCOUNT = "4600012345"


async def _linked_wallet(db) -> str:
    wallet = UnitWalletFactory.create(unit_department="MEDIA", vpay_virtual_account=ACCOUNT)
    db.add(wallet)
    await db.commit()
    return str(wallet.id)


async def _deliver(client, payload: dict, signature=None):
    raw = json.dumps(payload).encode()
    return await client.post(
        "/webhooks/vpay",
        content=raw,
        headers={
            "content-type": "application/json",
            SIGNATURE_HEADER: signature if signature is not None else sign_payload(raw),
        },
    )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_signed_transfer_is_credited(wallet_client, db_session, member_directory):
    wallet_id = await _linked_wallet(db_session)
    member_directory.append({"id": "m-1", "name": "Jane Doe", "phone": "0803 123 4567"})

    response = await _deliver(wallet_client, vpay_payload(ACCOUNT, amount="1000"))

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["accepted"] is True
    assert data["duplicate"] is False
    assert Decimal(data["net_amount"]) == Decimal("980")

    wallet = (await wallet_client.get(f"/wallets/{wallet_id}")).json()
    assert Decimal(wallet["wallet"]["balance"]) == Decimal("980")
    donation = wallet["recent_donations"][0]
    assert donation["member_id"] == "m-1"
    assert wallet["recent_transactions"][0]["description"] == "VPay transfer from Jane Doe"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_redelivery_is_idempotent(wallet_client, db_session):
    wallet_id = await _linked_wallet(db_session)
    payload = vpay_payload(ACCOUNT, amount="1000", reference="VP-AGAIN")

    first = await _deliver(wallet_client, payload)
    second = await _deliver(wallet_client, payload)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["duplicate"] is True
    assert second.json()["transaction_id"] == first.json()["transaction_id"]
    wallet = (await wallet_client.get(f"/wallets/{wallet_id}")).json()["wallet"]
    assert Decimal(wallet["balance"]) == Decimal("980")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_bad_signature_rejected_without_credit(wallet_client, db_session):
    wallet_id = await _linked_wallet(db_session)

    response = await _deliver(wallet_client, vpay_payload(ACCOUNT), signature="forged")

    assert response.status_code == 401
    assert response.json()["error"] == "upstream_authentication_error"
    wallet = (await wallet_client.get(f"/wallets/{wallet_id}")).json()["wallet"]
    assert Decimal(wallet["balance"]) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_account_is_not_found(wallet_client, db_session):
    response = await _deliver(wallet_client, vpay_payload("9999999999"))

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_malformed_payload_rejected(wallet_client, db_session):
    response = await _deliver(wallet_client, {"account_number": ACCOUNT})

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_extra_provider_fields_ignored(wallet_client, db_session):
    await _linked_wallet(db_session)

    response = await _deliver(
        wallet_client,
        vpay_payload(ACCOUNT, amount="50", session_id="abc", channel="bank_transfer"),
    )

    assert response.status_code == 200, response.text
    assert Decimal(response.json()["net_amount"]) == Decimal("49")

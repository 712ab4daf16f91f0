"""Integration tests for donation endpoints and the commission report."""

from decimal import Decimal

import pytest
from libs.auth.models import OrgRole
from services.unit_wallet_service.app.main import app
from tests.factories import (
    BrainiacCommissionFactory,
    UnitWalletFactory,
    make_office_holder,
    make_user,
    override_auth,
)


async def _wallet(db, **overrides) -> str:
    wallet = UnitWalletFactory.create(**overrides)
    db.add(wallet)
    await db.commit()
    return str(wallet.id)


# ---------------------------------------------------------------------------
# Donations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vpay_donation_credits_net_of_commission(wallet_client, db_session):
    wallet_id = await _wallet(db_session)

    response = await wallet_client.post(
        "/donations",
        json={"wallet_id": wallet_id, "amount": "1000", "donation_note": "Harvest"},
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert Decimal(data["net_amount"]) == Decimal("980")
    assert Decimal(data["donation"]["gross_amount"]) == Decimal("1000")
    assert data["donation"]["payment_method"] == "vpay_transfer"
    assert data["transaction"]["description"] == "Donation from member: Harvest"

    wallet = (await wallet_client.get(f"/wallets/{wallet_id}")).json()
    assert Decimal(wallet["wallet"]["balance"]) == Decimal("980")
    assert len(wallet["recent_donations"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cash_donation_credits_full_amount(wallet_client, db_session):
    wallet_id = await _wallet(db_session)

    response = await wallet_client.post(
        "/donations",
        json={"wallet_id": wallet_id, "amount": "250", "payment_method": "cash"},
    )

    assert response.status_code == 201, response.text
    assert Decimal(response.json()["net_amount"]) == Decimal("250")
    assert response.json()["transaction"]["description"] == "Donation from member"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_duplicate_donation_reference_conflicts(wallet_client, db_session):
    wallet_id = await _wallet(db_session)
    body = {"wallet_id": wallet_id, "amount": "100", "vpay_reference": "VP-DUP"}

    first = await wallet_client.post("/donations", json=body)
    second = await wallet_client.post("/donations", json=body)

    assert first.status_code == 201
    assert second.status_code == 409
    wallet = (await wallet_client.get(f"/wallets/{wallet_id}")).json()["wallet"]
    assert Decimal(wallet["balance"]) == Decimal("98")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_donation_to_other_fellowship_forbidden(wallet_client, db_session):
    wallet_id = await _wallet(db_session, fellowship_id=2)

    response = await wallet_client.post("/donations", json={"wallet_id": wallet_id, "amount": "10"})

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_wallet_donations(wallet_client, db_session):
    wallet_id = await _wallet(db_session)
    for amount in ("10", "20", "30"):
        await wallet_client.post(
            "/donations",
            json={"wallet_id": wallet_id, "amount": amount, "payment_method": "pos"},
        )

    response = await wallet_client.get(f"/donations/wallet/{wallet_id}", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert all(d["wallet_id"] == wallet_id for d in data["donations"])


# ---------------------------------------------------------------------------
# Commission report
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_commission_report_totals(wallet_client, db_session):
    db_session.add_all(
        [
            BrainiacCommissionFactory.create(),
            BrainiacCommissionFactory.create(fellowship_id=2),
        ]
    )
    await db_session.commit()

    with override_auth(app, make_office_holder(OrgRole.SUPER_ADMIN)):
        everything = await wallet_client.get("/commissions/report")
        one = await wallet_client.get("/commissions/report", params={"fellowship_id": 2})

    assert everything.status_code == 200, everything.text
    totals = everything.json()["totals"]
    assert totals["count"] == 2
    assert Decimal(totals["total_commission"]) == Decimal("10")
    assert Decimal(totals["total_vpay_fees"]) == Decimal("30")
    assert Decimal(totals["total_processed"]) == Decimal("2000")
    assert Decimal(totals["total_net"]) == Decimal("1960")
    assert one.json()["totals"]["count"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_commission_report_after_donation(wallet_client, db_session):
    wallet_id = await _wallet(db_session)
    await wallet_client.post("/donations", json={"wallet_id": wallet_id, "amount": "1000"})
    await wallet_client.post(
        "/donations", json={"wallet_id": wallet_id, "amount": "500", "payment_method": "cash"}
    )

    with override_auth(app, make_office_holder(OrgRole.SUPER_ADMIN)):
        response = await wallet_client.get("/commissions/report")

    data = response.json()
    assert data["totals"]["count"] == 1
    assert Decimal(data["commissions"][0]["brainiac_cut"]) == Decimal("5")
    assert Decimal(data["commissions"][0]["vpay_fee"]) == Decimal("15")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_commission_report_super_admin_only(wallet_client, db_session):
    with override_auth(app, make_user(role=OrgRole.FINANCIAL_SECRETARY)):
        response = await wallet_client.get("/commissions/report")

    assert response.status_code == 403

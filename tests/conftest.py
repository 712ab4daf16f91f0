from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient
from libs.auth.dependencies import get_current_user
from libs.common import service_client
from services.unit_wallet_service.app.main import app
from tests.factories import make_user


@pytest.fixture(autouse=True)
def member_directory(monkeypatch) -> list[dict]:
    """
    Stand-in for the members service search endpoint.

    Tests append ``{"id", "name", "email", "phone"}`` dicts; the webhook's
    payer lookup sees exactly these candidates and never leaves the process.
    """
    members: list[dict] = []

    async def _search(fellowship_id, *, name=None, phone=None, calling_service):
        return [m for m in members if m.get("fellowship_id", fellowship_id) == fellowship_id]

    monkeypatch.setattr(service_client, "search_fellowship_members", _search)
    return members


@pytest_asyncio.fixture
async def wallet_client(client) -> AsyncGenerator[AsyncClient, None]:
    """
    Client for the unit wallet app, authenticated as a plain member by default.

    Switch identity per request with ``override_auth(app, user)``.
    """
    app.dependency_overrides[get_current_user] = lambda: make_user()
    yield client

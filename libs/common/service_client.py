"""Reusable async HTTP client for internal service-to-service communication.

All cross-service calls should go through this helper instead of importing
models or querying tables from other services directly.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from libs.auth.dependencies import _service_role_jwt
from libs.common.config import get_settings
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)

# Default timeout for internal calls (seconds).
_DEFAULT_TIMEOUT = 10.0


async def internal_request(
    *,
    service_url: str,
    method: str,
    path: str,
    calling_service: str,
    json: Any = None,
    params: Optional[dict] = None,
    timeout: float = _DEFAULT_TIMEOUT,
) -> httpx.Response:
    """Make an authenticated internal service-to-service HTTP call.

    Args:
        service_url: Base URL of the target service (e.g. settings.MEMBERS_SERVICE_URL).
        method: HTTP method (GET, POST, …).
        path: URL path on the target service.
        calling_service: Name of the calling service for the JWT "sub" claim.
        json: Optional JSON body.
        params: Optional query parameters.
        timeout: Request timeout in seconds.

    Raises:
        httpx.RequestError on connection failures.
    """
    url = f"{service_url}{path}"
    headers = {"Authorization": f"Bearer {_service_role_jwt(calling_service)}"}
    request_id = get_request_id()
    if request_id:
        headers["X-Request-ID"] = request_id
    headers["X-Caller-Service"] = calling_service

    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.request(
            method,
            url,
            headers=headers,
            json=json,
            params=params,
        )
    return response


async def internal_get(
    *,
    service_url: str,
    path: str,
    calling_service: str,
    params: Optional[dict] = None,
    timeout: float = _DEFAULT_TIMEOUT,
) -> httpx.Response:
    """Convenience wrapper for GET requests."""
    return await internal_request(
        service_url=service_url,
        method="GET",
        path=path,
        calling_service=calling_service,
        params=params,
        timeout=timeout,
    )


# ---------------------------------------------------------------------------
# High-level helpers (resolve common cross-service lookups)
# ---------------------------------------------------------------------------


async def search_fellowship_members(
    fellowship_id: int,
    *,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    calling_service: str,
) -> list[dict]:
    """Look up candidate members of a fellowship by payer name and/or phone.

    Returns a list of dicts with {id, name, email, phone}. The members
    service does the coarse filtering; callers decide what counts as a match.
    """
    settings = get_settings()
    params: dict[str, Any] = {"fellowship_id": fellowship_id}
    if name:
        params["name"] = name
    if phone:
        params["phone"] = phone
    resp = await internal_get(
        service_url=settings.MEMBERS_SERVICE_URL,
        path="/internal/members/search",
        calling_service=calling_service,
        params=params,
    )
    if resp.status_code == 404:
        return []
    resp.raise_for_status()
    return list(resp.json() or [])

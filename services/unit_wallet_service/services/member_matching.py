"""Best-effort resolution of an external payer to a fellowship member.

Matching is normalized-exact: phone numbers compare on their national
significant digits, names on case-folded whitespace-collapsed text, and the
name field may also hold the member's email. More than one candidate is
treated as ambiguous and resolves to no member.
"""

import re
from typing import Any, Iterable, Optional

import httpx
from libs.common import service_client
from libs.common.logging import get_logger

logger = get_logger(__name__)

_NON_DIGITS = re.compile(r"\D+")
_WHITESPACE = re.compile(r"\s+")
# Nigerian mobile numbers: 0XXXXXXXXXX locally, 234XXXXXXXXXX internationally
_NATIONAL_DIGITS = 10


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    if not phone:
        return None
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) < 7:
        return None
    return digits[-_NATIONAL_DIGITS:]


def normalize_name(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    collapsed = _WHITESPACE.sub(" ", name).strip().casefold()
    return collapsed or None


def _member_name(candidate: dict[str, Any]) -> Optional[str]:
    name = candidate.get("name")
    if not name:
        name = " ".join(
            part for part in (candidate.get("first_name"), candidate.get("last_name")) if part
        )
    return normalize_name(name)


def _single(matches: list[dict[str, Any]], field: str) -> Optional[str]:
    if len(matches) == 1:
        return str(matches[0]["id"])
    if matches:
        logger.info("Ambiguous payer %s match: %d candidates", field, len(matches))
    return None


def match_member(
    candidates: Iterable[dict[str, Any]],
    *,
    payer_name: Optional[str] = None,
    payer_phone: Optional[str] = None,
) -> Optional[str]:
    """Return the id of the single member matching the payer, else None.

    Phone is tried first; an ambiguous phone never falls back to the name.
    """
    candidates = [c for c in candidates if c.get("id") is not None]

    phone = normalize_phone(payer_phone)
    if phone:
        by_phone = [c for c in candidates if normalize_phone(c.get("phone")) == phone]
        if by_phone:
            return _single(by_phone, "phone")

    name = normalize_name(payer_name)
    if name:
        by_name = [
            c
            for c in candidates
            if _member_name(c) == name or normalize_name(c.get("email")) == name
        ]
        return _single(by_name, "name")
    return None


async def resolve_member(
    fellowship_id: int,
    *,
    payer_name: Optional[str] = None,
    payer_phone: Optional[str] = None,
) -> Optional[str]:
    """Look the payer up in the members service. Never raises."""
    if not payer_name and not payer_phone:
        return None
    try:
        candidates = await service_client.search_fellowship_members(
            fellowship_id,
            name=payer_name,
            phone=payer_phone,
            calling_service="unit_wallet",
        )
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning(
            "Member lookup failed for fellowship %s, recording donation without member: %s",
            fellowship_id,
            exc,
        )
        return None
    return match_member(candidates, payer_name=payer_name, payer_phone=payer_phone)

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class OrgRole(str, enum.Enum):
    """Organizational roles carried in the access token.

    The office roles double as approval-chain roles.
    """

    MEMBER = "member"
    WORKER = "worker"
    EXECUTIVE = "executive"
    SUPER_ADMIN = "super_admin"
    SECRETARY_GENERAL = "secretary_general"
    PRESIDENCY = "presidency"
    VICE_PRESIDENT = "vice_president"
    FINANCIAL_SECRETARY = "financial_secretary"


# Roles allowed to manage unit wallets (create, fund, link accounts).
EXECUTIVE_ROLES = frozenset(
    {
        OrgRole.EXECUTIVE,
        OrgRole.SUPER_ADMIN,
        OrgRole.SECRETARY_GENERAL,
        OrgRole.PRESIDENCY,
        OrgRole.VICE_PRESIDENT,
        OrgRole.FINANCIAL_SECRETARY,
    }
)


class AuthUser(BaseModel):
    """
    Represents an authenticated fellowship user, decoded from the access token.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: OrgRole = OrgRole.MEMBER
    department: Optional[str] = None
    fellowship_id: int

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("department", mode="before")
    @classmethod
    def _normalize_department(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or None
        return v

    @property
    def is_executive(self) -> bool:
        return self.role in EXECUTIVE_ROLES

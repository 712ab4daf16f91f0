from datetime import timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser, OrgRole
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import Unauthorized

settings = get_settings()
security = HTTPBearer()


def _service_role_jwt(calling_service: str, ttl_seconds: int = 60) -> str:
    """Mint a short-lived token identifying this service to another service."""
    now = utc_now()
    payload = {
        "sub": f"service:{calling_service}",
        "role": "service_role",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def get_current_user(
    token: Annotated[HTTPAuthorizationCredentials, Depends(security)]
) -> AuthUser:
    """
    Validate the access token and return the authenticated user.

    The token is issued by the auth layer; this service only verifies it.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
        return AuthUser(**payload)

    except (JWTError, ValidationError):
        raise credentials_exception


async def require_executive(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    """Ensure the user holds an executive or office role."""
    if not current_user.is_executive:
        raise Unauthorized("Executive privileges required")
    return current_user


async def require_super_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    """Ensure the user is a fellowship super admin."""
    if current_user.role != OrgRole.SUPER_ADMIN:
        raise Unauthorized("Admin privileges required")
    return current_user

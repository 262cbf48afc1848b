from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, HTTPException, status
from typing import Optional

from ..auth.jwt_utils import verify_token
from ..config import settings

_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    cred: Optional[HTTPAuthorizationCredentials] = Depends(_scheme)
) -> dict:
    """Decode the bearer token; 401 when it is absent or invalid"""
    if cred is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = verify_token(cred.credentials)
    if payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return payload


def require_panel_user(
    cred: Optional[HTTPAuthorizationCredentials] = Depends(_scheme)
) -> Optional[dict]:
    """Router-level guard for the data APIs.

    Open when REQUIRE_AUTH is off; otherwise behaves like get_current_user.
    """
    if not settings.REQUIRE_AUTH:
        return None
    return get_current_user(cred)

from datetime import datetime, timedelta
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError
from fastapi import HTTPException, status
from typing import Optional, Dict
import logging

from ..config.settings import JWT_SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("sub", "exp", "iat")


def _unauthorized(reason: str) -> HTTPException:
    logger.warning(f"Rejected bearer token: {reason}")
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=reason,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    subject: str,
    extra_claims: Optional[Dict] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a session token for the panel admin identified by subject (their email)."""
    if not subject:
        raise ValueError("subject must be provided")

    issued = datetime.utcnow()
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**(extra_claims or {}), "sub": subject, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Dict:
    """Decode a session token, raising 401 when it is expired, tampered or incomplete."""
    try:
        claims = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.debug(f"JWT decode error: {str(e)}")
        raise _unauthorized("Invalid token")

    missing = [claim for claim in REQUIRED_CLAIMS if claim not in claims]
    if missing:
        raise _unauthorized("Token missing required claims")
    return claims

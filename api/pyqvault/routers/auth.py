from fastapi import APIRouter, HTTPException, Depends, status, Request
from pydantic import BaseModel
from typing import Optional
import hmac
import time
import logging

from ..auth.jwt_utils import create_access_token
from ..config import settings
from ..core.security import get_current_user

logger = logging.getLogger(__name__)

# In-memory attempt log per client IP: {ip: [timestamps]}
login_attempts = {}

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


def check_rate_limit(request: Request) -> None:
    """Record a login attempt for the caller IP, 429 once the window is full"""
    client_ip = request.client.host if request.client else "unknown"
    current_time = time.time()

    attempts = [
        timestamp for timestamp in login_attempts.get(client_ip, [])
        if current_time - timestamp < settings.RATE_LIMIT_WINDOW
    ]

    if len(attempts) >= settings.MAX_LOGIN_ATTEMPTS:
        login_attempts[client_ip] = attempts
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Please try again later."
        )

    attempts.append(current_time)
    login_attempts[client_ip] = attempts


def _credentials_match(email: str, password: str) -> bool:
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return False
    email_ok = hmac.compare_digest(email.strip().lower(), settings.ADMIN_EMAIL.strip().lower())
    password_ok = hmac.compare_digest(password, settings.ADMIN_PASSWORD)
    return email_ok and password_ok


@router.post("/login")
async def login(request: Request, login_data: LoginRequest):
    """Exchange the configured admin credentials for a bearer token"""
    try:
        if not login_data.email or not login_data.password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email and password are required"
            )

        check_rate_limit(request)

        if not _credentials_match(login_data.email, login_data.password):
            logger.warning(f"Failed login attempt for: {login_data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
                headers={"WWW-Authenticate": "Bearer"}
            )

        access_token = create_access_token(
            subject=settings.ADMIN_EMAIL,
            extra_claims={"role": "admin"}
        )

        # A good login resets the counter for this IP
        login_attempts.pop(request.client.host if request.client else "unknown", None)

        logger.info(f"Successful login for admin: {settings.ADMIN_EMAIL}")
        return {
            "success": True,
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user": {"email": settings.ADMIN_EMAIL, "role": "admin"},
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during login"
        )


@router.get("/verify")
async def verify_auth(current_user: dict = Depends(get_current_user)):
    """Echo the identity carried by the bearer token"""
    return {
        "valid": True,
        "user": {
            "email": current_user.get("sub"),
            "role": current_user.get("role"),
        },
    }

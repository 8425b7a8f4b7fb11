"""
User authentication endpoints.
Exchanges an OAuth access token for a session cookie; sign-out and session status.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from app.rate_limit import limiter, RATE_LIMIT_WRITE
from core.identity import IdentityProvider, get_identity_provider
from security.user_session import (
    clear_session_cookie,
    get_cookie_secret,
    get_current_user,
    set_session_cookie,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SessionRequest(BaseModel):
    access_token: str = ""


@router.post("/session")
@limiter.limit(RATE_LIMIT_WRITE)
async def create_session(
    request: Request,
    response: Response,
    body: SessionRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """
    Sign in with an access token issued by the identity provider.
    Sets httpOnly session cookie on success.
    Returns 400 without a token, 401 if the provider rejects it,
    503 if the provider is not configured.
    """
    if not body.access_token.strip():
        raise HTTPException(status_code=400, detail="Missing access token")

    try:
        get_cookie_secret()
    except ValueError as e:
        logger.error(f"[auth] COOKIE_SECRET not configured: {e}")
        raise HTTPException(status_code=500, detail="Server configuration error")

    if not provider.is_configured:
        logger.warning("[auth] Identity provider not configured")
        raise HTTPException(status_code=503, detail="Sign-in not configured")

    identity = provider.verify_access_token(body.access_token.strip())
    if identity is None:
        client_host = request.client.host if request.client else 'unknown'
        logger.warning(f"[auth] Rejected access token from {client_host}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    set_session_cookie(response, identity)
    logger.info(f"[auth] Session created for {identity.user_id}")
    return {"user_id": identity.user_id, "email": identity.email}


@router.post("/logout")
async def logout(response: Response):
    """Sign out. Clears session cookie."""
    clear_session_cookie(response)
    return {"authenticated": False}


@router.get("/me")
async def me(request: Request):
    """Check session status."""
    user = get_current_user(request)
    if user is None:
        return {"authenticated": False}
    return {"authenticated": True, "user_id": user.user_id, "email": user.email}

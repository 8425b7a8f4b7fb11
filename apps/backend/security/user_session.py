"""
User session authentication with an httpOnly signed cookie.
Dev bypass via X-Dev-User header when TRACKER_ENV=dev.
"""
import os
from typing import Optional
from fastapi import HTTPException, Request, Response
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from core.identity import Identity

COOKIE_NAME = "tracker_session"
SESSION_DURATION_DAYS = 7
SESSION_MAX_AGE = SESSION_DURATION_DAYS * 86400
SESSION_SALT = "tracker-user-session"


def get_cookie_secret() -> str:
    secret = os.getenv("COOKIE_SECRET")
    if not secret:
        raise ValueError("COOKIE_SECRET environment variable required")
    return secret


def is_dev_mode() -> bool:
    return os.getenv("TRACKER_ENV", "").lower() == "dev"


def _serializer(secret: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret, salt=SESSION_SALT)


def create_session_token(identity: Identity, secret: str) -> str:
    """Create a signed, timestamped session token."""
    return _serializer(secret).dumps({"user_id": identity.user_id, "email": identity.email})


def verify_session_token(token: str, secret: str, max_age: int = SESSION_MAX_AGE) -> Optional[Identity]:
    """Return the Identity in a valid token, None if tampered or expired."""
    try:
        data = _serializer(secret).loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or not data.get("user_id"):
        return None
    return Identity(user_id=str(data["user_id"]), email=data.get("email") or "")


def set_session_cookie(response: Response, identity: Identity):
    try:
        secret = get_cookie_secret()
    except ValueError:
        raise HTTPException(status_code=500, detail="Server configuration error")

    response.set_cookie(
        key=COOKIE_NAME,
        value=create_session_token(identity, secret),
        httponly=True,
        secure=not is_dev_mode(),
        samesite="lax",
        path="/",
        max_age=SESSION_MAX_AGE,
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(key=COOKIE_NAME, path="/")


def get_current_user(request: Request) -> Optional[Identity]:
    """
    Get the signed-in user from the session cookie.
    Returns None if not authenticated.
    """
    dev_user = request.headers.get("X-Dev-User")
    if is_dev_mode() and dev_user:
        return Identity(user_id=dev_user, email=f"{dev_user}@dev.local")

    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None

    try:
        secret = get_cookie_secret()
    except ValueError:
        return None

    return verify_session_token(token, secret)


def user_required(request: Request) -> Identity:
    """
    FastAPI dependency that requires a signed-in user.
    Raises 401 HTTPException if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user

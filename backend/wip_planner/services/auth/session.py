from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, Request
from jose import JWTError, jwt

from wip_planner.schemas.api.auth import SessionUser
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)

ALGORITHM = "HS256"


def create_session_token(user: SessionUser, now: Optional[datetime] = None) -> str:
    """Sign a session JWT for the given identity."""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "picture": user.image,
        "iat": now,
        "exp": now + timedelta(days=settings.SESSION_MAX_AGE_DAYS),
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=ALGORITHM)


def decode_session_token(token: str) -> Optional[SessionUser]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        return None

    subject = payload.get("sub")
    if not subject:
        return None
    return SessionUser(
        id=subject,
        email=payload.get("email"),
        name=payload.get("name"),
        image=payload.get("picture"),
    )


def _token_from_request(request: Request) -> Optional[str]:
    settings = get_settings()
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


async def get_current_session(request: Request) -> SessionUser:
    """FastAPI dependency: the signed-in identity, or 401."""
    token = _token_from_request(request)
    session_user = decode_session_token(token) if token else None
    if session_user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session_user

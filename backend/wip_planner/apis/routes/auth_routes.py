"""
FastAPI routes for third-party sign-in and the session cookie.
"""

from __future__ import annotations

import secrets
from typing import Optional
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import RedirectResponse

from wip_planner.schemas.api.auth import ProviderInfo, ProvidersResponse, SessionUser
from wip_planner.schemas.api.common import ActionResponse
from wip_planner.services.auth import create_session_token, get_current_session
from wip_planner.services.auth.providers import (
    ProviderError,
    configured_providers,
    exchange_code,
    fetch_profile,
)
from wip_planner.services.auth.reconciliation import SignInRejected, reconcile_sign_in
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

STATE_COOKIE_NAME = "wip_oauth_state"
STATE_MAX_AGE_SECONDS = 600


def callback_url(provider_id: str) -> str:
    return f"{get_settings().API_BASE_URL}/api/auth/callback/{provider_id}"


def signin_error_redirect(error: str) -> RedirectResponse:
    response = RedirectResponse(url=f"{get_settings().BASE_URL}/signin?error={quote(error)}", status_code=302)
    response.delete_cookie(STATE_COOKIE_NAME)
    return response


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers():
    """Identity providers with complete credentials."""
    providers = configured_providers()
    return ProvidersResponse(
        providers=[
            ProviderInfo(id=p.id, name=p.name, login_url=f"/api/auth/login/{p.id}")
            for p in providers.values()
        ]
    )


@router.get("/login/{provider_id}")
async def login(provider_id: str):
    """Redirect to the provider's consent page."""
    provider = configured_providers().get(provider_id)
    if provider is None:
        raise HTTPException(status_code=404, detail=f"Unknown provider '{provider_id}'")

    state = secrets.token_urlsafe(24)
    response = RedirectResponse(url=provider.authorization_url(callback_url(provider_id), state), status_code=302)
    response.set_cookie(
        STATE_COOKIE_NAME,
        state,
        max_age=STATE_MAX_AGE_SECONDS,
        httponly=True,
        secure=get_settings().SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/callback/{provider_id}")
async def callback(
    provider_id: str,
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
):
    """
    Finish the authorization-code flow.

    Reconciles the provider profile with the stored user, sets the session
    cookie and returns to the app. Failures land on the sign-in page.
    """
    settings = get_settings()
    provider = configured_providers().get(provider_id)
    if provider is None:
        return signin_error_redirect("UnknownProvider")
    if error:
        logger.warning(f"Provider {provider_id} returned error: {error}")
        return signin_error_redirect(error)

    expected_state = request.cookies.get(STATE_COOKIE_NAME)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        return signin_error_redirect("InvalidState")

    try:
        access_token = await exchange_code(provider, code, callback_url(provider_id))
        profile = await fetch_profile(provider, access_token)
        session_user = await reconcile_sign_in(profile)
    except SignInRejected as e:
        logger.warning(f"Sign-in rejected: {e}")
        return signin_error_redirect("AccessDenied")
    except (ProviderError, httpx.HTTPError) as e:
        logger.error(f"Sign-in with {provider_id} failed: {e}")
        return signin_error_redirect("OAuthCallback")

    response = RedirectResponse(url=settings.BASE_URL, status_code=302)
    response.delete_cookie(STATE_COOKIE_NAME)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        create_session_token(session_user),
        max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 3600,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    logger.info(f"Signed in {session_user.email} as {session_user.id} via {provider_id}")
    return response


@router.post("/logout", response_model=ActionResponse)
async def logout(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME)
    return ActionResponse(success=True, message="Signed out")


@router.get("/session", response_model=SessionUser)
async def get_session(session_user: SessionUser = Depends(get_current_session)):
    """The signed-in identity."""
    return session_user

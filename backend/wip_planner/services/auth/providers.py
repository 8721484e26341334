"""
OAuth2 / OpenID Connect identity providers used for sign-in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urlencode

import httpx

from wip_planner.schemas.api.auth import ProviderProfile
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import Settings, get_settings

logger = get_logger(__name__)


class ProviderError(Exception):
    """Raised when the identity provider rejects a request"""


@dataclass(frozen=True)
class IdentityProvider:
    id: str
    name: str
    client_id: str
    client_secret: str
    authorize_url: str
    token_url: str
    userinfo_url: str
    scopes: List[str] = field(default_factory=lambda: ["openid", "profile", "email"])

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"


def configured_providers(settings: Optional[Settings] = None) -> Dict[str, IdentityProvider]:
    """Providers with complete credentials, keyed by id"""
    settings = settings or get_settings()
    providers: Dict[str, IdentityProvider] = {}

    if settings.AZURE_AD_CLIENT_ID and settings.AZURE_AD_CLIENT_SECRET and settings.AZURE_AD_TENANT_ID:
        base = f"https://login.microsoftonline.com/{settings.AZURE_AD_TENANT_ID}/oauth2/v2.0"
        providers["azure-ad"] = IdentityProvider(
            id="azure-ad",
            name="Microsoft Entra ID",
            client_id=settings.AZURE_AD_CLIENT_ID,
            client_secret=settings.AZURE_AD_CLIENT_SECRET,
            authorize_url=f"{base}/authorize",
            token_url=f"{base}/token",
            userinfo_url="https://graph.microsoft.com/oidc/userinfo",
        )

    if settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET:
        providers["google"] = IdentityProvider(
            id="google",
            name="Google",
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
            token_url="https://oauth2.googleapis.com/token",
            userinfo_url="https://openidconnect.googleapis.com/v1/userinfo",
        )

    return providers


async def exchange_code(provider: IdentityProvider, code: str, redirect_uri: str) -> str:
    """Trade an authorization code for an access token"""
    async with httpx.AsyncClient(timeout=15) as client:
        response = await client.post(
            provider.token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": provider.client_id,
                "client_secret": provider.client_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    if response.status_code != 200:
        logger.error(f"Token exchange with {provider.id} failed: {response.status_code} {response.text}")
        raise ProviderError(f"Token exchange failed with status {response.status_code}")
    token = response.json().get("access_token")
    if not token:
        raise ProviderError("Token response did not contain an access token")
    return token


async def fetch_profile(provider: IdentityProvider, access_token: str) -> ProviderProfile:
    """Fetch and normalize the OpenID userinfo document"""
    async with httpx.AsyncClient(timeout=15) as client:
        response = await client.get(
            provider.userinfo_url,
            headers={"Authorization": f"Bearer {access_token}"},
        )
    if response.status_code != 200:
        logger.error(f"Userinfo request to {provider.id} failed: {response.status_code}")
        raise ProviderError(f"Userinfo request failed with status {response.status_code}")

    data = response.json()
    email = data.get("email") or data.get("preferred_username")
    return ProviderProfile(
        provider=provider.id,
        subject=str(data["sub"]),
        email=email,
        name=data.get("name"),
        # Microsoft's picture claim needs its own bearer token to load
        image=data.get("picture") if provider.id == "google" else None,
    )

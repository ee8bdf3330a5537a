"""Verify mobile OAuth tokens against the provider and return the profile."""
import logging
from collections.abc import AsyncGenerator

import httpx
from fastapi import HTTPException
from pydantic import BaseModel

from sortr.config import Settings
from sortr.errors import Unauthenticated, ValidationFailed

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GITHUB_API_URL = "https://api.github.com"
MICROSOFT_GRAPH_URL = "https://graph.microsoft.com/v1.0/me"

OAUTH_TIMEOUT = 10.0


class OAuthProfile(BaseModel):
    provider: str
    provider_id: str
    email: str | None = None
    display_name: str | None = None
    username_hint: str | None = None


async def get_oauth_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=OAUTH_TIMEOUT) as client:
        yield client


async def _get_json(client: httpx.AsyncClient, provider: str, url: str, **kwargs) -> dict | list:
    try:
        response = await client.get(url, **kwargs)
    except httpx.HTTPError as exc:
        logger.error("Could not reach %s: %s", provider, exc)
        raise HTTPException(status_code=502, detail=f"Could not reach {provider}")
    if response.status_code != 200:
        logger.warning("AUDIT: %s rejected a mobile token (HTTP %d)", provider, response.status_code)
        raise Unauthenticated(f"Invalid {provider} token")
    return response.json()


async def verify_google(client: httpx.AsyncClient, settings: Settings, id_token: str | None) -> OAuthProfile:
    if not id_token:
        raise ValidationFailed.for_field("idToken", "idToken is required")
    info = await _get_json(client, "Google", GOOGLE_TOKENINFO_URL, params={"id_token": id_token})
    if settings.GOOGLE_CLIENT_ID and info.get("aud") != settings.GOOGLE_CLIENT_ID:
        logger.warning("AUDIT: Google token issued for another client: %s", info.get("aud"))
        raise Unauthenticated("Invalid Google token")
    if not info.get("sub"):
        raise Unauthenticated("Invalid Google token")
    email = info.get("email")
    return OAuthProfile(
        provider="google",
        provider_id=str(info["sub"]),
        email=email,
        display_name=info.get("name"),
        username_hint=email.split("@")[0] if email else None,
    )


async def verify_github(client: httpx.AsyncClient, access_token: str | None) -> OAuthProfile:
    if not access_token:
        raise ValidationFailed.for_field("accessToken", "accessToken is required")
    headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/vnd.github+json"}
    user = await _get_json(client, "GitHub", f"{GITHUB_API_URL}/user", headers=headers)
    email = user.get("email")
    if not email:
        # private address; the primary verified one is only on /user/emails
        emails = await _get_json(client, "GitHub", f"{GITHUB_API_URL}/user/emails", headers=headers)
        primary = next((e for e in emails if e.get("primary") and e.get("verified")), None)
        email = primary["email"] if primary else None
    return OAuthProfile(
        provider="github",
        provider_id=str(user["id"]),
        email=email,
        display_name=user.get("name") or user.get("login"),
        username_hint=user.get("login"),
    )


async def verify_microsoft(client: httpx.AsyncClient, access_token: str | None) -> OAuthProfile:
    if not access_token:
        raise ValidationFailed.for_field("accessToken", "accessToken is required")
    me = await _get_json(client, "Microsoft", MICROSOFT_GRAPH_URL, headers={"Authorization": f"Bearer {access_token}"})
    email = me.get("mail") or me.get("userPrincipalName")
    return OAuthProfile(
        provider="microsoft",
        provider_id=str(me["id"]),
        email=email,
        display_name=me.get("displayName"),
        username_hint=email.split("@")[0] if email else None,
    )

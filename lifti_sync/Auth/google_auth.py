# lifti_sync/Auth/google_auth.py
# Description: Google identity helpers: validate an access token, load the profile, revoke.
#
# Imports
import time
from typing import Optional
#
# Third-Party Imports
import httpx
from loguru import logger
from pydantic import BaseModel
#
# Local Imports
from lifti_sync.backup_api.exceptions import (
    CredentialRevocationFailedError,
    RemoteConnectionError,
    RemoteRequestFailedError,
    UnauthenticatedError,
)
#
########################################################################################################################
#
# Functions:

GOOGLE_USERINFO_URL = 'https://www.googleapis.com/oauth2/v3/userinfo'
GOOGLE_REVOKE_URL = 'https://oauth2.googleapis.com/revoke'
DRIVE_SCOPE = 'https://www.googleapis.com/auth/drive.appdata'


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class GoogleSignIn(BaseModel):
    token: str
    expires_at: int
    user: AuthUser


def is_google_auth_configured(client_id: Optional[str]) -> bool:
    return bool(client_id)


async def fetch_user_info(access_token: str, transport: Optional[httpx.AsyncBaseTransport] = None,
                          timeout: float = 30.0) -> AuthUser:
    """Loads the Google profile behind an access token. A 401 means the token is not usable."""
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            response = await client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        except httpx.RequestError as e:
            raise RemoteConnectionError(f"Connection error to {GOOGLE_USERINFO_URL}: {e}") from e
    if response.status_code == 401:
        raise UnauthenticatedError("Google rejected the access token.")
    if response.is_error:
        raise RemoteRequestFailedError(response.status_code, "Failed to fetch Google profile.")
    try:
        data = response.json()
        return AuthUser(id=data["sub"], email=data.get("email"), name=data.get("name"), avatar_url=data.get("picture"))
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Unusable Google profile response: {e}")
        raise RemoteRequestFailedError(response.status_code, "Google profile response was not usable.") from e


async def sign_in_with_token(access_token: str, expires_in: int = 3600,
                             transport: Optional[httpx.AsyncBaseTransport] = None) -> GoogleSignIn:
    """Turns a freshly issued access token into a sign-in result (profile plus expiry)."""
    user = await fetch_user_info(access_token, transport=transport)
    return GoogleSignIn(
        token=access_token,
        expires_at=int(time.time() * 1000) + expires_in * 1000,
        user=user,
    )


async def revoke_google_token(access_token: Optional[str],
                              transport: Optional[httpx.AsyncBaseTransport] = None):
    if not access_token:
        return
    async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
        try:
            response = await client.post(GOOGLE_REVOKE_URL, params={"token": access_token})
        except httpx.RequestError as e:
            raise CredentialRevocationFailedError(f"Could not reach Google to revoke token: {e}") from e
    if response.is_error:
        raise CredentialRevocationFailedError(f"Google refused token revocation ({response.status_code}).")
    logger.info("Google access token revoked.")

#
# End of lifti_sync/Auth/google_auth.py
########################################################################################################################

# lifti_sync/Auth/auth_session.py
# Description: Authentication state for the cloud backup (anonymous / authenticating / authenticated).
#
# Imports
from typing import Literal, Optional
#
# Third-Party Imports
import httpx
from loguru import logger
from pydantic import BaseModel
#
# Local Imports
from lifti_sync.Auth.google_auth import AuthUser, is_google_auth_configured, revoke_google_token, sign_in_with_token
from lifti_sync.backup_api.exceptions import BackupAPIError, ConfigurationMissingError, CredentialRevocationFailedError
#
########################################################################################################################
#
# Functions:

AuthStatus = Literal['anonymous', 'authenticating', 'authenticated']


class AuthState(BaseModel):
    status: AuthStatus = 'anonymous'
    provider: Optional[Literal['google']] = None
    user: Optional[AuthUser] = None
    access_token: Optional[str] = None
    token_expires_at: Optional[int] = None
    last_error: Optional[str] = None


class AuthSession:
    """
    Holds the bearer credential used by the backup client.

    The sync engine only asks three things of it: `is_authenticated`,
    `access_token` and `user_id`. Token acquisition (the OAuth consent flow)
    happens outside; `connect_google` receives the resulting access token.
    """

    def __init__(self, client_id: Optional[str], transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = client_id
        self._transport = transport
        self.state = AuthState()

    @property
    def is_authenticated(self) -> bool:
        return (self.state.status == 'authenticated'
                and bool(self.state.access_token)
                and self.state.user is not None
                and bool(self.state.user.id))

    @property
    def access_token(self) -> Optional[str]:
        return self.state.access_token

    @property
    def user_id(self) -> Optional[str]:
        return self.state.user.id if self.state.user else None

    def _reset(self, last_error: Optional[str] = None):
        self.state = AuthState(last_error=last_error)

    async def connect_google(self, access_token: str, expires_in: int = 3600) -> bool:
        """
        Validates the token against Google and switches to authenticated. Returns success.

        Raises:
            ConfigurationMissingError: No OAuth client id is configured. The session
                is left anonymous with the message in `last_error`.
        """
        if not is_google_auth_configured(self.client_id):
            message = "Google backup is unavailable. Missing LIFTI_GOOGLE_CLIENT_ID."
            self._reset(message)
            raise ConfigurationMissingError(message)

        self.state = self.state.model_copy(update={'status': 'authenticating', 'last_error': None})
        try:
            sign_in = await sign_in_with_token(access_token, expires_in, transport=self._transport)
        except BackupAPIError as e:
            logger.warning(f"Google sign-in failed: {e}")
            self._reset(str(e) or "Google sign-in failed.")
            return False

        self.state = AuthState(
            status='authenticated',
            provider='google',
            user=sign_in.user,
            access_token=sign_in.token,
            token_expires_at=sign_in.expires_at,
        )
        logger.info(f"Connected Google backup for user {sign_in.user.id}.")
        return True

    async def hydrate_session(self, access_token: Optional[str], expires_in: int = 3600):
        """
        Silent sign-in at startup. Any failure leaves the session anonymous
        without reporting an error, except a missing client id.
        """
        if not is_google_auth_configured(self.client_id):
            self._reset("Google backup not configured for this build.")
            return
        if not access_token:
            self._reset()
            return
        try:
            sign_in = await sign_in_with_token(access_token, expires_in, transport=self._transport)
        except BackupAPIError as e:
            logger.info(f"Silent Google sign-in failed: {e}")
            self._reset()
            return
        self.state = AuthState(
            status='authenticated',
            provider='google',
            user=sign_in.user,
            access_token=sign_in.token,
            token_expires_at=sign_in.expires_at,
        )

    async def disconnect(self):
        """Revokes the token (best-effort) and returns to anonymous."""
        try:
            await revoke_google_token(self.state.access_token, transport=self._transport)
        except CredentialRevocationFailedError as e:
            logger.warning(f"Token revocation failed, disconnecting anyway: {e}")
        self._reset()

#
# End of lifti_sync/Auth/auth_session.py
########################################################################################################################

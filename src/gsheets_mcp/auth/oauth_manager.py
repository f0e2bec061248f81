"""Credential provider for Google Sheets access.

OAuthManager is what the rest of the server talks to: it loads the stored
credential record, runs the browser authorization flow when there is none,
and keeps the access token fresh, writing refreshed tokens back to storage.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from gsheets_mcp.auth.errors import TokenRefreshError
from gsheets_mcp.auth.models import CredentialRecord, TokenStatus
from gsheets_mcp.auth.oauth_flow import AuthorizationFlow
from gsheets_mcp.auth.token_storage import TokenStorage
from gsheets_mcp.config import OAuthClientConfig

logger = logging.getLogger(__name__)


class OAuthManager:
    """OAuth credential provider for the Sheets API.

    Attributes:
        config: OAuth client configuration.
        storage: Token storage used for persistence.

    Example:
        ```python
        manager = OAuthManager(load_config())

        # Loads the stored token or runs the browser flow
        credentials = await manager.obtain()

        # Valid bearer token, refreshed when needed
        token = await manager.get_access_token()
        ```
    """

    def __init__(
        self,
        config: OAuthClientConfig,
        storage: TokenStorage | None = None,
        flow_factory: Callable[[OAuthClientConfig], AuthorizationFlow] | None = None,
    ) -> None:
        """Initialize OAuth manager.

        Args:
            config: OAuth client configuration.
            storage: Token storage instance. Created from config.token_file
                if not provided.
            flow_factory: Builds the authorization flow. Defaults to
                AuthorizationFlow.
        """
        self.config = config
        self.storage = storage or TokenStorage(token_path=config.token_file)
        self._flow_factory = flow_factory or AuthorizationFlow
        self._credentials: Credentials | None = None
        self._lock = asyncio.Lock()

    @property
    def token_path(self) -> Path:
        """Get the token storage path."""
        return self.storage.token_path

    def has_valid_tokens(self) -> bool:
        """Check if a valid, unexpired token is stored."""
        return self.storage.get_status() == TokenStatus.VALID

    def get_status(self) -> tuple[TokenStatus, CredentialRecord | None]:
        """Get the status of the stored token.

        Returns:
            Tuple of (TokenStatus, CredentialRecord or None).
        """
        status = self.storage.get_status()
        record = self.storage.load() if status != TokenStatus.MISSING else None
        return (status, record)

    async def obtain(self, cancel: asyncio.Event | None = None) -> Credentials:
        """Get credentials, running the authorization flow if none are stored.

        A stored record is used as-is; expiry is handled later by
        get_access_token(), so no listener is ever bound on this path.

        Args:
            cancel: Optional cancellation signal for the authorization flow.

        Returns:
            Auto-refreshable Google OAuth2 credentials.

        Raises:
            AuthError: If the authorization flow fails.
        """
        record = self.storage.load()
        if record is None:
            logger.info("No existing token found. Starting OAuth flow...")
            record = await self.authenticate(cancel)

        self._credentials = record.to_credentials(self.config.client_id, self.config.client_secret)
        return self._credentials

    async def authenticate(self, cancel: asyncio.Event | None = None) -> CredentialRecord:
        """Run the browser authorization flow and store the resulting token.

        Args:
            cancel: Optional cancellation signal for the authorization flow.

        Returns:
            The newly issued credential record.
        """
        flow = self._flow_factory(self.config)
        record = await flow.run(cancel)

        try:
            self.storage.save(record)
        except OSError as e:
            logger.warning(f"Unable to save token: {e}")

        self._credentials = record.to_credentials(self.config.client_id, self.config.client_secret)
        return record

    async def get_access_token(self) -> str:
        """Get a valid access token, refreshing if necessary.

        Returns:
            Valid access token string.

        Raises:
            TokenRefreshError: If the token is expired and cannot be refreshed.
        """
        async with self._lock:
            if self._credentials is None:
                await self.obtain()

            credentials = self._credentials
            if not credentials.valid:
                await self._refresh(credentials)

            return credentials.token

    async def _refresh(self, credentials: Credentials) -> None:
        if not credentials.refresh_token:
            raise TokenRefreshError(
                "Access token expired and no refresh token is stored. "
                f"Delete {self.token_path} and re-authenticate."
            )

        logger.info("Token expired, attempting refresh...")
        previous = credentials.token
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, credentials.refresh, Request())
        except (RefreshError, TransportError) as e:
            raise TokenRefreshError(f"Token refresh failed: {e}") from e

        if credentials.token != previous:
            self._persist_refreshed(credentials)

    def _persist_refreshed(self, credentials: Credentials) -> None:
        """Write refreshed credentials back to storage (best-effort)."""
        record = CredentialRecord.from_credentials(
            credentials, list(credentials.scopes or self.config.scopes)
        )
        try:
            self.storage.save(record)
        except OSError as e:
            logger.warning(f"Unable to save refreshed token: {e}")

"""Credential data models.

The credential record is persisted as JSON using the standard OAuth 2.0
token field names (access_token, token_type, refresh_token, expiry).
"""

from datetime import datetime, timedelta, timezone
from enum import Enum

from google.oauth2.credentials import Credentials
from pydantic import BaseModel, Field

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"  # nosec B105


class TokenStatus(str, Enum):
    """State of the stored credential record."""

    VALID = "valid"
    EXPIRED = "expired"
    MISSING = "missing"
    INVALID = "invalid"


class CredentialRecord(BaseModel):
    """Delegated-access credential for the Sheets API.

    Attributes:
        access_token: Short-lived bearer token.
        refresh_token: Long-lived token used to mint new access tokens.
        token_type: Token type, normally "Bearer".
        expiry: Absolute, timezone-aware expiry. None means no known expiry.
        scopes: Scopes granted with the token.
    """

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"  # nosec B105
    expiry: datetime | None = None
    scopes: list[str] = Field(default_factory=list)

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check whether the access token is expired or about to expire.

        Args:
            buffer_seconds: Treat the token as expired this many seconds early.
        """
        if self.expiry is None:
            return False
        expiry = self.expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) + timedelta(seconds=buffer_seconds) >= expiry

    @classmethod
    def from_credentials(cls, credentials: Credentials, scopes: list[str]) -> "CredentialRecord":
        """Convert google-auth Credentials to a CredentialRecord.

        google-auth keeps expiry as a naive UTC datetime; the record stores it
        timezone-aware.
        """
        expiry = credentials.expiry
        if expiry is not None and expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)

        return cls(
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expiry=expiry,
            scopes=list(scopes),
        )

    def to_credentials(self, client_id: str, client_secret: str) -> Credentials:
        """Build auto-refreshable google-auth Credentials from this record."""
        expiry = None
        if self.expiry is not None:
            expiry = self.expiry.astimezone(timezone.utc).replace(tzinfo=None)

        return Credentials(
            token=self.access_token,
            refresh_token=self.refresh_token,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=client_id,
            client_secret=client_secret,
            scopes=self.scopes or None,
            expiry=expiry,
        )

"""OAuth client configuration for mcp-google-sheets.

Environment Variables:
    GOOGLE_OAUTH_CLIENT_ID: Google OAuth client ID.
    GOOGLE_OAUTH_CLIENT_SECRET: Google OAuth client secret.
    GOOGLE_OAUTH_CREDENTIALS: Path to a client secrets JSON file, used when
        the client ID/secret variables are not both set.
    GOOGLE_OAUTH_REDIRECT_URI: Redirect URI (default: http://localhost:8080/oauth/callback).
    GOOGLE_OAUTH_TOKEN_FILE: Token file path
        (default: ~/.config/mcp-google-sheets/token.json).
"""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR_NAME = "mcp-google-sheets"
TOKEN_FILE_NAME = "token.json"
CREDENTIALS_FILE_NAME = "oauth_credentials.json"

DEFAULT_REDIRECT_URI = "http://localhost:8080/oauth/callback"
DEFAULT_CALLBACK_TIMEOUT = 300.0

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class ConfigError(Exception):
    """Raised when OAuth client configuration cannot be resolved."""


class OAuthClientConfig(BaseModel):
    """OAuth client settings consumed by the credential lifecycle.

    Attributes:
        client_id: Google OAuth client ID.
        client_secret: Google OAuth client secret.
        redirect_uri: Local callback URI the browser is redirected to.
        token_file: Where the credential record is persisted.
        scopes: OAuth scopes to request.
        callback_timeout: Seconds to wait for the browser callback.
    """

    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    redirect_uri: str = DEFAULT_REDIRECT_URI
    token_file: Path = Field(default_factory=lambda: get_token_path())
    scopes: list[str] = Field(default_factory=lambda: list(SHEETS_SCOPES))
    callback_timeout: float = Field(default=DEFAULT_CALLBACK_TIMEOUT, gt=0)

    def client_config(self) -> dict:
        """Build the client secrets mapping expected by google-auth-oauthlib."""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.redirect_uri],
            }
        }


def get_config_dir() -> Path:
    """Get the user-level configuration directory."""
    return Path.home() / ".config" / CONFIG_DIR_NAME


def get_token_path() -> Path:
    """Get the token file path, honouring GOOGLE_OAUTH_TOKEN_FILE."""
    override = os.environ.get("GOOGLE_OAUTH_TOKEN_FILE")
    if override:
        return Path(override).expanduser()
    return get_config_dir() / TOKEN_FILE_NAME


def _find_credentials_file() -> Path:
    override = os.environ.get("GOOGLE_OAUTH_CREDENTIALS")
    if override:
        return Path(override).expanduser()

    user_file = get_config_dir() / CREDENTIALS_FILE_NAME
    if user_file.exists():
        return user_file
    return Path(CREDENTIALS_FILE_NAME)


def _load_credentials_file(path: Path) -> tuple[str, str, str | None]:
    """Read client ID, secret and first redirect URI from a client secrets file."""
    try:
        data = json.loads(path.read_text())
    except OSError as e:
        raise ConfigError(
            f"unable to read OAuth credentials file: {e}. "
            "Please set GOOGLE_OAUTH_CLIENT_ID and GOOGLE_OAUTH_CLIENT_SECRET "
            f"environment variables or provide {CREDENTIALS_FILE_NAME}"
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"unable to parse OAuth credentials: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("unable to parse OAuth credentials: expected a JSON object")

    # Installed-app credentials take precedence over web credentials
    for section in ("installed", "web"):
        entry = data.get(section) or {}
        if entry.get("client_id"):
            redirect_uris = entry.get("redirect_uris") or []
            return (
                entry["client_id"],
                entry.get("client_secret", ""),
                redirect_uris[0] if redirect_uris else None,
            )

    raise ConfigError("no valid OAuth credentials found in file")


def load_config() -> OAuthClientConfig:
    """Resolve OAuth client configuration from the environment or a secrets file.

    Returns:
        Validated OAuthClientConfig.

    Raises:
        ConfigError: If no usable client ID/secret can be found.
    """
    client_id = os.environ.get("GOOGLE_OAUTH_CLIENT_ID")
    client_secret = os.environ.get("GOOGLE_OAUTH_CLIENT_SECRET")

    if client_id and client_secret:
        redirect_uri = os.environ.get("GOOGLE_OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI)
    else:
        client_id, client_secret, file_redirect = _load_credentials_file(
            _find_credentials_file()
        )
        redirect_uri = file_redirect or DEFAULT_REDIRECT_URI

    try:
        return OAuthClientConfig(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            token_file=get_token_path(),
        )
    except ValidationError as e:
        raise ConfigError(f"invalid OAuth client configuration: {e}") from e

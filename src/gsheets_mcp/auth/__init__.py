"""OAuth authentication for mcp-google-sheets.

Quick Start:
    ```python
    from gsheets_mcp.auth import OAuthManager
    from gsheets_mcp.config import load_config

    manager = OAuthManager(load_config())

    # Load the stored token, or run the browser flow if there is none
    credentials = await manager.obtain()

    # Bearer token for API calls, refreshed and re-saved when expired
    token = await manager.get_access_token()
    ```
"""

from gsheets_mcp.auth.errors import (
    AuthError,
    AuthorizationCancelled,
    AuthorizationTimeout,
    CallbackError,
    ListenerStartupError,
    TokenExchangeError,
    TokenRefreshError,
)
from gsheets_mcp.auth.models import CredentialRecord, TokenStatus
from gsheets_mcp.auth.oauth_flow import AuthorizationFlow, FlowState
from gsheets_mcp.auth.oauth_manager import OAuthManager
from gsheets_mcp.auth.token_storage import TokenStorage

__all__ = [
    "AuthError",
    "AuthorizationCancelled",
    "AuthorizationFlow",
    "AuthorizationTimeout",
    "CallbackError",
    "CredentialRecord",
    "FlowState",
    "ListenerStartupError",
    "OAuthManager",
    "TokenExchangeError",
    "TokenRefreshError",
    "TokenStatus",
    "TokenStorage",
]

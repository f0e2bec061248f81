"""Shared pytest fixtures for mcp-google-sheets tests.

This module provides reusable fixtures for credential storage, the OAuth
manager, a mocked Sheets backend and the protocol engine.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from gsheets_mcp.auth.models import CredentialRecord
from gsheets_mcp.config import OAuthClientConfig
from gsheets_mcp.protocol.dispatcher import RequestDispatcher
from gsheets_mcp.protocol.executor import ToolExecutor

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

# =============================================================================
# Credential Fixtures
# =============================================================================


@pytest.fixture
def valid_record() -> CredentialRecord:
    """Create a valid, non-expired credential record."""
    return CredentialRecord(
        access_token="test_access_token_abc123",
        refresh_token="test_refresh_token_xyz789",
        expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=[SHEETS_SCOPE],
    )


@pytest.fixture
def expired_record() -> CredentialRecord:
    """Create an expired credential record."""
    return CredentialRecord(
        access_token="expired_access_token",
        refresh_token="test_refresh_token",
        expiry=datetime.now(timezone.utc) - timedelta(hours=1),
        scopes=[SHEETS_SCOPE],
    )


@pytest.fixture
def mock_google_credentials() -> MagicMock:
    """Create a mock Google OAuth2 Credentials object."""
    mock_creds = MagicMock()
    mock_creds.token = "mock_access_token"
    mock_creds.refresh_token = "mock_refresh_token"
    mock_creds.expiry = datetime.now(timezone.utc) + timedelta(hours=1)
    mock_creds.scopes = [SHEETS_SCOPE]
    return mock_creds


# =============================================================================
# Storage / Manager Fixtures
# =============================================================================


@pytest.fixture
def temp_token_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for token storage tests."""
    token_dir = tmp_path / "mcp-google-sheets"
    token_dir.mkdir(parents=True, mode=0o700)
    return token_dir


@pytest.fixture
def temp_token_path(temp_token_dir: Path) -> Path:
    """Get the path for a temporary token.json file."""
    return temp_token_dir / "token.json"


@pytest.fixture
def oauth_config(temp_token_path: Path) -> OAuthClientConfig:
    """OAuth configuration with an ephemeral callback port."""
    return OAuthClientConfig(
        client_id="test-client-id.apps.googleusercontent.com",
        client_secret="test-client-secret",  # pragma: allowlist secret
        redirect_uri="http://127.0.0.1:0/oauth/callback",
        token_file=temp_token_path,
        callback_timeout=5.0,
    )


@pytest.fixture
def token_storage(temp_token_path: Path):
    """Create a TokenStorage instance with temporary storage."""
    from gsheets_mcp.auth.token_storage import TokenStorage

    return TokenStorage(token_path=temp_token_path)


@pytest.fixture
def mock_flow_factory(valid_record: CredentialRecord) -> MagicMock:
    """Flow factory whose flows succeed with valid_record."""
    flow = MagicMock()
    flow.run = AsyncMock(return_value=valid_record)
    return MagicMock(return_value=flow)


@pytest.fixture
def oauth_manager(oauth_config: OAuthClientConfig, token_storage, mock_flow_factory: MagicMock):
    """Create an OAuthManager with temporary storage and a mocked flow."""
    from gsheets_mcp.auth.oauth_manager import OAuthManager

    return OAuthManager(oauth_config, storage=token_storage, flow_factory=mock_flow_factory)


# =============================================================================
# Protocol Fixtures
# =============================================================================


@pytest.fixture
def mock_backend() -> MagicMock:
    """Create a mock Sheets backend with canned results for every tool."""
    backend = MagicMock()
    backend.read_sheet = AsyncMock(
        return_value={
            "range": "Sheet1!A1:B2",
            "values": [["a", "b"], ["c", "d"]],
            "row_count": 2,
            "col_count": 2,
        }
    )
    backend.write_sheet = AsyncMock(
        return_value={"updated_cells": 4, "message": "Data written successfully"}
    )
    backend.append_sheet = AsyncMock(
        return_value={"updated_rows": 1, "message": "Data appended successfully"}
    )
    backend.create_spreadsheet = AsyncMock(
        return_value={"spreadsheet_id": "new_id", "message": "Spreadsheet created successfully"}
    )
    backend.get_spreadsheet_info = AsyncMock(
        return_value={"spreadsheet_id": "abc", "title": "Budget", "sheets": []}
    )
    backend.add_sheet = AsyncMock(return_value={"message": "Sheet added successfully"})
    backend.clear_sheet = AsyncMock(
        return_value={"cleared_range": "Sheet1!A1:B2", "message": "Range cleared successfully"}
    )
    backend.batch_update = AsyncMock(
        return_value={"spreadsheet_id": "abc", "replies_count": 1}
    )
    return backend


@pytest.fixture
def executor(mock_backend: MagicMock) -> ToolExecutor:
    return ToolExecutor(mock_backend)


@pytest.fixture
def dispatcher(executor: ToolExecutor) -> RequestDispatcher:
    return RequestDispatcher(executor)

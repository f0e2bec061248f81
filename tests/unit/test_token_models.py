"""Unit tests for the credential record model."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from google.oauth2.credentials import Credentials

from gsheets_mcp.auth.models import GOOGLE_TOKEN_URI, CredentialRecord, TokenStatus

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"


@pytest.mark.unit
class TestTokenStatus:
    """Tests for TokenStatus enum."""

    def test_should_have_expected_values(self) -> None:
        """Verify TokenStatus has all expected values."""
        assert TokenStatus.VALID.value == "valid"
        assert TokenStatus.EXPIRED.value == "expired"
        assert TokenStatus.MISSING.value == "missing"
        assert TokenStatus.INVALID.value == "invalid"

    def test_should_be_string_enum(self) -> None:
        """Verify TokenStatus compares equal to its string value."""
        assert TokenStatus.VALID == "valid"


@pytest.mark.unit
class TestCredentialRecord:
    """Tests for CredentialRecord model."""

    def test_should_apply_defaults(self) -> None:
        """Verify optional fields have sensible defaults."""
        record = CredentialRecord(access_token="abc")

        assert record.refresh_token is None
        assert record.token_type == "Bearer"
        assert record.expiry is None
        assert record.scopes == []

    def test_should_report_not_expired(self, valid_record: CredentialRecord) -> None:
        assert valid_record.is_expired() is False

    def test_should_report_expired(self, expired_record: CredentialRecord) -> None:
        assert expired_record.is_expired() is True

    def test_should_treat_nearly_expired_token_as_expired(self) -> None:
        """Verify the buffer makes a token expiring within a minute count as expired."""
        record = CredentialRecord(
            access_token="abc",
            expiry=datetime.now(timezone.utc) + timedelta(seconds=30),
        )

        assert record.is_expired() is True
        assert record.is_expired(buffer_seconds=0) is False

    def test_should_never_expire_without_expiry(self) -> None:
        """Verify a record with no known expiry is never reported expired."""
        assert CredentialRecord(access_token="abc").is_expired() is False

    def test_should_handle_naive_expiry_as_utc(self) -> None:
        """Verify naive datetimes are interpreted as UTC."""
        naive_past = (datetime.now(timezone.utc) - timedelta(hours=1)).replace(tzinfo=None)
        record = CredentialRecord(access_token="abc", expiry=naive_past)

        assert record.is_expired() is True

    def test_should_serialize_with_oauth2_field_names(
        self, valid_record: CredentialRecord
    ) -> None:
        """Verify the persisted JSON uses the oauth2 token field names."""
        data = valid_record.model_dump(mode="json")

        assert set(data) == {"access_token", "refresh_token", "token_type", "expiry", "scopes"}

    def test_should_parse_json_without_optional_fields(self) -> None:
        """Verify a minimal token JSON parses."""
        record = CredentialRecord.model_validate_json(
            '{"access_token": "abc", "token_type": "Bearer"}'
        )

        assert record.access_token == "abc"
        assert record.refresh_token is None


@pytest.mark.unit
class TestCredentialConversion:
    """Tests for conversion to and from google-auth Credentials."""

    def test_should_build_credentials(self, valid_record: CredentialRecord) -> None:
        """Verify the record becomes refreshable google-auth credentials."""
        credentials = valid_record.to_credentials("client-id", "client-secret")

        assert isinstance(credentials, Credentials)
        assert credentials.token == valid_record.access_token
        assert credentials.refresh_token == valid_record.refresh_token
        assert credentials.token_uri == GOOGLE_TOKEN_URI
        assert credentials.client_id == "client-id"
        assert credentials.valid is True

    def test_should_pass_naive_utc_expiry_to_google_auth(
        self, valid_record: CredentialRecord
    ) -> None:
        """Verify expiry is handed to google-auth as naive UTC."""
        credentials = valid_record.to_credentials("client-id", "client-secret")

        assert credentials.expiry.tzinfo is None
        assert credentials.expiry == valid_record.expiry.replace(tzinfo=None)

    def test_should_mark_expired_credentials_invalid(
        self, expired_record: CredentialRecord
    ) -> None:
        credentials = expired_record.to_credentials("client-id", "client-secret")

        assert credentials.expired is True
        assert credentials.valid is False

    def test_should_convert_from_credentials(self, mock_google_credentials: MagicMock) -> None:
        """Verify google-auth credentials convert into a record."""
        record = CredentialRecord.from_credentials(mock_google_credentials, [SHEETS_SCOPE])

        assert record.access_token == "mock_access_token"
        assert record.refresh_token == "mock_refresh_token"
        assert record.scopes == [SHEETS_SCOPE]

    def test_should_make_naive_expiry_timezone_aware(self) -> None:
        """Verify naive google-auth expiry is stored as UTC-aware."""
        naive = datetime(2030, 1, 1, 12, 0, 0)
        credentials = MagicMock(token="t", refresh_token="r", expiry=naive)

        record = CredentialRecord.from_credentials(credentials, [])

        assert record.expiry == naive.replace(tzinfo=timezone.utc)

    def test_should_keep_missing_expiry(self) -> None:
        credentials = MagicMock(token="t", refresh_token=None, expiry=None)

        record = CredentialRecord.from_credentials(credentials, [])

        assert record.expiry is None
        assert record.refresh_token is None

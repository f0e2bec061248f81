"""JSON token storage for mcp-google-sheets.

Storage Location: ~/.config/mcp-google-sheets/token.json
(override with GOOGLE_OAUTH_TOKEN_FILE).

One credential record per file. The directory is kept at 0700 and the
file at 0600. Writes go through a temp file and an atomic rename, so a
failed write never leaves a truncated record behind. The record is never
deleted here; removing the file forces re-authorization.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from gsheets_mcp.auth.models import CredentialRecord, TokenStatus
from gsheets_mcp.config import get_token_path

logger = logging.getLogger(__name__)


class TokenStorage:
    """Durable store for a single credential record.

    Attributes:
        token_path: Path to the token JSON file.

    Example:
        ```python
        storage = TokenStorage()

        storage.save(
            CredentialRecord(
                access_token="abc123",
                refresh_token="def456",
                expiry=datetime.now(timezone.utc) + timedelta(hours=1),
            )
        )

        record = storage.load()
        if record:
            print(f"Token expires at: {record.expiry}")
        ```
    """

    def __init__(self, token_path: Path | None = None) -> None:
        """Initialize token storage.

        Args:
            token_path: Custom path for the token file. Defaults to
                ~/.config/mcp-google-sheets/token.json.
        """
        self.token_path = token_path or get_token_path()
        self._ensure_credentials_dir()

    def _ensure_credentials_dir(self) -> None:
        """Create credentials directory with secure permissions if needed.

        An existing directory is tightened to 0700 only when the current user
        owns it; a directory such as /tmp or the home directory is left alone.
        """
        creds_dir = self.token_path.parent
        if not creds_dir.exists():
            creds_dir.mkdir(parents=True, mode=0o700)
            return

        try:
            if creds_dir.stat().st_uid != os.getuid():
                return
            if creds_dir.stat().st_mode & 0o777 != 0o700:
                creds_dir.chmod(0o700)
        except OSError as e:
            logger.warning(f"Unable to secure credentials directory {creds_dir}: {e}")

    def load(self) -> CredentialRecord | None:
        """Load the stored credential record.

        Returns:
            CredentialRecord if present and parseable, None otherwise.
        """
        try:
            raw = self.token_path.read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Unable to read token file {self.token_path}: {e}")
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Token file {self.token_path} is corrupted: {e}")
            return None

        try:
            return CredentialRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Token file {self.token_path} is corrupted: {e}")
            return None

    def save(self, record: CredentialRecord) -> None:
        """Persist a credential record, replacing any previous one atomically.

        Args:
            record: Credential record to store.

        Raises:
            OSError: If the record cannot be written.
        """
        self._ensure_credentials_dir()

        fd, tmp_name = tempfile.mkstemp(
            dir=self.token_path.parent, prefix=".token-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write(record.model_dump_json(indent=2))
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.token_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_status(self) -> TokenStatus:
        """Get the status of the stored record.

        Returns:
            TokenStatus indicating the record's current state.
        """
        if not self.token_path.exists():
            return TokenStatus.MISSING

        record = self.load()
        if record is None:
            return TokenStatus.INVALID

        if record.is_expired():
            return TokenStatus.EXPIRED

        return TokenStatus.VALID

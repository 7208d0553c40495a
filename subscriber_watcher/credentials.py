"""OAuth credential model and its on-disk store."""

import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ValidationError, field_validator

from subscriber_watcher.exceptions import CredentialNotFoundError, CredentialStoreError

logger = logging.getLogger(__name__)


class Credential(BaseModel):
    """OAuth2 access/refresh token pair with expiry and scope."""

    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None
    scope: Optional[str] = None

    @field_validator("expiry")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_token_response(
        cls, data: Dict[str, Any], previous: Optional["Credential"] = None
    ) -> "Credential":
        """Build a credential from a token endpoint JSON response.

        Args:
            data: Decoded token endpoint response.
            previous: Credential being refreshed. Its refresh token and scope
                are kept when the response omits them.
        """
        expiry = None
        expires_in = data.get("expires_in")
        if expires_in:
            expiry = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))

        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type") or "Bearer",
            refresh_token=data.get("refresh_token") or (previous.refresh_token if previous else None),
            expiry=expiry,
            scope=data.get("scope") or (previous.scope if previous else None),
        )

    def is_expired(self, leeway: int = 10, now: Optional[datetime] = None) -> bool:
        """Check whether the access token is expired or about to expire.

        Args:
            leeway: Seconds before the real expiry at which the token already
                counts as expired.
            now: Reference time, defaults to the current UTC time.
        """
        if self.expiry is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expiry - timedelta(seconds=leeway) <= now

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type or 'Bearer'} {self.access_token}"


class CredentialStore:
    """Loads and saves the serialized credential as a JSON file."""

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = Path(path)

    def load(self) -> Credential:
        """Read the persisted credential.

        Raises:
            CredentialNotFoundError: If the file is missing or cannot be parsed.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CredentialNotFoundError(f"Cannot read {self.path}: {e}") from e

        try:
            return Credential.model_validate_json(raw)
        except ValidationError as e:
            raise CredentialNotFoundError(f"Cannot parse {self.path}: {e}") from e

    def save(self, credential: Credential) -> None:
        """Overwrite the persisted credential atomically.

        The credential is written to a temporary file next to the target and
        renamed over it, so readers see either the old or the new content.

        Raises:
            CredentialStoreError: If the file cannot be written.
        """
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(credential.model_dump_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CredentialStoreError(f"Unable to cache oauth token: {e}") from e

        logger.debug(f"Credential saved to {self.path}")

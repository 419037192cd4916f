"""Token storage for Codex OAuth

A single-record store: the token file holds at most one token set, and every
``store`` call overwrites it in place. Secrets are encrypted with Fernet
before they touch the disk.
"""

import json
import logging
import os
import platform
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .cipher import TokenCipher, default_cipher
from .constants import EXPIRY_BUFFER_SECONDS
from .models import TokenRecord, utcnow


logger = logging.getLogger(__name__)

_RECORD_FIELDS = (
    "access_token",
    "refresh_token",
    "expires_at",
    "account_id",
    "email",
    "token_data",
)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class CodexTokenStore:
    """Manages persistent storage of the Codex OAuth token record"""

    def __init__(self, token_file: Optional[Path] = None, cipher: Optional[TokenCipher] = None):
        """Initialize token storage

        Args:
            token_file: Path to token file (default: settings.CODEX_TOKEN_FILE)
            cipher: Cipher for secrets at rest (default: key from settings)
        """
        if token_file is None:
            from settings import CODEX_TOKEN_FILE
            token_file = CODEX_TOKEN_FILE

        self.token_file = Path(token_file)
        self.cipher = cipher or default_cipher()
        self._lock = threading.RLock()

    def _ensure_directory(self) -> None:
        """Create parent directory with secure permissions"""
        parent_dir = self.token_file.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def _serialize(self, record: TokenRecord) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "access_token": self.cipher.encrypt(record.access_token),
            "refresh_token": self.cipher.encrypt(record.refresh_token),
            "expires_at": record.expires_at.astimezone(timezone.utc).isoformat(),
            "account_id": record.account_id,
            "email": record.email,
            "token_data": None,
            "updated_at": record.updated_at.isoformat() if record.updated_at else None,
        }
        if record.token_data:
            data["token_data"] = self.cipher.encrypt(json.dumps(record.token_data))
        return data

    def _deserialize(self, data: Dict[str, Any]) -> TokenRecord:
        token_data: Dict[str, Any] = {}
        if data.get("token_data"):
            token_data = json.loads(self.cipher.decrypt(data["token_data"]))

        return TokenRecord(
            access_token=self.cipher.decrypt(data["access_token"]),
            refresh_token=self.cipher.decrypt(data["refresh_token"]),
            expires_at=_parse_datetime(data["expires_at"]),
            account_id=data.get("account_id"),
            email=data.get("email"),
            token_data=token_data,
            updated_at=_parse_datetime(data.get("updated_at")),
        )

    def _write(self, record: TokenRecord) -> None:
        self._ensure_directory()
        payload = json.dumps(self._serialize(record), indent=2)

        # Write to a sibling temp file and swap it in so readers never see a partial record
        fd, tmp_path = tempfile.mkstemp(dir=self.token_file.parent, prefix=".tokens-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            if platform.system() != "Windows":
                os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.token_file)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug(f"Saved Codex tokens to {self.token_file}")

    def current(self) -> Optional[TokenRecord]:
        """Load the stored token record

        Returns:
            TokenRecord, or None if nothing is stored or the file is unreadable
        """
        with self._lock:
            if not self.token_file.exists():
                logger.debug("No Codex token file found")
                return None

            try:
                data = json.loads(self.token_file.read_text(encoding="utf-8"))
                return self._deserialize(data)
            except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError) as e:
                logger.error(f"Failed to load Codex tokens from {self.token_file}: {e}")
                return None

    def store(self, **fields: Any) -> TokenRecord:
        """Create or update the single token record

        Fields not supplied keep their stored values. A first write must
        provide access_token and expires_at.

        Returns:
            The record as written
        """
        unknown = set(fields) - set(_RECORD_FIELDS)
        if unknown:
            raise TypeError(f"Unknown token record fields: {sorted(unknown)}")

        with self._lock:
            existing = self.current()
            if existing is not None:
                merged = {name: getattr(existing, name) for name in _RECORD_FIELDS}
                merged.update(fields)
            else:
                missing = [name for name in ("access_token", "expires_at") if not fields.get(name)]
                if missing:
                    raise ValueError(f"Cannot create token record without {missing}")
                merged = {"refresh_token": "", **fields}

            if merged.get("token_data") is None:
                merged["token_data"] = {}

            record = TokenRecord(updated_at=utcnow(), **merged)
            self._write(record)
            return record

    def clear(self) -> None:
        """Remove the stored record; a no-op when nothing is stored"""
        with self._lock:
            try:
                self.token_file.unlink()
                logger.info("Cleared Codex tokens")
            except FileNotFoundError:
                pass

    def is_expired(self) -> bool:
        """True if the stored access token is past its expiry (or nothing is stored)"""
        record = self.current()
        return record is None or record.is_expired()

    def is_expiring_soon(self, buffer_seconds: int = EXPIRY_BUFFER_SECONDS) -> bool:
        """True if the stored access token expires within ``buffer_seconds``"""
        record = self.current()
        return record is None or record.is_expiring_soon(buffer_seconds)

    def get_status(self) -> Dict[str, Any]:
        """Get token status without exposing secrets

        Returns:
            Dictionary with status information
        """
        record = self.current()

        if record is None:
            return {
                "has_tokens": False,
                "is_expired": True,
                "needs_refresh": True,
                "account_id": None,
                "email": None,
                "expires_at": None,
                "time_until_expiry": None,
                "updated_at": None,
            }

        delta = record.expires_at - utcnow()
        if delta.total_seconds() > 0:
            hours = int(delta.total_seconds() // 3600)
            minutes = int((delta.total_seconds() % 3600) // 60)
            time_until_expiry = f"{hours}h {minutes}m"
        else:
            time_until_expiry = "expired"

        return {
            "has_tokens": True,
            "is_expired": record.is_expired(),
            "needs_refresh": record.is_expiring_soon(),
            "account_id": record.account_id,
            "email": record.email,
            "expires_at": record.expires_at.isoformat(),
            "time_until_expiry": time_until_expiry,
            "updated_at": record.updated_at.isoformat() if record.updated_at else None,
        }

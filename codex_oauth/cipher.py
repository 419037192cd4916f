"""Symmetric encryption for token secrets at rest."""

from __future__ import annotations

import base64
import hashlib
import logging
import os
import platform
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class TokenCipher:
    """Encrypt and decrypt sensitive strings with Fernet."""

    def __init__(self, key: bytes) -> None:
        self._fernet = Fernet(key)

    @classmethod
    def from_secret(cls, secret: str) -> "TokenCipher":
        """Derive the Fernet key from a passphrase."""
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        return cls(base64.urlsafe_b64encode(digest))

    @classmethod
    def from_key_file(cls, key_file: str | Path) -> "TokenCipher":
        """Load the Fernet key from ``key_file``, generating it on first use."""
        path = Path(key_file)
        if path.exists():
            return cls(path.read_bytes().strip())

        path.parent.mkdir(parents=True, exist_ok=True)
        key = Fernet.generate_key()
        path.write_bytes(key)
        if platform.system() != "Windows":
            os.chmod(path, 0o600)
        logger.info(f"Generated token encryption key at {path}")
        return cls(key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a plaintext string and return the ciphertext."""
        token = self._fernet.encrypt(plaintext.encode("utf-8"))
        return token.decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a ciphertext string and return the plaintext."""
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")


def default_cipher() -> TokenCipher:
    """Build the cipher configured in settings"""
    from settings import CODEX_KEY_FILE, CODEX_TOKEN_SECRET

    if CODEX_TOKEN_SECRET:
        return TokenCipher.from_secret(CODEX_TOKEN_SECRET)
    return TokenCipher.from_key_file(CODEX_KEY_FILE)


__all__ = ["TokenCipher", "default_cipher"]

"""PKCE (Proof Key for Code Exchange) helpers for Codex OAuth"""

import base64
import hashlib
import secrets
import string

from .models import PkceCodes

# Subset of the RFC 7636 unreserved set; keeps the verifier URL-safe as-is
_VERIFIER_ALPHABET = string.ascii_letters + string.digits
VERIFIER_LENGTH = 43


def compute_challenge(verifier: str) -> str:
    """Compute the S256 code challenge for a verifier

    Args:
        verifier: PKCE code verifier

    Returns:
        base64url(SHA256(verifier)) with padding stripped
    """
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_pkce() -> PkceCodes:
    """
    Generate PKCE code verifier and challenge.

    RFC 7636 PKCE standard:
    - Verifier: 43-128 characters from the unreserved set
    - Challenge: SHA-256 hash of verifier, base64url encoded

    Returns:
        PkceCodes with verifier and challenge
    """
    verifier = "".join(secrets.choice(_VERIFIER_ALPHABET) for _ in range(VERIFIER_LENGTH))
    return PkceCodes(verifier=verifier, challenge=compute_challenge(verifier))


def create_state() -> str:
    """
    Generate random state parameter for CSRF protection.

    Returns:
        str: 32 hex characters (16 random bytes)
    """
    return secrets.token_hex(16)

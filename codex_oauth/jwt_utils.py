"""
JWT claim parsing and ChatGPT account ID extraction

Tokens are decoded WITHOUT signature verification. They are only ever
received over HTTPS from auth.openai.com, and the login flow does not fetch
the issuer's signing keys, so the claims are used as informational hints
(account id, email) and never for authorization decisions.
"""
import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional

from .constants import CHATGPT_ACCOUNT_ID_CLAIM, JWT_AUTH_CLAIM

logger = logging.getLogger(__name__)


def parse_jwt_claims(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode the payload segment of a JWT

    Args:
        token: JWT string (header.payload.signature)

    Returns:
        Dictionary of claims, or None if the token is empty or malformed
    """
    if not token:
        return None

    parts = token.split(".")
    if len(parts) != 3:
        return None

    payload = parts[1]
    # JWT uses base64url without padding
    padded = payload + "=" * (-len(payload) % 4)

    try:
        data = base64.urlsafe_b64decode(padded.encode("ascii"))
        claims = json.loads(data.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        logger.debug(f"Could not decode JWT payload: {e}")
        return None

    return claims if isinstance(claims, dict) else None


def extract_account_id(token: Optional[str]) -> Optional[str]:
    """Extract the ChatGPT account ID from a JWT

    Claims are searched in priority order:
    1. root ``chatgpt_account_id``
    2. ``https://api.openai.com/auth`` -> ``chatgpt_account_id``
    3. ``organizations[0].id``

    Args:
        token: Access or ID token

    Returns:
        Account ID if found, None otherwise
    """
    claims = parse_jwt_claims(token)
    if not claims:
        return None

    root = claims.get(CHATGPT_ACCOUNT_ID_CLAIM)
    if isinstance(root, str) and root:
        return root

    namespaced = claims.get(JWT_AUTH_CLAIM)
    if isinstance(namespaced, dict):
        nested = namespaced.get(CHATGPT_ACCOUNT_ID_CLAIM)
        if isinstance(nested, str) and nested:
            return nested

    orgs = claims.get("organizations")
    if isinstance(orgs, list) and orgs and isinstance(orgs[0], dict):
        org_id = orgs[0].get("id")
        if isinstance(org_id, str) and org_id:
            return org_id

    return None


def extract_email(token: Optional[str]) -> Optional[str]:
    """Extract the root ``email`` claim from a JWT"""
    claims = parse_jwt_claims(token)
    if not claims:
        return None
    email = claims.get("email")
    return email if isinstance(email, str) and email else None

"""Data models for Codex OAuth authentication"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from .constants import EXPIRY_BUFFER_SECONDS


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TokenRecord:
    """The single persisted set of OAuth tokens

    Attributes:
        access_token: Bearer token for API authentication
        refresh_token: Token for refreshing expired access tokens
        expires_at: Absolute (UTC) expiry of the access token
        account_id: ChatGPT account identifier, if known
        email: Account email, if known
        token_data: Auxiliary claims kept for later re-derivation (e.g. id_token)
        updated_at: Time of the last write
    """
    access_token: str
    refresh_token: str
    expires_at: datetime
    account_id: Optional[str] = None
    email: Optional[str] = None
    token_data: Dict[str, Any] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def is_expired(self) -> bool:
        return self.expires_at <= utcnow()

    def is_expiring_soon(self, buffer_seconds: int = EXPIRY_BUFFER_SECONDS) -> bool:
        return self.expires_at - timedelta(seconds=buffer_seconds) <= utcnow()

    @property
    def id_token(self) -> Optional[str]:
        return self.token_data.get("id_token")


@dataclass
class PkceCodes:
    """PKCE (Proof Key for Code Exchange) codes for OAuth flow

    Attributes:
        verifier: Random string used to generate the challenge
        challenge: base64url(SHA256(verifier)) without padding, sent in auth request
    """
    verifier: str
    challenge: str


@dataclass
class DeviceAuthSession:
    """Device authorization handle returned by the usercode endpoint"""
    device_auth_id: str
    user_code: str
    interval: int = 5


@dataclass
class OAuthState:
    """Server-side state of a pending web-redirect login"""
    verifier: str
    redirect_uri: str
    return_url: str = "/"
    created_at: datetime = field(default_factory=utcnow)

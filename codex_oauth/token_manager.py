"""OAuth token manager for Codex authentication"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from .constants import DEFAULT_EXPIRES_IN, EXPIRY_BUFFER_SECONDS
from .errors import RefreshFailed
from .jwt_utils import extract_account_id, extract_email
from .models import TokenRecord, utcnow
from .oauth_client import CodexOAuthClient
from .storage import CodexTokenStore


logger = logging.getLogger(__name__)


def _expiry_from(payload: Dict[str, Any]) -> datetime:
    expires_at = payload.get("expires_at")
    if isinstance(expires_at, datetime):
        return expires_at

    try:
        expires_in = payload.get("expires_in")
        expires_in = DEFAULT_EXPIRES_IN if expires_in is None else int(expires_in)
    except (TypeError, ValueError):
        expires_in = DEFAULT_EXPIRES_IN
    return utcnow() + timedelta(seconds=expires_in)


class CodexOAuthManager:
    """Manages Codex OAuth tokens with automatic refresh

    ``get_access_token`` is the one call every outbound request makes. It
    refreshes at most once per call and never returns a token that is inside
    the expiry buffer. Refreshes are serialized per manager with an
    asyncio lock; separate processes sharing a token file are not coordinated.
    """

    def __init__(
        self,
        storage: Optional[CodexTokenStore] = None,
        client: Optional[CodexOAuthClient] = None,
        buffer_seconds: int = EXPIRY_BUFFER_SECONDS,
    ):
        """Initialize OAuth manager

        Args:
            storage: Token storage instance (creates new if None)
            client: OAuth endpoint client (creates new if None)
            buffer_seconds: Refresh this many seconds before expiry
        """
        self.storage = storage or CodexTokenStore()
        self.client = client or CodexOAuthClient()
        self.buffer_seconds = buffer_seconds
        self._refresh_lock = asyncio.Lock()

    async def get_access_token(self) -> Optional[str]:
        """Get a valid OAuth access token

        Automatically refreshes tokens that are about to expire.

        Returns:
            Valid access token, or None if not logged in or refresh failed
        """
        stored = self.storage.current()
        if stored is None:
            logger.debug("No Codex tokens available")
            return None

        if not stored.is_expiring_soon(self.buffer_seconds):
            return stored.access_token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited for the lock
            stored = self.storage.current()
            if stored is None:
                return None
            if not stored.is_expiring_soon(self.buffer_seconds):
                return stored.access_token

            logger.info("Codex access token expiring, attempting refresh...")
            if not await self._refresh_locked():
                return None

        stored = self.storage.current()
        # The refreshed token may itself be inside the buffer
        if stored is None or stored.is_expiring_soon(self.buffer_seconds):
            return None
        return stored.access_token

    async def refresh_token(self) -> bool:
        """Refresh the stored tokens using the refresh grant

        Returns:
            True if refresh was successful
        """
        async with self._refresh_lock:
            return await self._refresh_locked()

    async def _refresh_locked(self) -> bool:
        stored = self.storage.current()
        if stored is None:
            logger.error("No tokens to refresh")
            return False
        if not stored.refresh_token:
            logger.error("No refresh token available")
            return False

        try:
            data = await self.client.refresh(stored.refresh_token)
        except RefreshFailed as e:
            logger.error(f"Failed to refresh Codex access token: {e}")
            return False

        access_token = data["access_token"]
        id_token = data.get("id_token")

        account_id = (
            data.get("account_id")
            or extract_account_id(access_token)
            or extract_account_id(id_token)
            or stored.account_id
        )

        fields: Dict[str, Any] = {
            "access_token": access_token,
            "refresh_token": data.get("refresh_token") or stored.refresh_token,
            "expires_at": _expiry_from({"expires_in": data.get("expires_in")}),
            "account_id": account_id,
        }
        if id_token:
            fields["token_data"] = {**stored.token_data, "id_token": id_token}

        self.storage.store(**fields)
        logger.info("Successfully refreshed and saved Codex tokens")
        return True

    def store_tokens(self, payload: Dict[str, Any]) -> TokenRecord:
        """Persist tokens from a fresh code exchange

        Args:
            payload: Token endpoint response (access_token, refresh_token,
                expires_in or expires_at, optional id_token and account_id)

        Returns:
            The stored record
        """
        access_token = payload["access_token"]
        id_token = payload.get("id_token")

        account_id = (
            payload.get("account_id")
            or extract_account_id(access_token)
            or extract_account_id(id_token)
        )
        email = extract_email(id_token) or extract_email(access_token)

        token_data = {"id_token": id_token} if id_token else {}

        return self.storage.store(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or "",
            expires_at=_expiry_from(payload),
            account_id=account_id,
            email=email,
            token_data=token_data,
        )

    def is_configured(self) -> bool:
        """True if any token record is stored, regardless of expiry"""
        return self.storage.current() is not None

    def get_account_id(self) -> Optional[str]:
        """Get the stored ChatGPT account ID"""
        stored = self.storage.current()
        return stored.account_id if stored else None

    def get_email(self) -> Optional[str]:
        """Get the stored account email"""
        stored = self.storage.current()
        return stored.email if stored else None

    def logout(self) -> None:
        """Forget the stored tokens"""
        self.storage.clear()

    async def get_auth_credentials(self) -> Tuple[Optional[str], Optional[str]]:
        """Get authentication credentials for API requests

        Returns:
            Tuple of (access_token, account_id)
        """
        token = await self.get_access_token()
        return token, self.get_account_id()

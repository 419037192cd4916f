"""OAuth token endpoints for Codex authentication (browser, device and refresh grants)"""

import logging
from typing import Any, Dict, Optional

import httpx

from settings import OAUTH_TIMEOUT
from .constants import (
    CLIENT_ID,
    DEVICE_AUTH_REDIRECT_URI,
    DEVICE_TOKEN_URL,
    DEVICE_USERCODE_URL,
    TOKEN_URL,
)
from .errors import AuthExchangeFailed, DeviceAuthError, RefreshFailed
from .models import DeviceAuthSession


logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Best-effort human readable message from an issuer error response"""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if data.get("error_description"):
            return str(data["error_description"])
        if isinstance(error, str) and error:
            return error
    return response.text or f"HTTP {response.status_code}"


class CodexOAuthClient:
    """HTTP client for auth.openai.com token and device-auth endpoints

    Every call opens a short-lived ``httpx.AsyncClient``. Nothing is retried
    here; retry policy belongs to the caller.
    """

    def __init__(
        self,
        timeout: float = OAUTH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client

        Args:
            timeout: Per-request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _post(
        self,
        url: str,
        error_cls: type,
        *,
        data: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            async with self._client() as client:
                if data is not None:
                    return await client.post(
                        url,
                        data=data,
                        headers={"Content-Type": "application/x-www-form-urlencoded"},
                    )
                return await client.post(url, json=json)
        except httpx.TimeoutException as e:
            logger.error(f"Request to {url} timed out after {self.timeout} seconds: {e}")
            raise error_cls(f"Request to {url} timed out") from e
        except httpx.RequestError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise error_cls(f"Request to {url} failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response, error_cls: type) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise error_cls(
                "Issuer returned a non-JSON response", status_code=response.status_code
            ) from e
        if not isinstance(payload, dict):
            raise error_cls("Issuer returned an unexpected payload", status_code=response.status_code)
        return payload

    async def exchange_code(self, code: str, verifier: str, redirect_uri: str) -> Dict[str, Any]:
        """Exchange an authorization code for tokens

        Args:
            code: Authorization code from the callback
            verifier: PKCE code verifier that produced the challenge
            redirect_uri: Redirect URI used in the authorize request

        Returns:
            Raw token payload (access_token, refresh_token, expires_in, id_token?)

        Raises:
            AuthExchangeFailed: If the issuer rejects the exchange
        """
        logger.info(f"Exchanging authorization code for tokens at {TOKEN_URL}")

        response = await self._post(
            TOKEN_URL,
            AuthExchangeFailed,
            data={
                "grant_type": "authorization_code",
                "client_id": CLIENT_ID,
                "code": code,
                "code_verifier": verifier,
                "redirect_uri": redirect_uri,
            },
        )

        if response.is_error:
            message = _error_message(response)
            logger.error(f"Token exchange failed with status {response.status_code}: {message}")
            raise AuthExchangeFailed(message, status_code=response.status_code)

        payload = self._json(response, AuthExchangeFailed)
        if not payload.get("access_token"):
            raise AuthExchangeFailed("Token exchange response missing access_token", status_code=response.status_code)

        logger.info("Successfully exchanged authorization code for tokens")
        return payload

    async def initiate_device_auth(self) -> DeviceAuthSession:
        """Start a device authorization flow

        Returns:
            DeviceAuthSession with the device id, user code and poll interval

        Raises:
            DeviceAuthError: If the issuer rejects the request
        """
        response = await self._post(DEVICE_USERCODE_URL, DeviceAuthError, json={"client_id": CLIENT_ID})

        if response.is_error:
            message = _error_message(response)
            logger.error(f"Device auth initiation failed with status {response.status_code}: {message}")
            raise DeviceAuthError(message, status_code=response.status_code)

        data = self._json(response, DeviceAuthError)
        device_auth_id = data.get("device_auth_id")
        user_code = data.get("user_code") or data.get("usercode")
        if not device_auth_id or not user_code:
            raise DeviceAuthError("Device auth response missing device_auth_id or user_code")

        try:
            interval = int(data.get("interval") or 5)
        except (TypeError, ValueError):
            interval = 5

        return DeviceAuthSession(device_auth_id=device_auth_id, user_code=user_code, interval=interval)

    async def poll_device_auth(self, device_auth_id: str, user_code: str) -> Optional[Dict[str, Any]]:
        """Poll a pending device authorization once

        Args:
            device_auth_id: Identifier from initiate_device_auth
            user_code: User code shown to the user

        Returns:
            Token payload once authorized, or None while still pending (HTTP 403)

        Raises:
            DeviceAuthError: On any other failure status
            AuthExchangeFailed: If the follow-up code exchange fails
        """
        response = await self._post(
            DEVICE_TOKEN_URL,
            DeviceAuthError,
            json={"device_auth_id": device_auth_id, "user_code": user_code},
        )

        if response.status_code == 403:
            return None

        if response.is_error:
            message = _error_message(response)
            logger.error(f"Device auth poll failed with status {response.status_code}: {message}")
            raise DeviceAuthError(message, status_code=response.status_code)

        data = self._json(response, DeviceAuthError)

        code = data.get("authorization_code")
        verifier = data.get("code_verifier")
        if code and verifier:
            return await self.exchange_code(code, verifier, DEVICE_AUTH_REDIRECT_URI)

        return data

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Run a refresh token grant

        Args:
            refresh_token: Stored refresh token

        Returns:
            Raw token payload

        Raises:
            RefreshFailed: If the issuer rejects the refresh
        """
        response = await self._post(
            TOKEN_URL,
            RefreshFailed,
            data={
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": CLIENT_ID,
            },
        )

        if response.is_error:
            message = _error_message(response)
            logger.error(f"Token refresh failed with status {response.status_code}: {message}")
            raise RefreshFailed(message, status_code=response.status_code)

        payload = self._json(response, RefreshFailed)
        if not payload.get("access_token"):
            raise RefreshFailed("Token refresh response missing access_token", status_code=response.status_code)
        return payload



"""Codex login flows (browser PKCE and device authorization)"""

import asyncio
import logging
import math
import webbrowser
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from settings import CALLBACK_TIMEOUT, DEVICE_AUTH_TIMEOUT
from .authorization import build_authorization_url
from .callback_server import CallbackResult, wait_for_callback
from .constants import DEVICE_POLL_SAFETY_MARGIN, DEVICE_VERIFICATION_URL, OAUTH_CALLBACK_PATH
from .errors import CodexAuthError
from .models import DeviceAuthSession
from .oauth_client import CodexOAuthClient
from .pkce import create_state, generate_pkce
from .token_manager import CodexOAuthManager


logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    """Outcome of a login attempt"""
    success: bool
    email: Optional[str] = None
    account_id: Optional[str] = None
    error: Optional[str] = None


def local_redirect_uri(port: int) -> str:
    return f"http://127.0.0.1:{port}{OAUTH_CALLBACK_PATH}"


class LoginFlow:
    """Drives a login attempt and stores the resulting tokens

    Collaborators are injectable so the flows can run without a browser,
    a real socket or real sleeps.
    """

    def __init__(
        self,
        manager: CodexOAuthManager,
        client: Optional[CodexOAuthClient] = None,
        open_browser: Callable[[str], bool] = webbrowser.open,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        listener: Callable[..., CallbackResult] = wait_for_callback,
    ):
        self.manager = manager
        self.client = client or manager.client
        self.open_browser = open_browser
        self.sleep = sleep
        self.listener = listener

    def _success(self) -> LoginResult:
        return LoginResult(
            success=True,
            email=self.manager.get_email(),
            account_id=self.manager.get_account_id(),
        )

    async def browser_login(
        self,
        port: int,
        timeout: float = CALLBACK_TIMEOUT,
        on_url: Optional[Callable[[str], None]] = None,
    ) -> LoginResult:
        """Run the browser PKCE flow with a one-shot local callback listener

        Args:
            port: Local port for the redirect URI
            timeout: Seconds to wait for the browser redirect
            on_url: Called with the authorization URL before waiting

        Returns:
            LoginResult
        """
        pkce = generate_pkce()
        state = create_state()
        redirect_uri = local_redirect_uri(port)
        auth_url = build_authorization_url(pkce.challenge, state, redirect_uri)

        if on_url:
            on_url(auth_url)

        # The listener blocks; run it off the event loop thread
        waiter = asyncio.create_task(asyncio.to_thread(self.listener, port, state, timeout))
        if not self.open_browser(auth_url):
            logger.info("Could not open browser automatically")

        callback = await waiter
        if not callback.ok:
            return LoginResult(success=False, error=callback.error or "Authentication failed or timed out.")

        try:
            tokens = await self.client.exchange_code(callback.code, pkce.verifier, redirect_uri)
        except CodexAuthError as e:
            return LoginResult(success=False, error=f"Token exchange failed: {e}")

        self.manager.store_tokens(tokens)
        logger.info("Codex browser login completed")
        return self._success()

    async def device_login(
        self,
        on_user_code: Optional[Callable[[DeviceAuthSession, str], None]] = None,
        on_pending: Optional[Callable[[], None]] = None,
        timeout: float = DEVICE_AUTH_TIMEOUT,
    ) -> LoginResult:
        """Run the device authorization flow

        Polls every ``interval + 3`` seconds and gives up after ``timeout``
        seconds worth of attempts.

        Args:
            on_user_code: Called with the session and verification URL to show the user
            on_pending: Called after every pending poll
            timeout: Wall-clock budget in seconds

        Returns:
            LoginResult
        """
        try:
            device = await self.client.initiate_device_auth()
        except CodexAuthError as e:
            return LoginResult(success=False, error=f"Failed to initiate device auth: {e}")

        if on_user_code:
            on_user_code(device, DEVICE_VERIFICATION_URL)

        interval = device.interval + DEVICE_POLL_SAFETY_MARGIN
        max_attempts = max(1, math.ceil(timeout / interval))

        for _ in range(max_attempts):
            await self.sleep(interval)

            try:
                tokens = await self.client.poll_device_auth(device.device_auth_id, device.user_code)
            except CodexAuthError as e:
                return LoginResult(success=False, error=f"Device auth failed: {e}")

            if tokens is None:
                if on_pending:
                    on_pending()
                continue

            try:
                self.manager.store_tokens(tokens)
            except (KeyError, ValueError) as e:
                return LoginResult(success=False, error=f"Device auth returned an unusable token payload: {e}")

            logger.info("Codex device login completed")
            return self._success()

        return LoginResult(success=False, error="Timed out waiting for authorization.")

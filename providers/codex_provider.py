"""
Codex provider for the ChatGPT Responses API.

The upstream endpoint only accepts ``stream: true``. ``stream`` relays the
decoded events; ``text`` buffers the whole transcript and returns the
``response.completed`` object.
"""
import json
import logging
import uuid
from typing import Any, AsyncIterator, Dict, Optional, Union

import httpx

from settings import CODEX_URL, CONNECT_TIMEOUT, STREAM_TIMEOUT
from codex_compat import (
    CodexRequestShaper,
    DONE_MARKER,
    SSEParser,
    TextRequest,
    collect_completed_response,
)
from codex_oauth.errors import AuthenticationRequired, ProviderRequestError
from providers.base_provider import BaseProvider, TokenSupplier

logger = logging.getLogger(__name__)

# Upstream error bodies are logged up to this many characters
ERROR_BODY_LOG_LIMIT = 2000

_MISSING = object()


def _lookup(data: Any, path: str) -> Any:
    """Dotted-path lookup that returns _MISSING instead of raising"""
    current = data
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current or current[key] is None:
            return _MISSING
        current = current[key]
    return current


def provider_error_from_response(response: httpx.Response, body: str) -> ProviderRequestError:
    """Build a ProviderRequestError from a non-2xx Codex response

    The message is taken from ``error.message``, then ``detail``, then
    ``message``, falling back to the raw body.
    """
    try:
        data = json.loads(body) if body else {}
    except json.JSONDecodeError:
        data = {}

    message: Any = body
    for path in ("error.message", "detail", "message"):
        found = _lookup(data, path)
        if found is not _MISSING:
            message = found
            break
    if not isinstance(message, str):
        message = json.dumps(message)

    error_type = None
    for path in ("error.type", "error_code"):
        found = _lookup(data, path)
        if found is not _MISSING:
            error_type = str(found)
            break

    return ProviderRequestError(message, status_code=response.status_code, error_type=error_type)


class CodexProvider(BaseProvider):
    """Provider implementation for the Codex Responses API"""

    def __init__(
        self,
        token_supplier: TokenSupplier,
        shaper: Optional[CodexRequestShaper] = None,
        base_url: str = CODEX_URL,
        account_id: Optional[str] = None,
        timeout: float = STREAM_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Codex provider

        Args:
            token_supplier: Source of valid bearer tokens (e.g. CodexOAuthManager)
            shaper: Request shaping strategy (default CodexRequestShaper)
            base_url: Codex API base URL; ``/responses`` is appended
            account_id: Fixed ChatGPT account ID overriding the supplier's
            timeout: Total request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.token_supplier = token_supplier
        self.shaper = shaper or CodexRequestShaper()
        self.base_url = base_url.rstrip("/")
        self.account_id = account_id
        self.timeout = timeout
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/responses"

    async def _get_headers(self) -> Dict[str, str]:
        """Build request headers, fetching (and refreshing) the bearer token

        Raises:
            AuthenticationRequired: If no valid token is available
        """
        access_token, account_id = await self.token_supplier.get_auth_credentials()
        if not access_token:
            raise AuthenticationRequired("Codex not authenticated. Run: codex-oauth login")

        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        account_id = self.account_id or account_id
        if account_id:
            headers["ChatGPT-Account-Id"] = account_id
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=CONNECT_TIMEOUT),
            transport=self.transport,
        )

    def _raise_for_status(self, response: httpx.Response, body: str, request_id: str) -> None:
        if not response.is_error:
            return
        logger.warning(
            f"[{request_id}] Codex API error status={response.status_code} "
            f"body={body[:ERROR_BODY_LOG_LIMIT]}"
        )
        raise provider_error_from_response(response, body)

    async def text(
        self,
        request: TextRequest,
        request_id: Optional[str] = None,
    ) -> Union[Dict[str, Any], str]:
        """Send a streaming request and return the completed response

        Returns:
            The ``response.completed`` object, or the raw body text if the
            stream never completed
        """
        request_id = request_id or uuid.uuid4().hex[:8]
        payload = self.shaper.build_payload(request)
        headers = await self._get_headers()

        logger.debug(f"[{request_id}] Making Codex request to {self.endpoint} (model={payload['model']})")

        async with self._client() as client:
            response = await client.post(self.endpoint, json=payload, headers=headers)

        body = response.text
        self._raise_for_status(response, body, request_id)

        logger.debug(f"[{request_id}] Codex response status: {response.status_code}, {len(body)} bytes buffered")
        return collect_completed_response(body)

    async def stream(
        self,
        request: TextRequest,
        request_id: Optional[str] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """Stream decoded events from the Codex Responses API

        Yields:
            Event dicts in upstream order until the connection closes or
            ``[DONE]`` arrives
        """
        request_id = request_id or uuid.uuid4().hex[:8]
        payload = self.shaper.build_payload(request)
        headers = await self._get_headers()

        logger.debug(f"[{request_id}] Streaming from Codex: {self.endpoint} (model={payload['model']})")

        async with self._client() as client:
            async with client.stream("POST", self.endpoint, json=payload, headers=headers) as response:
                if response.is_error:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    self._raise_for_status(response, body, request_id)

                parser = SSEParser()
                done = False

                async for chunk in response.aiter_text():
                    for event in parser.feed(chunk):
                        if event.data == DONE_MARKER:
                            done = True
                            break
                        decoded = self._decode(event.data, request_id)
                        if decoded is not None:
                            yield decoded
                    if done:
                        break

                if not done:
                    for event in parser.flush():
                        if event.data == DONE_MARKER:
                            break
                        decoded = self._decode(event.data, request_id)
                        if decoded is not None:
                            yield decoded

        logger.debug(f"[{request_id}] Codex stream closed")

    @staticmethod
    def _decode(data: str, request_id: str) -> Optional[Dict[str, Any]]:
        if not data:
            return None
        try:
            evt = json.loads(data)
        except json.JSONDecodeError:
            logger.debug(f"[{request_id}] Skipping undecodable SSE data: {data[:200]}")
            return None
        return evt if isinstance(evt, dict) else None

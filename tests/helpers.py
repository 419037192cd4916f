import base64
import json
from datetime import timedelta

import httpx

from codex_oauth import CodexOAuthClient
from codex_oauth.models import utcnow


def make_jwt(claims) -> str:
    """Unsigned JWT carrying ``claims``; only the payload segment matters here."""
    def segment(value) -> str:
        raw = json.dumps(value).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    return f"{segment({'alg': 'none', 'typ': 'JWT'})}.{segment(claims)}.signature"


def expires_in(seconds: int):
    return utcnow() + timedelta(seconds=seconds)


def mock_client(handler) -> CodexOAuthClient:
    return CodexOAuthClient(timeout=5.0, transport=httpx.MockTransport(handler))


def no_network(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")

import json

import httpx
import pytest

from codex_compat import Message, TextRequest
from codex_oauth import AuthenticationRequired, ProviderRequestError
from providers import CodexProvider


TRANSCRIPT = (
    'event: response.created\n'
    'data: {"type":"response.created","response":{"id":"r1"}}\n\n'
    'event: response.output_text.delta\n'
    'data: {"type":"response.output_text.delta","delta":"Hi"}\n\n'
    'event: response.completed\n'
    'data: {"type":"response.completed","response":{"id":"r1","status":"completed"}}\n\n'
    'data: [DONE]\n\n'
)


class FakeTokens:
    def __init__(self, token="at", account_id="acct"):
        self.token = token
        self.account_id = account_id

    async def get_auth_credentials(self):
        return self.token, self.account_id


def _request() -> TextRequest:
    return TextRequest(model="gpt-5", messages=[Message(role="user", content="hi")])


def _provider(handler, tokens=None, **kwargs) -> CodexProvider:
    return CodexProvider(
        tokens or FakeTokens(),
        base_url="https://codex.test/backend-api/codex",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _sse(body: str, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=body, headers={"content-type": "text/event-stream"})


@pytest.mark.asyncio
async def test_text_returns_completed_response_and_sends_stream_true() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _sse(TRANSCRIPT)

    result = await _provider(handler).text(_request())

    assert result == {"id": "r1", "status": "completed"}
    request = seen[0]
    assert str(request.url) == "https://codex.test/backend-api/codex/responses"
    assert request.headers["authorization"] == "Bearer at"
    assert request.headers["chatgpt-account-id"] == "acct"
    body = json.loads(request.content)
    assert body["stream"] is True
    assert body["store"] is False


@pytest.mark.asyncio
async def test_text_without_completed_event_returns_raw_body() -> None:
    body = 'data: {"type":"response.created"}\n\n'

    result = await _provider(lambda request: _sse(body)).text(_request())

    assert result == body


@pytest.mark.asyncio
async def test_account_id_override_and_absent_account() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _sse(TRANSCRIPT)

    await _provider(handler, account_id="fixed").text(_request())
    await _provider(handler, tokens=FakeTokens(account_id=None)).text(_request())

    assert seen[0].headers["chatgpt-account-id"] == "fixed"
    assert "chatgpt-account-id" not in seen[1].headers


@pytest.mark.asyncio
async def test_stream_yields_events_until_done() -> None:
    body = TRANSCRIPT + 'data: {"type":"after.done"}\n\n'

    events = [evt async for evt in _provider(lambda request: _sse(body)).stream(_request())]

    assert [evt["type"] for evt in events] == [
        "response.created",
        "response.output_text.delta",
        "response.completed",
    ]


@pytest.mark.asyncio
async def test_stream_flushes_unterminated_last_event() -> None:
    body = 'data: {"type":"response.created"}\n\ndata: {"type":"response.completed"}'

    events = [evt async for evt in _provider(lambda request: _sse(body)).stream(_request())]

    assert [evt["type"] for evt in events] == ["response.created", "response.completed"]


@pytest.mark.asyncio
async def test_missing_token_raises_before_any_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    provider = _provider(handler, tokens=FakeTokens(token=None))

    with pytest.raises(AuthenticationRequired):
        await provider.text(_request())
    with pytest.raises(AuthenticationRequired):
        async for _ in provider.stream(_request()):
            pass


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, message, error_type",
    [
        ({"error": {"message": "Rate limited", "type": "rate_limit"}}, "Rate limited", "rate_limit"),
        ({"detail": "Unsupported model"}, "Unsupported model", None),
        ({"message": "Bad input", "error_code": "bad_request"}, "Bad input", "bad_request"),
    ],
)
async def test_text_error_translation(payload, message, error_type) -> None:
    provider = _provider(lambda request: httpx.Response(429, json=payload))

    with pytest.raises(ProviderRequestError) as excinfo:
        await provider.text(_request())

    err = excinfo.value
    assert err.status_code == 429
    assert err.args[0] == message
    assert err.error_type == error_type
    assert str(err) == f"Codex request failed (429): {message}"


@pytest.mark.asyncio
async def test_error_with_plain_body_uses_body() -> None:
    provider = _provider(lambda request: httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(ProviderRequestError) as excinfo:
        async for _ in provider.stream(_request()):
            pass

    assert excinfo.value.status_code == 502
    assert excinfo.value.args[0] == "Bad Gateway"

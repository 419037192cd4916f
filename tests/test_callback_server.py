import socket
import threading
import time

import httpx
import pytest

from codex_oauth.callback_server import parse_callback_request, wait_for_callback


def _raw(target: str) -> str:
    return f"GET {target} HTTP/1.1\r\nHost: 127.0.0.1\r\n\r\n"


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_parse_valid_callback() -> None:
    result = parse_callback_request(_raw("/auth/callback?code=C&state=S"), "S")
    assert result.ok
    assert result.code == "C"


def test_parse_rejects_mismatched_state() -> None:
    result = parse_callback_request(_raw("/auth/callback?code=C&state=other"), "S")
    assert not result.ok
    assert result.error == "Invalid state parameter."


def test_parse_reports_error_parameter() -> None:
    result = parse_callback_request(_raw("/auth/callback?state=S&error=access_denied"), "S")
    assert not result.ok
    assert result.error == "access_denied"


def test_parse_missing_code_without_error() -> None:
    result = parse_callback_request(_raw("/auth/callback?state=S"), "S")
    assert result.error == "unknown_error"


def test_parse_garbage_request() -> None:
    assert not parse_callback_request("not http", "S").ok


def test_wait_for_callback_times_out() -> None:
    result = wait_for_callback(_free_port(), "S", timeout=0.2)
    assert not result.ok
    assert "Timed out" in result.error


def test_wait_for_callback_reports_bind_failure() -> None:
    with socket.socket() as blocker:
        blocker.bind(("127.0.0.1", 0))
        blocker.listen()
        result = wait_for_callback(blocker.getsockname()[1], "S", timeout=0.2)

    assert not result.ok
    assert "Could not start callback server" in result.error


@pytest.mark.parametrize(
    "query, status, ok",
    [
        ("code=C&state=S", 200, True),
        ("code=C&state=wrong", 400, False),
    ],
)
def test_wait_for_callback_answers_browser(query, status, ok) -> None:
    port = _free_port()
    results = []
    listener = threading.Thread(target=lambda: results.append(wait_for_callback(port, "S", timeout=5)))
    listener.start()

    response = None
    for _ in range(50):
        try:
            response = httpx.get(f"http://127.0.0.1:{port}/auth/callback?{query}", timeout=5)
            break
        except httpx.ConnectError:
            time.sleep(0.05)
    listener.join(timeout=5)

    assert response is not None
    assert response.status_code == status
    assert results[0].ok is ok

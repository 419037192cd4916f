"""
One-shot local listener for the browser PKCE redirect

Binds a TCP socket, accepts a single connection, answers it and closes.
It is deliberately not a general purpose HTTP server: the CLI login blocks
on it until the browser comes back or the timeout elapses.
"""
import html
import logging
import re
import socket
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)

_REQUEST_LINE = re.compile(r"^GET\s+(\S+)")
_MAX_REQUEST_BYTES = 8192

_SUCCESS_PAGE = """<html>
    <body>
        <h2>Authentication successful!</h2>
        <p>You can close this window and return to the terminal.</p>
    </body>
</html>"""

_FAILURE_PAGE = """<html>
    <body>
        <h2>Authentication failed</h2>
        <p>{message}</p>
    </body>
</html>"""


@dataclass
class CallbackResult:
    """Outcome of waiting for the OAuth redirect"""
    code: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code is not None


def _http_response(status: str, body: str) -> bytes:
    encoded = body.encode("utf-8")
    head = (
        f"HTTP/1.1 {status}\r\n"
        "Content-Type: text/html; charset=utf-8\r\n"
        f"Content-Length: {len(encoded)}\r\n"
        "Connection: close\r\n\r\n"
    )
    return head.encode("ascii") + encoded


def parse_callback_request(raw: str, expected_state: str) -> CallbackResult:
    """Validate a raw HTTP request received on the callback port

    Args:
        raw: Request text as read from the socket
        expected_state: State generated when the flow started

    Returns:
        CallbackResult with the authorization code, or an error
    """
    match = _REQUEST_LINE.match(raw)
    target = match.group(1) if match else ""
    params = parse_qs(urlsplit(target).query)

    state = params.get("state", [None])[0]
    code = params.get("code", [None])[0]

    if state != expected_state:
        return CallbackResult(error="Invalid state parameter.")

    if not code:
        return CallbackResult(error=params.get("error", ["unknown_error"])[0])

    return CallbackResult(code=code)


def wait_for_callback(
    port: int,
    expected_state: str,
    timeout: float = 120,
    host: str = "127.0.0.1",
) -> CallbackResult:
    """
    Wait for exactly one OAuth redirect on ``host:port``.

    Args:
        port: Local port the redirect URI points at
        expected_state: State generated at flow start (CSRF protection)
        timeout: Seconds to wait for the browser
        host: Interface to bind

    Returns:
        CallbackResult; ``code`` is None on bind failure, timeout, state
        mismatch or an error redirect
    """
    try:
        server = socket.create_server((host, port))
    except OSError as e:
        logger.error(f"Could not start callback server on port {port}: {e}")
        return CallbackResult(error=f"Could not start callback server on port {port}: {e}")

    with server:
        server.settimeout(timeout)
        logger.info(f"Waiting for OAuth callback on {host}:{port}")
        try:
            conn, _ = server.accept()
        except socket.timeout:
            logger.warning(f"OAuth callback timeout after {timeout} seconds")
            return CallbackResult(error=f"Timed out after {timeout} seconds waiting for the browser")

        with conn:
            conn.settimeout(timeout)
            try:
                raw = conn.recv(_MAX_REQUEST_BYTES).decode("latin-1")
            except OSError as e:
                logger.error(f"Failed to read OAuth callback request: {e}")
                return CallbackResult(error=f"Failed to read callback request: {e}")

            if not raw:
                return CallbackResult(error="Empty callback request")

            result = parse_callback_request(raw, expected_state)
            if result.ok:
                response = _http_response("200 OK", _SUCCESS_PAGE)
            else:
                message = html.escape(result.error or "")
                if result.error != "Invalid state parameter.":
                    message = f"Error: {message}"
                response = _http_response("400 Bad Request", _FAILURE_PAGE.format(message=message))
                logger.warning(f"OAuth callback rejected: {result.error}")

            try:
                conn.sendall(response)
            except OSError as e:
                logger.debug(f"Could not write callback response: {e}")

            return result

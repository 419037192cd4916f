"""OAuth authorization URL construction for Codex"""

from urllib.parse import urlencode

from .constants import AUTHORIZE_URL, CLIENT_ID, SCOPES


def build_authorization_url(challenge: str, state: str, redirect_uri: str) -> str:
    """Construct the issuer's authorize URL for the browser PKCE flow

    Args:
        challenge: PKCE code challenge (S256)
        state: CSRF state echoed back on the callback
        redirect_uri: Where the issuer sends the authorization code

    Returns:
        Full authorization URL
    """
    params = {
        "client_id": CLIENT_ID,
        "scope": SCOPES,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "code_challenge": challenge,
        "code_challenge_method": "S256",
        "state": state,
        # Selects the Codex CLI consent screen
        "codex_cli_simplified_flow": "true",
    }

    return f"{AUTHORIZE_URL}?{urlencode(params)}"

import base64
import hashlib
import re
from urllib.parse import parse_qs, urlsplit

from codex_oauth import build_authorization_url, compute_challenge, create_state, generate_pkce
from codex_oauth.constants import AUTHORIZE_URL, CLIENT_ID


def test_challenge_is_unpadded_sha256_of_verifier() -> None:
    for _ in range(50):
        codes = generate_pkce()
        expected = base64.urlsafe_b64encode(
            hashlib.sha256(codes.verifier.encode("ascii")).digest()
        ).decode("ascii").rstrip("=")
        assert codes.challenge == expected
        assert "=" not in codes.challenge


def test_verifier_shape() -> None:
    verifier = generate_pkce().verifier
    assert re.fullmatch(r"[A-Za-z0-9]{43}", verifier)


def test_compute_challenge_known_vector() -> None:
    # RFC 7636 appendix B
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
    assert compute_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_state_is_32_hex_chars() -> None:
    state = create_state()
    assert re.fullmatch(r"[0-9a-f]{32}", state)
    assert state != create_state()


def test_authorization_url_parameters() -> None:
    url = build_authorization_url("challenge-1", "state-1", "http://127.0.0.1:9876/auth/callback")
    parts = urlsplit(url)
    params = {k: v[0] for k, v in parse_qs(parts.query).items()}

    assert url.startswith(AUTHORIZE_URL + "?")
    assert params["client_id"] == CLIENT_ID
    assert params["response_type"] == "code"
    assert params["code_challenge"] == "challenge-1"
    assert params["code_challenge_method"] == "S256"
    assert params["state"] == "state-1"
    assert params["redirect_uri"] == "http://127.0.0.1:9876/auth/callback"
    assert params["codex_cli_simplified_flow"] == "true"

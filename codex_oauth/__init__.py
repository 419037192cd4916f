"""Codex OAuth authentication module

OAuth2 PKCE and device authorization against auth.openai.com for ChatGPT
subscriptions, with an encrypted single-record token store and automatic
refresh.
"""

from .models import TokenRecord, PkceCodes, DeviceAuthSession, OAuthState
from .errors import (
    CodexAuthError,
    AuthenticationRequired,
    AuthExchangeFailed,
    RefreshFailed,
    DeviceAuthError,
    ProviderRequestError,
)
from .authorization import build_authorization_url
from .pkce import generate_pkce, compute_challenge, create_state
from .jwt_utils import parse_jwt_claims, extract_account_id, extract_email
from .oauth_client import CodexOAuthClient
from .cipher import TokenCipher
from .storage import CodexTokenStore
from .token_manager import CodexOAuthManager
from .state_cache import OAuthStateCache
from .callback_server import CallbackResult, wait_for_callback
from .login import LoginFlow, LoginResult

__all__ = [
    "TokenRecord",
    "PkceCodes",
    "DeviceAuthSession",
    "OAuthState",
    "CodexAuthError",
    "AuthenticationRequired",
    "AuthExchangeFailed",
    "RefreshFailed",
    "DeviceAuthError",
    "ProviderRequestError",
    "build_authorization_url",
    "generate_pkce",
    "compute_challenge",
    "create_state",
    "parse_jwt_claims",
    "extract_account_id",
    "extract_email",
    "CodexOAuthClient",
    "TokenCipher",
    "CodexTokenStore",
    "CodexOAuthManager",
    "OAuthStateCache",
    "CallbackResult",
    "wait_for_callback",
    "LoginFlow",
    "LoginResult",
]

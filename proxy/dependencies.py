"""
Shared service instances for the web layer.

Routes receive these through FastAPI dependencies so tests can swap them via
``app.dependency_overrides``.
"""
from functools import lru_cache

from codex_oauth import CodexOAuthManager, OAuthStateCache


@lru_cache(maxsize=1)
def get_oauth_manager() -> CodexOAuthManager:
    return CodexOAuthManager()


@lru_cache(maxsize=1)
def get_state_cache() -> OAuthStateCache:
    return OAuthStateCache()

"""
Web-based Codex login: redirect to the issuer and handle its callback.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from settings import CODEX_CALLBACK_ROUTE
from codex_oauth import (
    CodexAuthError,
    CodexOAuthManager,
    OAuthState,
    OAuthStateCache,
    build_authorization_url,
    create_state,
    generate_pkce,
)
from ..dependencies import get_oauth_manager, get_state_cache

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/auth/codex/redirect", name="codex.redirect")
async def codex_redirect(
    request: Request,
    return_url: str = "/",
    state_cache: OAuthStateCache = Depends(get_state_cache),
):
    """Start a web OAuth flow by redirecting to OpenAI"""
    pkce = generate_pkce()
    state = create_state()
    redirect_uri = str(request.url_for("codex.callback"))

    state_cache.put(state, OAuthState(
        verifier=pkce.verifier,
        redirect_uri=redirect_uri,
        return_url=return_url,
    ))

    auth_url = build_authorization_url(pkce.challenge, state, redirect_uri)
    return RedirectResponse(auth_url, status_code=302)


@router.get(CODEX_CALLBACK_ROUTE, name="codex.callback")
async def codex_callback(
    request: Request,
    manager: CodexOAuthManager = Depends(get_oauth_manager),
    state_cache: OAuthStateCache = Depends(get_state_cache),
):
    """Complete a web OAuth flow started by /auth/codex/redirect"""
    state = request.query_params.get("state")
    code = request.query_params.get("code")
    error = request.query_params.get("error")

    if error:
        return JSONResponse(
            {
                "error": error,
                "description": request.query_params.get("error_description", "Authentication failed"),
            },
            status_code=400,
        )

    if not state or not code:
        return JSONResponse({"error": "Missing state or code parameter"}, status_code=400)

    cached = state_cache.pop(state)
    if cached is None:
        return JSONResponse({"error": "Invalid or expired state parameter"}, status_code=400)

    try:
        tokens = await manager.client.exchange_code(code, cached.verifier, cached.redirect_uri)
        manager.store_tokens(tokens)
    except CodexAuthError as e:
        logger.error(f"Codex web login failed: {e}")
        return JSONResponse(
            {"error": "token_exchange_failed", "description": str(e)},
            status_code=500,
        )

    logger.info("Codex web login completed")
    return RedirectResponse(cached.return_url or "/", status_code=302)


@router.get("/auth/codex/status")
async def codex_status(manager: CodexOAuthManager = Depends(get_oauth_manager)):
    """Get token status without exposing secrets"""
    return manager.storage.get_status()

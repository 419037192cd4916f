"""
Health check endpoint.
"""
import time
from fastapi import APIRouter, Depends

from codex_oauth import CodexOAuthManager
from ..dependencies import get_oauth_manager

router = APIRouter()


@router.get("/health")
async def health_check(manager: CodexOAuthManager = Depends(get_oauth_manager)):
    """Liveness plus whether Codex tokens are stored"""
    return {
        "status": "healthy",
        "codex_configured": manager.is_configured(),
        "timestamp": time.time(),
    }

"""
Endpoint handlers for the web layer.
"""
from .health import router as health_router
from .codex_auth import router as codex_auth_router

__all__ = [
    'health_router',
    'codex_auth_router',
]

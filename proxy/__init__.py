"""
Web layer for the Codex OAuth bridge.

Hosts the redirect/callback login routes for deployments that already run a
web server; the CLI login does not need it.
"""
from .app import app, create_app

__version__ = "1.0.0"

__all__ = [
    'app',
    'create_app',
]

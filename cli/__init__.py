"""CLI package for the Codex OAuth bridge

Provides the login, logout, status and serve commands.
"""

from cli.main import main

__all__ = [
    "main",
]

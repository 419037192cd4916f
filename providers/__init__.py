"""
Text providers.

CodexProvider adapts the streaming-only Codex Responses API to a
single-response ``text`` call and an event ``stream`` call.
"""
from providers.base_provider import BaseProvider, TokenSupplier
from providers.codex_provider import CodexProvider, provider_error_from_response

__all__ = [
    'BaseProvider',
    'TokenSupplier',
    'CodexProvider',
    'provider_error_from_response',
]

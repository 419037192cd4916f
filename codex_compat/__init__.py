"""
Codex Responses API compatibility layer.

Converts generic text requests into Codex payloads and turns the mandatory
event stream back into either events or a single completed response.
"""
from .models import Message, TextRequest
from .request_builder import CodexRequestShaper, DEFAULT_INSTRUCTIONS
from .message_converter import (
    convert_messages_to_input,
    convert_tools_to_responses,
    convert_tool_choice,
)
from .tool_schema import sanitize_schema, sanitize_tools
from .sse_parser import SSEEvent, SSEParser, DONE_MARKER
from .response_collector import collect_completed_response

__all__ = [
    "Message",
    "TextRequest",
    "CodexRequestShaper",
    "DEFAULT_INSTRUCTIONS",
    "convert_messages_to_input",
    "convert_tools_to_responses",
    "convert_tool_choice",
    "sanitize_schema",
    "sanitize_tools",
    "SSEEvent",
    "SSEParser",
    "DONE_MARKER",
    "collect_completed_response",
]

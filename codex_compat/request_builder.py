"""
Request shaping for the Codex Responses endpoint.

The endpoint only accepts streaming requests, rejects system-role entries in
``input`` and must not retain conversations server-side, so every payload
carries top-level ``instructions``, ``stream: true`` and ``store: false``.
"""
from typing import Any, Dict, List

from .message_converter import (
    content_text,
    convert_messages_to_input,
    convert_tool_choice,
    convert_tools_to_responses,
)
from .models import TextRequest
from .tool_schema import sanitize_tools

DEFAULT_INSTRUCTIONS = "You are a helpful assistant."


class CodexRequestShaper:
    """Builds Responses API payloads from generic text requests"""

    def __init__(self, default_instructions: str = DEFAULT_INSTRUCTIONS):
        self.default_instructions = default_instructions

    def build_instructions(self, request: TextRequest) -> str:
        prompts: List[str] = [p for p in request.system_prompts if p]
        for message in request.messages:
            if message.role in ("system", "developer"):
                text = content_text(message.content)
                if text:
                    prompts.append(text)
        return "\n\n".join(prompts) or self.default_instructions

    def build_payload(self, request: TextRequest) -> Dict[str, Any]:
        """Build the JSON body for ``POST {base_url}/responses``

        Args:
            request: Caller request

        Returns:
            Responses API payload
        """
        payload: Dict[str, Any] = {
            "model": request.model,
            "instructions": self.build_instructions(request),
            "input": convert_messages_to_input(request.messages),
            "stream": True,
            "store": False,
        }

        optional = {
            "max_output_tokens": request.max_tokens,
            "temperature": request.temperature,
            "top_p": request.top_p,
            "tools": sanitize_tools(convert_tools_to_responses(request.tools)) if request.tools else None,
            "tool_choice": convert_tool_choice(request.tool_choice),
            "reasoning": request.provider_options.get("reasoning"),
        }
        # Omission, not null, signals "not requested"
        payload.update({key: value for key, value in optional.items() if value is not None})

        return payload

"""
Pydantic models for the caller-facing text generation request.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class Message(BaseModel):
    """Chat message"""
    role: str
    content: Optional[Union[str, List[Dict[str, Any]]]] = None
    tool_calls: Optional[List[Dict[str, Any]]] = None
    tool_call_id: Optional[str] = None  # For tool response messages


class TextRequest(BaseModel):
    """Generic text generation request handed to the Codex adapter

    Optional sampling fields left as None are omitted from the upstream
    payload entirely.
    """
    model: str
    messages: List[Message] = Field(default_factory=list)
    system_prompts: List[str] = Field(default_factory=list)
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    tools: Optional[List[Dict[str, Any]]] = None  # Chat Completions or Responses format
    tool_choice: Optional[Union[str, Dict[str, Any]]] = None
    provider_options: Dict[str, Any] = Field(default_factory=dict)

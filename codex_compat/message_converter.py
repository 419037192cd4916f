"""
Message and tool conversion from Chat Completions shape to Responses API input.
"""
from typing import Any, Dict, List, Optional, Union

from .models import Message

_TOOL_CHOICE_KEYWORDS = ("auto", "none", "required")


def content_text(content: Any) -> str:
    """Flatten string or list-of-parts content into plain text"""
    if isinstance(content, str):
        return content
    texts = []
    if isinstance(content, list):
        for part in content:
            if isinstance(part, dict):
                t = part.get("text") or part.get("content")
                if isinstance(t, str) and t:
                    texts.append(t)
    return "\n".join(texts)


def convert_messages_to_input(messages: List[Message]) -> List[Dict[str, Any]]:
    """Convert chat messages to Responses API input items

    System messages are skipped; they are sent as top-level instructions.
    Order of the remaining messages is preserved.

    Args:
        messages: Chat messages

    Returns:
        List of Responses API input items
    """
    input_items: List[Dict[str, Any]] = []

    for message in messages:
        role = message.role

        if role in ("system", "developer"):
            continue

        # Tool result messages
        if role == "tool":
            if message.tool_call_id:
                input_items.append({
                    "type": "function_call_output",
                    "call_id": message.tool_call_id,
                    "output": content_text(message.content),
                })
            continue

        content = message.content
        content_items: List[Dict[str, Any]] = []
        text_kind = "output_text" if role == "assistant" else "input_text"

        if isinstance(content, list):
            for part in content:
                if not isinstance(part, dict):
                    continue

                ptype = part.get("type")
                if ptype in ("text", "input_text", "output_text"):
                    text = part.get("text") or ""
                    if isinstance(text, str) and text:
                        content_items.append({"type": text_kind, "text": text})

                elif ptype in ("image_url", "input_image"):
                    image = part.get("image_url")
                    url = image.get("url") if isinstance(image, dict) else image
                    if isinstance(url, str) and url:
                        content_items.append({"type": "input_image", "image_url": url})

        elif isinstance(content, str) and content:
            content_items.append({"type": text_kind, "text": content})

        if content_items:
            input_items.append({
                "type": "message",
                "role": "assistant" if role == "assistant" else "user",
                "content": content_items,
            })

        # Assistant tool calls follow the assistant's text
        if role == "assistant" and message.tool_calls:
            for tc in message.tool_calls:
                if tc.get("type", "function") != "function":
                    continue
                fn = tc.get("function") if isinstance(tc.get("function"), dict) else {}
                call_id = tc.get("id") or tc.get("call_id")
                name = fn.get("name")
                args = fn.get("arguments")
                if isinstance(call_id, str) and isinstance(name, str):
                    input_items.append({
                        "type": "function_call",
                        "name": name,
                        "arguments": args if isinstance(args, str) else "{}",
                        "call_id": call_id,
                    })

    return input_items


def convert_tools_to_responses(tools: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert tool definitions to Responses API function tools

    Accepts both the Chat Completions shape (``{"type": "function",
    "function": {...}}``) and tools that are already flat.
    """
    out: List[Dict[str, Any]] = []

    for t in tools:
        if not isinstance(t, dict) or t.get("type", "function") != "function":
            continue

        if isinstance(t.get("function"), dict):
            fn = t["function"]
        else:
            fn = t

        name = fn.get("name")
        if not isinstance(name, str) or not name:
            continue

        params = fn.get("parameters")
        if not isinstance(params, dict):
            params = {"type": "object", "properties": {}}

        tool = {
            "type": "function",
            "name": name,
            "description": fn.get("description") or "",
            "parameters": params,
        }
        if "strict" in fn:
            tool["strict"] = fn["strict"]
        out.append(tool)

    return out


def convert_tool_choice(tool_choice: Union[str, Dict[str, Any], None]) -> Optional[Union[str, Dict[str, Any]]]:
    """Map a caller tool choice to the Responses API form"""
    if tool_choice is None:
        return None

    if isinstance(tool_choice, str):
        if tool_choice in _TOOL_CHOICE_KEYWORDS:
            return tool_choice
        return {"type": "function", "name": tool_choice}

    fn = tool_choice.get("function")
    if isinstance(fn, dict) and fn.get("name"):
        return {"type": "function", "name": fn["name"]}
    return tool_choice

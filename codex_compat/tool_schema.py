"""
Tool schema sanitization for the Codex Responses API.

The Codex endpoint validates tool parameters as strict JSON Schema and rejects
any ``array`` schema without an ``items`` definition. These helpers walk a
schema tree and add ``items: {"type": "string"}`` to bare arrays. They never
mutate their input and are idempotent.
"""
from typing import Any, Dict, List

DEFAULT_ARRAY_ITEMS = {"type": "string"}


def _is_type(schema: Dict[str, Any], name: str) -> bool:
    declared = schema.get("type")
    if isinstance(declared, list):
        return name in declared
    return declared == name


def sanitize_schema(schema: Any) -> Any:
    """Return a copy of ``schema`` with every bare array given default items"""
    if not isinstance(schema, dict):
        return schema

    result = dict(schema)

    if _is_type(result, "array"):
        items = result.get("items")
        if items is None:
            result["items"] = dict(DEFAULT_ARRAY_ITEMS)
        elif isinstance(items, dict):
            result["items"] = sanitize_schema(items)

    properties = result.get("properties")
    # Untyped schemas carrying properties are objects too
    if isinstance(properties, dict) and ("type" not in result or _is_type(result, "object")):
        result["properties"] = {
            name: sanitize_schema(prop) for name, prop in properties.items()
        }

    return result


def sanitize_tools(tools: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Sanitize the ``parameters`` schema of every Responses-format tool"""
    sanitized = []
    for tool in tools:
        if isinstance(tool, dict) and isinstance(tool.get("parameters"), dict):
            tool = {**tool, "parameters": sanitize_schema(tool["parameters"])}
        sanitized.append(tool)
    return sanitized

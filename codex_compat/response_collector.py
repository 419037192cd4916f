"""
Reconstruct a complete Responses API object from a buffered SSE transcript.
"""
import json
import logging
from typing import Any, Dict, Union

from .sse_parser import DONE_MARKER

logger = logging.getLogger(__name__)

COMPLETED_EVENT = "response.completed"


def collect_completed_response(body: str) -> Union[Dict[str, Any], str]:
    """Extract the final response object from a buffered event stream

    Every ``data:`` line is parsed as JSON; the last ``response.completed``
    event wins, using its nested ``response`` object when present.

    Args:
        body: Full text/event-stream body

    Returns:
        The completed response dict, or ``body`` unchanged when the stream
        carried no ``response.completed`` event. Callers validating the
        result will then report the real shape of what came back.
    """
    completed = None

    for line in body.split("\n"):
        line = line.strip()
        if not line.startswith("data:"):
            continue

        data = line[5:].strip()
        if not data or data == DONE_MARKER:
            continue

        try:
            event = json.loads(data)
        except json.JSONDecodeError:
            continue

        if isinstance(event, dict) and event.get("type") == COMPLETED_EVENT:
            nested = event.get("response")
            completed = nested if nested is not None else event

    if completed is None:
        logger.warning("No response.completed event in Codex stream; returning raw body")
        return body

    return completed

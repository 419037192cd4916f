"""
Incremental text/event-stream decoding for the Codex Responses stream.

Only ``event:`` and ``data:`` fields are kept; ``id:``/``retry:`` and comment
lines carry nothing the adapter uses.
"""
from dataclasses import dataclass, field
from typing import List, Optional

DONE_MARKER = "[DONE]"


@dataclass
class SSEEvent:
    """One dispatched event; multi-line data is joined with newlines"""
    event: Optional[str]
    data: str


@dataclass
class _Pending:
    event: Optional[str] = None
    data: List[str] = field(default_factory=list)

    def take(self) -> Optional[SSEEvent]:
        if self.event is None and not self.data:
            return None
        return SSEEvent(event=self.event, data="\n".join(self.data))


class SSEParser:
    """Feed raw chunks, get back the events they complete"""

    def __init__(self) -> None:
        self._partial = ""
        self._pending = _Pending()

    def feed(self, chunk: str) -> List[SSEEvent]:
        *lines, self._partial = (self._partial + chunk).split("\n")

        events = []
        for line in lines:
            event = self._consume(line.rstrip("\r"))
            if event is not None:
                events.append(event)
        return events

    def flush(self) -> List[SSEEvent]:
        """Dispatch whatever is left once the connection closes"""
        events = self.feed("\n") if self._partial else []
        event = self._pending.take()
        self._pending = _Pending()
        if event is not None:
            events.append(event)
        return events

    def _consume(self, line: str) -> Optional[SSEEvent]:
        if not line:
            event = self._pending.take()
            self._pending = _Pending()
            return event

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if name == "data":
            self._pending.data.append(value)
        elif name == "event":
            self._pending.event = value
        return None

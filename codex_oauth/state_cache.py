"""Short-lived server-side state for the web-redirect login

Maps a random state token to the PKCE verifier and redirect details of a
pending login. Entries expire after five minutes and are removed on first
read, so a callback can be completed at most once.
"""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .models import OAuthState

STATE_TTL_SECONDS = 300


class OAuthStateCache:
    """In-process TTL cache of pending OAuth states"""

    def __init__(self, ttl: int = STATE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, OAuthState]] = {}
        self._lock = threading.Lock()

    def put(self, state: str, value: OAuthState) -> None:
        with self._lock:
            self._purge()
            self._entries[state] = (self._clock() + self.ttl, value)

    def pop(self, state: str) -> Optional[OAuthState]:
        """Return and forget the entry for ``state``; None if unknown or expired"""
        with self._lock:
            entry = self._entries.pop(state, None)
            if entry is None:
                return None
            expires, value = entry
            if expires <= self._clock():
                return None
            return value

    def _purge(self) -> None:
        now = self._clock()
        for key in [k for k, (expires, _) in self._entries.items() if expires <= now]:
            del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            self._purge()
            return len(self._entries)

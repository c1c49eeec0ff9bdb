"""In-memory session registry for the mask editor API.

Sessions hold numpy buffers and decoded images, so they live in process
memory only: nothing is persisted, and a server restart drops every open
session, exactly like closing the editor in a browser tab.

Each entry carries its own lock. Route handlers take it for the whole of a
request so events for one session are applied strictly in arrival order while
different sessions proceed independently.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from maskworks.core.config import MaskworksConfig
from maskworks.core.session import MaskEditorSession

logger = logging.getLogger(__name__)


class SessionLimitError(Exception):
    """The store already holds ``max_sessions`` sessions."""

    pass


@dataclass
class _Entry:
    session: MaskEditorSession
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionStore:
    """Thread-safe mapping of session id to :class:`MaskEditorSession`."""

    def __init__(self, config: MaskworksConfig) -> None:
        self._config = config
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._entries

    def add(self, session: MaskEditorSession) -> None:
        """Register a freshly opened session.

        Raises:
            SessionLimitError: If the store is full. The session is cancelled.
        """
        with self._lock:
            if len(self._entries) >= self._config.max_sessions:
                full = True
            else:
                full = False
                self._entries[session.session_id] = _Entry(session)

        if full:
            session.cancel()
            raise SessionLimitError(
                f"Too many open sessions (max {self._config.max_sessions}). "
                f"Finish or cancel an existing session first."
            )
        logger.info(f"Stored session {session.session_id} ({len(self)} open)")

    @contextmanager
    def checkout(self, session_id: str) -> Iterator[MaskEditorSession]:
        """Hold a session's lock for the duration of the ``with`` block.

        Raises:
            KeyError: If no session has that id.
        """
        with self._lock:
            entry = self._entries.get(session_id)
        if entry is None:
            raise KeyError(session_id)

        with entry.lock:
            yield entry.session

    def discard(self, session_id: str) -> MaskEditorSession | None:
        """Forget a session without touching its state. Returns it, if present."""
        with self._lock:
            entry = self._entries.pop(session_id, None)
        return entry.session if entry is not None else None

    def cancel_all(self) -> int:
        """Cancel and forget every session. Returns how many were open."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()

        for entry in entries:
            with entry.lock:
                entry.session.cancel()
        if entries:
            logger.info(f"Cancelled {len(entries)} open sessions")
        return len(entries)

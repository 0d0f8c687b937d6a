from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

from bg_editor.app.errors import SessionNotFoundError
from bg_editor.core.ids import new_session_id
from bg_editor.session.editor import EditorFactory, EditorSession

logger = logging.getLogger(__name__)


class SessionManager:
    """
    In-memory registry of live editor sessions, one per browser tab.
    A session exists from its first upload until it is dropped. Sessions idle
    longer than `idle_ttl_s` expire, and at `max_sessions` the least recently
    used idle session makes room for a new one.
    """

    def __init__(
        self,
        factory: EditorFactory,
        *,
        idle_ttl_s: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.factory = factory
        self.idle_ttl_s = idle_ttl_s
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, EditorSession] = {}
        self._last_seen: Dict[str, float] = {}

    # ---------- Sessions ----------
    def create_session(self) -> EditorSession:
        self.evict_idle()
        if self.max_sessions is not None and len(self._sessions) >= self.max_sessions:
            self._evict_least_recent()

        session_id = new_session_id()
        editor = self.factory(session_id)
        self._sessions[session_id] = editor
        self._last_seen[session_id] = self._clock()
        logger.info("session created", extra={"session_id": session_id, "live_sessions": len(self._sessions)})
        return editor

    def load_session(self, session_id: str) -> EditorSession:
        editor = self._sessions.get(session_id)
        if editor is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        self._last_seen[session_id] = self._clock()
        return editor

    def drop_session(self, session_id: str) -> None:
        """Reset the session (so late results are discarded) and forget it."""
        if session_id not in self._sessions:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        self._forget(session_id)
        logger.info("session dropped", extra={"session_id": session_id})

    def evict_idle(self) -> List[str]:
        """Drop sessions not touched within `idle_ttl_s`. Busy sessions are kept."""
        if self.idle_ttl_s is None:
            return []
        cutoff = self._clock() - self.idle_ttl_s
        expired = [
            sid for sid, seen in self._last_seen.items()
            if seen < cutoff and not self._sessions[sid].state.loading
        ]
        for sid in expired:
            self._forget(sid)
            logger.info("session expired", extra={"session_id": sid, "idle_ttl_s": self.idle_ttl_s})
        return expired

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    # ---------- internals ----------
    def _evict_least_recent(self) -> None:
        idle = [sid for sid in self._sessions if not self._sessions[sid].state.loading]
        if not idle:
            return
        oldest = min(idle, key=self._last_seen.__getitem__)
        self._forget(oldest)
        logger.warning("session evicted at capacity", extra={"session_id": oldest, "max_sessions": self.max_sessions})

    def _forget(self, session_id: str) -> None:
        editor = self._sessions.pop(session_id)
        self._last_seen.pop(session_id, None)
        editor.reset()

"""
In-process sign-in state, keyed by the client-supplied session id.

A session is signed in once a valid email has been submitted; until then
the Executive Summary and PDF download stay locked.

Sessions expire SESSION_TTL_SECONDS after sign-in and the store holds at
most MAX_SESSIONS entries; the oldest sign-ins are evicted first.
"""

import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Tuple

from rapidroi.app.models.leads import SessionState


SESSION_TTL_SECONDS = 24 * 60 * 60
MAX_SESSIONS = 10_000


class SessionStore:
    def __init__(
        self,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        # session id -> (state, expiry); insertion order is sign-in order
        self._sessions: Dict[str, Tuple[SessionState, float]] = {}
        self._lock = threading.Lock()

    def _purge_expired(self, now: float) -> None:
        expired = [sid for sid, (_, expires) in self._sessions.items() if expires <= now]
        for sid in expired:
            del self._sessions[sid]

    def get(self, session_id: str) -> SessionState:
        """Current state; unknown and expired ids are reported as signed out."""
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is not None and entry[1] <= self._clock():
                del self._sessions[session_id]
                entry = None
        if entry is None:
            return SessionState(session_id=session_id)
        return entry[0].model_copy()

    def sign_in(self, session_id: str, email: str) -> SessionState:
        state = SessionState(
            session_id=session_id,
            signed_in=True,
            email=email,
            signed_in_at=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._sessions.pop(session_id, None)
            while len(self._sessions) >= self.max_sessions:
                del self._sessions[next(iter(self._sessions))]
            self._sessions[session_id] = (state, now + self.ttl_seconds)
        return state.model_copy()

    def sign_out(self, session_id: str) -> SessionState:
        with self._lock:
            self._sessions.pop(session_id, None)
        return SessionState(session_id=session_id)

    def is_signed_in(self, session_id: str) -> bool:
        return self.get(session_id).signed_in

    def clear(self) -> int:
        """Drop every session; returns how many were removed."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        return count

    def __len__(self) -> int:
        """Number of live (unexpired) sessions."""
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._sessions)


_store = SessionStore()


def get_session_store() -> SessionStore:
    """FastAPI dependency for the process-wide session store."""
    return _store

"""In-memory studio session store."""
from datetime import datetime, timezone, timedelta
from threading import Lock
from typing import Dict, List, Optional

from config import Config
from studio.controller import StudioSession
from utils.logger import get_logger

logger = get_logger("studio.store")


class SessionStore:
    """A tiny thread-safe registry of live studio sessions.

    - Sessions are keyed by their id and live only in process memory
    - Sessions idle for longer than the TTL are purged whenever a new one is created
    - get() raises KeyError for unknown or expired ids
    """

    def __init__(self, ttl_minutes: Optional[int] = None):
        self._lock = Lock()
        self._sessions: Dict[str, StudioSession] = {}
        self._ttl = timedelta(minutes=ttl_minutes if ttl_minutes is not None else Config.SESSION_TTL_MINUTES)

    def _is_expired(self, session: StudioSession, now: datetime) -> bool:
        return now - session.last_active > self._ttl

    def create(self) -> StudioSession:
        """Create and register a new session."""
        self.purge_expired()
        session = StudioSession()
        with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Created studio session {session.id}")
        return session

    def get(self, session_id: str) -> StudioSession:
        now = datetime.now(timezone.utc)
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise KeyError("session not found")
            if self._is_expired(session, now):
                self._sessions.pop(session_id, None)
                raise KeyError("session expired")
            return session

    def delete(self, session_id: str) -> StudioSession:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is None:
            raise KeyError("session not found")
        logger.info(f"Deleted studio session {session_id}")
        return removed

    def purge_expired(self) -> List[str]:
        """Drop sessions idle for longer than the TTL. Returns the purged ids."""
        now = datetime.now(timezone.utc)
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if self._is_expired(s, now)]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired studio session(s)")
        return expired

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# Global store instance
store = SessionStore()

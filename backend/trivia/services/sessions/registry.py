import logging
import threading
from typing import Dict, List, Optional

from trivia.models import Session


class SessionRegistry:
    """Process-wide store of live sessions keyed by session id.

    Sessions are created on demand and dropped as soon as they empty. The
    registry lock only protects the dict; callers serialize work on a
    session through ``session.lock``. Never take a session lock while holding
    the registry lock.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self.logger = logger or logging.getLogger(__name__)

    def get(self, session_id) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(session_id)
                self._sessions[session_id] = session
                self.logger.info(f"[session-create] session={session_id}")
            return session

    def remove(self, session_id: str, session: Optional[Session] = None) -> None:
        """Drop ``session_id``; if ``session`` is given, only when it is still the live entry."""
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None or (session is not None and current is not session):
                return
            del self._sessions[session_id]
            current.closed = True
        self.logger.info(f"[session-destroy] session={session_id}")

    def sessions(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def __contains__(self, session_id):
        with self._lock:
            return session_id in self._sessions

    def __len__(self):
        with self._lock:
            return len(self._sessions)

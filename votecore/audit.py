"""Activity log: bounded, newest-first record of who did what."""
import logging
import threading
from collections import deque

from .clock import Clock, utcnow
from .schemas import Activity
from .security import generate_activity_id

logger = logging.getLogger(__name__)


class ActivityLog:

    def __init__(self, max_entries: int = 1000, clock: Clock = utcnow):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: deque[Activity] = deque(maxlen=max_entries)

    def record(self, action: str, identity_id: str | None = None,
               role: str | None = None, details: str = "",
               election_id: str | None = None) -> Activity:
        entry = Activity(
            id=generate_activity_id(),
            timestamp=self._clock(),
            identity_id=identity_id,
            role=role,
            action=action,
            details=details,
            election_id=election_id,
        )
        with self._lock:
            self._entries.appendleft(entry)
        logger.debug(f"activity {action} by {identity_id}: {details}")
        return entry

    def recent(self, limit: int = 50, identity_id: str | None = None,
               action: str | None = None) -> list[Activity]:
        with self._lock:
            entries = list(self._entries)
        if identity_id is not None:
            entries = [e for e in entries if e.identity_id == identity_id]
        if action is not None:
            entries = [e for e in entries if e.action == action]
        return entries[:limit]

    def __len__(self) -> int:
        return len(self._entries)

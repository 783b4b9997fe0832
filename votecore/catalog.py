"""
Election catalog: the fixed set of elections and their vote counters.

Callers only ever receive snapshots; the catalog's own records are mutated
solely through ``increment_total`` (by the casting engine, after a commit) and
``set_status`` (by the admin lifecycle).  Each election owns one re-entrant
lock, shared by commits and tally reads, so a snapshot never sees a ledger
entry without its counter increment.
"""
import logging
import threading
from typing import Iterable

from .errors import ElectionNotFound, InvalidTransition
from .schemas import Election, ElectionStatus

logger = logging.getLogger(__name__)

# upcoming -> active -> completed, no way back
STATUS_TRANSITIONS: dict[str, set[str]] = {
    "upcoming": {"active"},
    "active": {"completed"},
    "completed": set(),
}


class ElectionCatalog:

    def __init__(self, elections: Iterable[Election] = ()):
        self._guard = threading.Lock()
        self._elections: dict[str, Election] = {}
        self._locks: dict[str, threading.RLock] = {}
        for election in elections:
            self.add(election)

    def add(self, election: Election) -> None:
        """Publish an election.  Candidates are frozen from here on."""
        with self._guard:
            if election.id in self._elections:
                raise ValueError(f"Duplicate election id {election.id}")
            self._elections[election.id] = election.model_copy()
            self._locks[election.id] = threading.RLock()

    def get(self, election_id: str) -> Election:
        election = self._elections.get(election_id)
        if election is None:
            raise ElectionNotFound()
        with self._locks[election_id]:
            return election.model_copy()

    def list_active(self) -> list[Election]:
        return [e for e in self.list_all() if e.status == "active"]

    def list_all(self) -> list[Election]:
        return [self.get(eid) for eid in list(self._elections)]

    def election_lock(self, election_id: str) -> threading.RLock:
        lock = self._locks.get(election_id)
        if lock is None:
            raise ElectionNotFound()
        return lock

    def increment_total(self, election_id: str) -> int:
        with self.election_lock(election_id):
            election = self._elections[election_id]
            election.total_votes += 1
            return election.total_votes

    def set_status(self, election_id: str, status: ElectionStatus) -> Election:
        with self.election_lock(election_id):
            election = self._elections[election_id]
            if status not in STATUS_TRANSITIONS[election.status]:
                raise InvalidTransition(
                    f"Cannot move election from {election.status} to {status}"
                )
            previous = election.status
            election.status = status
            snapshot = election.model_copy()
        logger.info(f"Election {election_id} {previous} -> {status}")
        return snapshot

"""
Vote ledger and voter-election index.

The ledger is append-only: records are immutable and there is no public
update or delete.  It links voter to vote so duplicates can be refused, but
that link never leaves the core; tallies and audit trails expose only vote
ids, hashes and counts.

The index is derived state (``voter_id -> {election_id}``) and is kept in
step with the ledger by the casting engine.
"""
import logging
import threading

from .errors import DuplicateVoteId
from .schemas import Vote

logger = logging.getLogger(__name__)


class VoteLedger:

    def __init__(self):
        self._lock = threading.Lock()
        self._votes: dict[str, Vote] = {}
        self._by_election: dict[str, list[str]] = {}

    def append(self, vote: Vote) -> None:
        with self._lock:
            if vote.id in self._votes:
                raise DuplicateVoteId()
            self._votes[vote.id] = vote
            self._by_election.setdefault(vote.election_id, []).append(vote.id)

    def by_election(self, election_id: str) -> list[Vote]:
        """All votes for an election, in insertion order."""
        with self._lock:
            return [self._votes[vid] for vid in self._by_election.get(election_id, ())]

    def count(self, election_id: str) -> int:
        with self._lock:
            return len(self._by_election.get(election_id, ()))

    def get(self, vote_id: str) -> Vote | None:
        return self._votes.get(vote_id)

    def last_hash(self, election_id: str) -> str | None:
        with self._lock:
            ids = self._by_election.get(election_id)
            return self._votes[ids[-1]].ballot_hash if ids else None

    def all(self) -> list[Vote]:
        with self._lock:
            return list(self._votes.values())

    def __len__(self) -> int:
        return len(self._votes)

    def _retract(self, vote_id: str) -> None:
        """Undo an append that belongs to a commit being rolled back."""
        with self._lock:
            vote = self._votes.pop(vote_id, None)
            if vote is not None:
                self._by_election[vote.election_id].remove(vote_id)


class VoterElectionIndex:
    """Per-voter set of elections already voted in."""

    def __init__(self):
        self._lock = threading.Lock()
        self._voted: dict[str, set[str]] = {}

    def has_voted(self, voter_id: str, election_id: str) -> bool:
        with self._lock:
            return election_id in self._voted.get(voter_id, ())

    def mark_voted(self, voter_id: str, election_id: str) -> None:
        with self._lock:
            self._voted.setdefault(voter_id, set()).add(election_id)

    def voted_elections(self, voter_id: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._voted.get(voter_id, ()))

    def _unmark(self, voter_id: str, election_id: str) -> None:
        with self._lock:
            self._voted.get(voter_id, set()).discard(election_id)

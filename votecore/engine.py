"""
Vote casting engine.

``cast_vote`` runs five steps:

    1. validate the session                      -> InvalidSession
    2. resolve the election, require active      -> ElectionNotFound / ElectionNotOpen
    3. refuse a second vote for the pair         -> AlreadyVoted
    4. require a candidate on the ballot         -> InvalidCandidate
    5. commit: ledger append, index mark, counter increment

Steps 3-5 run under a lock owned by the (voter, election) pair, so of N
racing casts for one pair exactly one commits.  Distinct pairs never share
that lock; they only meet on the per-election lock for the few dict writes of
the commit itself.

Each pair moves NotVoted -> Voted at most once.  Voted is terminal, so a
pair's lock is dropped once it is reached; the index check alone refuses any
later attempt, whichever lock object it runs under.

Inside the pair lock the session and the election status are checked again,
so a session that expires (or an election that closes) between step 1 and the
commit produces no vote.
"""
import logging
import threading
from contextlib import contextmanager

from .audit import ActivityLog
from .catalog import ElectionCatalog
from .clock import Clock, utcnow
from .errors import (
    AlreadyVoted, ElectionNotOpen, InvalidCandidate, StorageFailure, VoteError,
)
from .ledger import VoteLedger, VoterElectionIndex
from .schemas import Provenance, Session, Vote, VoteReceipt
from .security import (
    ballot_hash, generate_device_fingerprint, generate_hash_salt, generate_vote_id,
)
from .sessions import SessionStore

logger = logging.getLogger(__name__)


class VoteCastingEngine:

    def __init__(self, sessions: SessionStore, catalog: ElectionCatalog,
                 ledger: VoteLedger, index: VoterElectionIndex,
                 activity: ActivityLog, clock: Clock = utcnow):
        self._sessions = sessions
        self._catalog = catalog
        self._ledger = ledger
        self._index = index
        self._activity = activity
        self._clock = clock
        self._pair_guard = threading.Lock()
        self._pair_locks: dict[tuple[str, str], threading.Lock] = {}

    def cast_vote(self, token: str | None, election_id: str, candidate_id: str,
                  ip_address: str | None = None,
                  device_fingerprint: str | None = None) -> VoteReceipt:
        session = None
        try:
            session = self._sessions.validate(token)
            receipt = self._cast(session, token, election_id, candidate_id,
                                 ip_address, device_fingerprint)
        except VoteError as e:
            identity_id = session.identity_id if session else None
            logger.info(f"Vote rejected ({e.code}) for {identity_id} in {election_id}")
            self._activity.record(
                "vote_rejected", identity_id, session.role if session else None,
                details=e.code, election_id=election_id,
            )
            raise

        logger.info(f"Vote {receipt.vote_id} recorded in {election_id}")
        self._activity.record(
            "vote_cast", session.identity_id, session.role,
            details=f"receipt {receipt.vote_id}", election_id=election_id,
        )
        return receipt

    def has_voted(self, voter_id: str, election_id: str) -> bool:
        return self._index.has_voted(voter_id, election_id)

    # -- Internal -------------------------------------------------------------

    def _cast(self, session: Session, token, election_id, candidate_id,
              ip_address, device_fingerprint) -> VoteReceipt:
        election = self._catalog.get(election_id)
        if election.status != "active":
            raise ElectionNotOpen()

        voter_id = session.identity_id
        with self._pair_lock(voter_id, election_id):
            if self._index.has_voted(voter_id, election_id):
                self._forget_pair(voter_id, election_id)
                raise AlreadyVoted()
            if election.candidate(candidate_id) is None:
                raise InvalidCandidate()

            # Re-validate at commit time: no late votes from expired sessions.
            session = self._sessions.validate(token)
            provenance = Provenance(
                ip_address=ip_address,
                device_fingerprint=device_fingerprint or generate_device_fingerprint(),
                biometric_verified=session.biometric_verified,
            )
            receipt = self._commit(voter_id, election_id, candidate_id, provenance)
            self._forget_pair(voter_id, election_id)
            return receipt

    def _commit(self, voter_id, election_id, candidate_id,
                provenance: Provenance) -> VoteReceipt:
        with self._catalog.election_lock(election_id):
            if self._catalog.get(election_id).status != "active":
                raise ElectionNotOpen()

            vote_id = generate_vote_id()
            cast_at = self._clock()
            salt = generate_hash_salt()
            previous_hash = self._ledger.last_hash(election_id)
            vote = Vote(
                id=vote_id,
                election_id=election_id,
                voter_id=voter_id,
                candidate_id=candidate_id,
                cast_at=cast_at,
                provenance=provenance,
                previous_hash=previous_hash,
                ballot_hash=ballot_hash(vote_id, election_id, candidate_id,
                                        cast_at, salt, previous_hash),
                hash_salt=salt,
            )

            appended = marked = False
            try:
                self._ledger.append(vote)
                appended = True
                self._index.mark_voted(voter_id, election_id)
                marked = True
                self._catalog.increment_total(election_id)
            except Exception as e:
                if marked:
                    self._index._unmark(voter_id, election_id)
                if appended:
                    self._ledger._retract(vote_id)
                logger.error(f"Commit of {vote_id} in {election_id} failed, rolled back: {e}")
                raise StorageFailure() from e

        return VoteReceipt(vote_id=vote.id, election_id=election_id,
                           ballot_hash=vote.ballot_hash, cast_at=cast_at)

    @contextmanager
    def _pair_lock(self, voter_id: str, election_id: str):
        key = (voter_id, election_id)
        with self._pair_guard:
            lock = self._pair_locks.setdefault(key, threading.Lock())
        with lock:
            yield

    def _forget_pair(self, voter_id: str, election_id: str) -> None:
        with self._pair_guard:
            self._pair_locks.pop((voter_id, election_id), None)

"""
Tally engine: read-only views derived from the ledger and the catalog.

Per-election views (results, export, details, audit) are computed from one
snapshot taken under the election's lock, so the counted votes and
``total_votes`` always agree.  Cross-election statistics read each
election separately; they feed dashboards only and never gate a vote.
"""
import logging
from collections import Counter

from .catalog import ElectionCatalog
from .errors import IdentityNotFound, ReceiptNotFound
from .ledger import VoteLedger
from .schemas import (
    AdminStats, AuditEntry, AuditTrail, CandidateResult, Election,
    ElectionDetails, ElectionsByStatus, ReceiptVerification, TallyRow,
    TimelinePoint, Vote,
)
from .security import ballot_hash
from .sessions import IdentityRegistry

logger = logging.getLogger(__name__)


class TallyEngine:

    def __init__(self, catalog: ElectionCatalog, ledger: VoteLedger,
                 identities: IdentityRegistry):
        self._catalog = catalog
        self._ledger = ledger
        self._identities = identities

    def results_for(self, election_id: str) -> list[CandidateResult]:
        """Per-candidate votes and unrounded percentages, in ballot order."""
        election, votes = self._snapshot(election_id)
        return self._results(election, votes)

    def export_tally(self, election_id: str) -> list[TallyRow]:
        election, votes = self._snapshot(election_id)
        rows = []
        for candidate, result in zip(election.candidates, self._results(election, votes)):
            rows.append(TallyRow(
                candidate_name=candidate.name,
                party=candidate.party,
                votes=result.votes,
                percentage=round(result.percentage, 2),
            ))
        return rows

    def election_details(self, election_id: str) -> ElectionDetails:
        election, votes = self._snapshot(election_id)
        return ElectionDetails(
            election=election,
            results=self._results(election, votes),
            total_votes=len(votes),
            vote_timeline=self._timeline(votes),
        )

    def statistics(self) -> AdminStats:
        elections = self._catalog.list_all()
        votes = self._ledger.all()

        by_status = ElectionsByStatus()
        for e in elections:
            setattr(by_status, e.status, getattr(by_status, e.status) + 1)

        votes_by_election = {e.id: 0 for e in elections}
        votes_by_county: Counter[str] = Counter()
        profiles: dict[str, tuple[str | None, str]] = {}
        for v in votes:
            votes_by_election[v.election_id] = votes_by_election.get(v.election_id, 0) + 1
            if v.voter_id not in profiles:
                profiles[v.voter_id] = self._profile(v.voter_id)
            votes_by_county[profiles[v.voter_id][1]] += 1

        # only voter-role identities count toward turnout
        registered = self._identities.count("voter")
        participated = sum(1 for role, _ in profiles.values() if role == "voter")
        turnout = participated / registered * 100 if registered > 0 else 0
        return AdminStats(
            total_registered_voters=registered,
            total_votes_cast=len(votes),
            turnout_percentage=round(turnout, 2),
            elections_by_status=by_status,
            votes_by_election=votes_by_election,
            votes_by_county=dict(votes_by_county),
        )

    def audit_trail(self, election_id: str) -> AuditTrail:
        """Ordered hash chain for an election, with no voter identity."""
        _, votes = self._snapshot(election_id)

        entries = []
        valid = True
        previous = None
        for i, v in enumerate(votes):
            expected = ballot_hash(v.id, v.election_id, v.candidate_id,
                                   v.cast_at, v.hash_salt, v.previous_hash)
            if v.previous_hash != previous or v.ballot_hash != expected:
                valid = False
            previous = v.ballot_hash
            entries.append(AuditEntry(
                vote_id=v.id,
                ballot_hash=v.ballot_hash,
                previous_hash=v.previous_hash,
                cast_at=v.cast_at,
                sequence=i + 1,
            ))

        if not valid:
            logger.error(f"Hash chain broken for election {election_id}")
        return AuditTrail(
            election_id=election_id,
            total_votes=len(votes),
            hash_chain_valid=valid,
            audit_trail=entries,
        )

    def verify_receipt(self, vote_id: str) -> ReceiptVerification:
        vote = self._ledger.get(vote_id)
        if vote is None:
            raise ReceiptNotFound()
        election = self._catalog.get(vote.election_id)
        return ReceiptVerification(
            verified=True,
            vote_id=vote.id,
            ballot_hash=vote.ballot_hash,
            election_id=election.id,
            election_title=election.title,
            cast_at=vote.cast_at,
        )

    # -- Internal -------------------------------------------------------------

    def _snapshot(self, election_id: str) -> tuple[Election, list[Vote]]:
        with self._catalog.election_lock(election_id):
            return self._catalog.get(election_id), self._ledger.by_election(election_id)

    @staticmethod
    def _results(election: Election, votes: list[Vote]) -> list[CandidateResult]:
        counts = Counter(v.candidate_id for v in votes)
        total = election.total_votes
        return [
            CandidateResult(
                candidate_id=c.id,
                votes=counts[c.id],
                percentage=(counts[c.id] / total * 100) if total > 0 else 0.0,
            )
            for c in election.candidates
        ]

    @staticmethod
    def _timeline(votes: list[Vote]) -> list[TimelinePoint]:
        buckets: Counter = Counter(
            v.cast_at.replace(minute=0, second=0, microsecond=0) for v in votes
        )
        return [TimelinePoint(hour=h, count=n) for h, n in sorted(buckets.items())]

    def _profile(self, voter_id: str) -> tuple[str | None, str]:
        """(role, county) of a voter; county falls back to "Unknown"."""
        try:
            identity = self._identities.get(voter_id)
        except IdentityNotFound:
            return None, "Unknown"
        return identity.role, identity.county or "Unknown"

"""
VotingSystem: the explicit container for every store plus the external
surface the presentation layer calls.

Construct one at startup and hand it to whatever serves requests (the FastAPI
app does this in its lifespan).  Nothing in the package keeps process-wide
state, so tests build as many isolated systems as they like.
"""
import logging

from .audit import ActivityLog
from .catalog import ElectionCatalog
from .clock import Clock, utcnow
from .config import Settings
from .engine import VoteCastingEngine
from .errors import AccessDenied, InvalidSession
from .ledger import VoteLedger, VoterElectionIndex
from .schemas import (
    Activity, AdminStats, AuditTrail, CandidateResult, Election,
    ElectionDetails, ElectionStatus, Identity, LoginResponse,
    ReceiptVerification, RegisterRequest, Role, Session, TallyRow, VoteReceipt,
)
from .security import make_password_context
from .seed import seed_catalog, seed_identities
from .sessions import IdentityRegistry, SessionStore
from .tally import TallyEngine

logger = logging.getLogger(__name__)

REPORTING_ROLES: tuple[Role, ...] = ("admin", "agent")


class VotingSystem:

    def __init__(self, settings: Settings | None = None, clock: Clock = utcnow,
                 seed: bool | None = None):
        self.settings = settings or Settings()
        self.clock = clock

        self.identities = IdentityRegistry(
            make_password_context(self.settings.bcrypt_rounds), clock
        )
        self.sessions = SessionStore(self.identities, self.settings, clock)
        self.catalog = ElectionCatalog()
        self.ledger = VoteLedger()
        self.index = VoterElectionIndex()
        self.activity = ActivityLog(self.settings.activity_log_size, clock)
        self.engine = VoteCastingEngine(
            self.sessions, self.catalog, self.ledger, self.index,
            self.activity, clock,
        )
        self.tally = TallyEngine(self.catalog, self.ledger, self.identities)

        if self.settings.seed_data if seed is None else seed:
            seed_catalog(self.catalog, clock(), self.settings.election_duration_days)
            seed_identities(self.identities)

    # ==========================================================================
    # 1. AUTH
    # ==========================================================================

    def authenticate(self, identity_id: str, proof: str) -> LoginResponse:
        session = self.sessions.authenticate(identity_id, proof)
        self.activity.record("login", session.identity_id, session.role,
                             details="credentials accepted")
        return LoginResponse(token=session.token, role=session.role,
                             expires_at=session.expires_at)

    def logout(self, token: str | None) -> None:
        try:
            session = self.sessions.validate(token)
        except InvalidSession:
            session = None
        self.sessions.invalidate(token)
        if session is not None:
            self.activity.record("logout", session.identity_id, session.role)

    def register_identity(self, data: RegisterRequest) -> Identity:
        identity = self.identities.register(
            data.national_id, data.password, data.first_name, data.last_name,
            str(data.email), phone_number=data.phone_number,
            date_of_birth=data.date_of_birth, county=data.county,
            constituency=data.constituency, ward=data.ward,
        )
        self.activity.record("register", identity.id, identity.role)
        return identity

    def verify_identity(self, token: str | None, identity_id: str) -> Identity:
        session = self._require_role(token, "admin")
        identity = self.identities.verify(identity_id)
        self.activity.record("identity_verified", session.identity_id, session.role,
                             details=identity_id)
        return identity

    def record_biometric(self, token: str | None, verified: bool) -> Session:
        session = self.sessions.record_biometric(token, verified)
        self.activity.record("biometric", session.identity_id, session.role,
                             details="verified" if verified else "not verified")
        return session

    # ==========================================================================
    # 2. VOTING
    # ==========================================================================

    def cast_vote(self, token: str | None, election_id: str, candidate_id: str,
                  ip_address: str | None = None,
                  device_fingerprint: str | None = None) -> VoteReceipt:
        return self.engine.cast_vote(token, election_id, candidate_id,
                                     ip_address, device_fingerprint)

    def has_voted(self, token: str | None, election_id: str) -> bool:
        session = self.sessions.validate(token)
        self.catalog.get(election_id)
        return self.engine.has_voted(session.identity_id, election_id)

    def active_elections(self) -> list[Election]:
        return self.catalog.list_active()

    def get_election(self, election_id: str) -> Election:
        return self.catalog.get(election_id)

    # ==========================================================================
    # 3. RESULTS & AUDIT
    # ==========================================================================

    def results_for(self, election_id: str) -> list[CandidateResult]:
        return self.tally.results_for(election_id)

    def export_tally(self, election_id: str) -> list[TallyRow]:
        return self.tally.export_tally(election_id)

    def audit_trail(self, election_id: str) -> AuditTrail:
        return self.tally.audit_trail(election_id)

    def verify_receipt(self, vote_id: str) -> ReceiptVerification:
        return self.tally.verify_receipt(vote_id)

    # ==========================================================================
    # 4. ADMIN & MONITORING
    # ==========================================================================

    def statistics(self, token: str | None) -> AdminStats:
        self._require_role(token, *REPORTING_ROLES)
        return self.tally.statistics()

    def election_details(self, token: str | None, election_id: str) -> ElectionDetails:
        self._require_role(token, *REPORTING_ROLES)
        return self.tally.election_details(election_id)

    def set_election_status(self, token: str | None, election_id: str,
                            status: ElectionStatus) -> Election:
        session = self._require_role(token, "admin")
        election = self.catalog.set_status(election_id, status)
        self.activity.record("election_status", session.identity_id, session.role,
                             details=f"status -> {status}", election_id=election_id)
        return election

    def recent_activity(self, token: str | None, limit: int = 50) -> list[Activity]:
        self._require_role(token, *REPORTING_ROLES)
        return self.activity.recent(limit)

    def _require_role(self, token: str | None, *roles: Role) -> Session:
        session = self.sessions.validate(token)
        if session.role not in roles:
            logger.warning(f"{session.identity_id} ({session.role}) denied, needs {roles}")
            raise AccessDenied()
        return session

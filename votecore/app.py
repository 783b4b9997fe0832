"""
Voting API: HTTP binding of the VotingSystem surface.

Endpoint groups:
  1. Auth: login, logout, register, biometric flag
  2. Voting: active elections, ballot, cast vote, has-voted
  3. Results: live results, tally export, audit trail, receipts
  4. Admin: statistics, election details, lifecycle, activity, identity verification

Session tokens travel as ``Authorization: Bearer <token>``.  Every core error
is returned as ``{"error": <code>, "detail": <message>}`` with the status
code its class declares, so clients can switch on ``error``.

Run with:  uvicorn votecore.app:app --port 5003
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from .config import Settings
from .errors import VotingError
from .schemas import (
    Activity, AdminStats, AuditTrail, BiometricRequest, CandidateResult,
    CastVoteRequest, Election, ElectionDetails, HasVotedResponse,
    HealthResponse, LoginRequest, LoginResponse, MessageResponse,
    ReceiptVerification, RegisterRequest, RegisterResponse,
    StatusChangeRequest, TallyRow, VoteReceipt,
)
from .system import VotingSystem

logger = logging.getLogger("voting-api")

bearer = HTTPBearer(auto_error=False)


def create_app(system: VotingSystem | None = None) -> FastAPI:
    """Build the app around ``system`` (a fresh one from the environment if None)."""

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        if getattr(application.state, "system", None) is None:
            application.state.system = VotingSystem(Settings())
        logger.info("Voting API ready")
        yield
        logger.info("Voting API shutting down")

    application = FastAPI(
        title="Voting API",
        description="Session auth, one-vote-per-election casting, and live tallies",
        lifespan=lifespan,
    )
    application.state.system = system

    @application.exception_handler(VotingError)
    async def voting_error_handler(request: Request, exc: VotingError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": exc.detail},
        )

    _register_routes(application)
    return application


def get_system(request: Request) -> VotingSystem:
    return request.app.state.system


def bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> str | None:
    return credentials.credentials if credentials else None


def _register_routes(app: FastAPI) -> None:

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return {"status": "healthy", "service": "voting"}

    # ==========================================================================
    # 1. AUTH
    # ==========================================================================

    @app.post("/auth/login", response_model=LoginResponse)
    async def login(data: LoginRequest, system: VotingSystem = Depends(get_system)):
        # bcrypt is CPU-bound; keep it off the event loop
        return await run_in_threadpool(system.authenticate, data.national_id, data.password)

    @app.post("/auth/logout", response_model=MessageResponse)
    async def logout(token: str | None = Depends(bearer_token),
                     system: VotingSystem = Depends(get_system)):
        system.logout(token)
        return {"message": "Logged out"}

    @app.post("/auth/register", response_model=RegisterResponse, status_code=201)
    async def register(data: RegisterRequest, system: VotingSystem = Depends(get_system)):
        identity = await run_in_threadpool(system.register_identity, data)
        return {"message": "Registration received, pending verification",
                "identity_id": identity.id}

    @app.post("/auth/biometric", response_model=MessageResponse)
    async def biometric(data: BiometricRequest,
                        token: str | None = Depends(bearer_token),
                        system: VotingSystem = Depends(get_system)):
        system.record_biometric(token, data.verified)
        return {"message": "Biometric status recorded"}

    # ==========================================================================
    # 2. VOTING
    # ==========================================================================

    @app.get("/elections", response_model=list[Election])
    async def active_elections(system: VotingSystem = Depends(get_system)):
        return system.active_elections()

    @app.get("/elections/{election_id}", response_model=Election)
    async def get_election(election_id: str, system: VotingSystem = Depends(get_system)):
        return system.get_election(election_id)

    @app.post("/elections/{election_id}/vote", response_model=VoteReceipt, status_code=201)
    async def cast_vote(election_id: str, data: CastVoteRequest, request: Request,
                        token: str | None = Depends(bearer_token),
                        system: VotingSystem = Depends(get_system)):
        ip_address = request.client.host if request.client else None
        return await run_in_threadpool(
            system.cast_vote, token, election_id, data.candidate_id,
            ip_address, data.device_fingerprint,
        )

    @app.get("/elections/{election_id}/has-voted", response_model=HasVotedResponse)
    async def has_voted(election_id: str, token: str | None = Depends(bearer_token),
                        system: VotingSystem = Depends(get_system)):
        return {"election_id": election_id,
                "has_voted": system.has_voted(token, election_id)}

    # ==========================================================================
    # 3. RESULTS & AUDIT
    # ==========================================================================

    @app.get("/elections/{election_id}/results", response_model=list[CandidateResult])
    async def results(election_id: str, system: VotingSystem = Depends(get_system)):
        return system.results_for(election_id)

    @app.get("/elections/{election_id}/export", response_model=list[TallyRow])
    async def export_tally(election_id: str, system: VotingSystem = Depends(get_system)):
        return system.export_tally(election_id)

    @app.get("/elections/{election_id}/audit", response_model=AuditTrail)
    async def audit_trail(election_id: str, system: VotingSystem = Depends(get_system)):
        return system.audit_trail(election_id)

    @app.get("/receipt/{vote_id}", response_model=ReceiptVerification)
    async def verify_receipt(vote_id: str, system: VotingSystem = Depends(get_system)):
        return system.verify_receipt(vote_id)

    # ==========================================================================
    # 4. ADMIN & MONITORING
    # ==========================================================================

    @app.get("/admin/statistics", response_model=AdminStats)
    async def statistics(token: str | None = Depends(bearer_token),
                         system: VotingSystem = Depends(get_system)):
        return system.statistics(token)

    @app.get("/admin/elections/{election_id}", response_model=ElectionDetails)
    async def election_details(election_id: str,
                               token: str | None = Depends(bearer_token),
                               system: VotingSystem = Depends(get_system)):
        return system.election_details(token, election_id)

    @app.post("/admin/elections/{election_id}/status", response_model=Election)
    async def set_status(election_id: str, data: StatusChangeRequest,
                         token: str | None = Depends(bearer_token),
                         system: VotingSystem = Depends(get_system)):
        return system.set_election_status(token, election_id, data.status)

    @app.get("/admin/activity", response_model=list[Activity])
    async def activity(limit: int = Query(50, ge=1, le=1000),
                       token: str | None = Depends(bearer_token),
                       system: VotingSystem = Depends(get_system)):
        return system.recent_activity(token, limit)

    @app.post("/admin/identities/{identity_id}/verify", response_model=MessageResponse)
    async def verify_identity(identity_id: str,
                              token: str | None = Depends(bearer_token),
                              system: VotingSystem = Depends(get_system)):
        system.verify_identity(token, identity_id)
        return {"message": "Identity verified"}


app = create_app()


def main() -> None:
    import uvicorn

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    uvicorn.run("votecore.app:app", host="0.0.0.0", port=5003)


if __name__ == "__main__":
    main()

"""
Pydantic schemas: domain records and request/response serialisation.

Organised by bounded context:
    1. Identity & sessions
    2. Elections
    3. Votes & receipts
    4. Tallies, audit and reporting
    5. API requests / responses
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["voter", "admin", "agent"]
ElectionStatus = Literal["upcoming", "active", "completed"]


# ══════════════════════════════════════════════════════════════════════════════
# 1. IDENTITY & SESSIONS
# ══════════════════════════════════════════════════════════════════════════════

class Identity(BaseModel):
    id: str
    national_id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    date_of_birth: str | None = None
    role: Role = "voter"
    county: str | None = None
    constituency: str | None = None
    ward: str | None = None
    is_verified: bool = False
    credential_hash: str = Field(repr=False)
    registered_at: datetime
    last_login: datetime | None = None


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity_id: str
    token: str = Field(repr=False)
    role: Role
    issued_at: datetime
    expires_at: datetime
    biometric_verified: bool = False

    def is_valid_at(self, now: datetime) -> bool:
        return now < self.expires_at


# ══════════════════════════════════════════════════════════════════════════════
# 2. ELECTIONS
# ══════════════════════════════════════════════════════════════════════════════

class Candidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    party: str
    position: str
    biography: str = ""
    manifesto: str = ""
    image_ref: str | None = None


class Election(BaseModel):
    id: str
    title: str
    description: str = ""
    start_at: datetime
    end_at: datetime
    status: ElectionStatus
    candidates: tuple[Candidate, ...]
    total_votes: int = 0

    def candidate(self, candidate_id: str) -> Candidate | None:
        for c in self.candidates:
            if c.id == candidate_id:
                return c
        return None


# ══════════════════════════════════════════════════════════════════════════════
# 3. VOTES & RECEIPTS
# ══════════════════════════════════════════════════════════════════════════════

class Provenance(BaseModel):
    model_config = ConfigDict(frozen=True)

    ip_address: str | None = None
    device_fingerprint: str
    biometric_verified: bool = False


class Vote(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    election_id: str
    voter_id: str
    candidate_id: str
    cast_at: datetime
    provenance: Provenance
    previous_hash: str | None = None
    ballot_hash: str
    hash_salt: str = Field(repr=False)


class VoteReceipt(BaseModel):
    vote_id: str
    election_id: str
    ballot_hash: str
    cast_at: datetime


class ReceiptVerification(BaseModel):
    verified: bool
    vote_id: str
    ballot_hash: str
    election_id: str
    election_title: str
    cast_at: datetime


# ══════════════════════════════════════════════════════════════════════════════
# 4. TALLIES, AUDIT AND REPORTING
# ══════════════════════════════════════════════════════════════════════════════

class CandidateResult(BaseModel):
    candidate_id: str
    votes: int
    percentage: float


class TallyRow(BaseModel):
    candidate_name: str
    party: str
    votes: int
    percentage: float


class AuditEntry(BaseModel):
    vote_id: str
    ballot_hash: str
    previous_hash: str | None
    cast_at: datetime
    sequence: int


class AuditTrail(BaseModel):
    election_id: str
    total_votes: int
    hash_chain_valid: bool
    audit_trail: list[AuditEntry]


class ElectionsByStatus(BaseModel):
    active: int = 0
    completed: int = 0
    upcoming: int = 0


class AdminStats(BaseModel):
    total_registered_voters: int
    total_votes_cast: int
    turnout_percentage: float
    elections_by_status: ElectionsByStatus
    votes_by_election: dict[str, int]
    votes_by_county: dict[str, int]


class TimelinePoint(BaseModel):
    hour: datetime
    count: int


class ElectionDetails(BaseModel):
    election: Election
    results: list[CandidateResult]
    total_votes: int
    vote_timeline: list[TimelinePoint]


class Activity(BaseModel):
    id: str
    timestamp: datetime
    identity_id: str | None = None
    role: str | None = None
    action: str
    details: str = ""
    election_id: str | None = None


# ══════════════════════════════════════════════════════════════════════════════
# 5. API REQUESTS / RESPONSES
# ══════════════════════════════════════════════════════════════════════════════

class LoginRequest(BaseModel):
    national_id: str
    password: str


class LoginResponse(BaseModel):
    token: str
    role: Role
    expires_at: datetime


class RegisterRequest(BaseModel):
    national_id: str = Field(min_length=1, max_length=32)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    phone_number: str | None = None
    date_of_birth: str | None = None  # YYYY-MM-DD
    county: str | None = None
    constituency: str | None = None
    ward: str | None = None


class RegisterResponse(BaseModel):
    message: str
    identity_id: str


class BiometricRequest(BaseModel):
    verified: bool


class CastVoteRequest(BaseModel):
    candidate_id: str
    device_fingerprint: str | None = None


class StatusChangeRequest(BaseModel):
    status: ElectionStatus


class HasVotedResponse(BaseModel):
    election_id: str
    has_voted: bool


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    service: str

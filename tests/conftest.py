"""Shared fixtures: an isolated VotingSystem per test with a controllable clock."""
from datetime import datetime, timedelta, timezone

import pytest

from votecore import Settings, VotingSystem
from votecore.schemas import Candidate, Election

VOTER_NATIONAL_ID = "30000001"
VOTER_PASSWORD = "correct-horse"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2027, 8, 9, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(bcrypt_rounds=4, jwt_secret="test-secret", seed_data=False)


@pytest.fixture
def system(settings, clock):
    """Unseeded system holding E1 = [A, B] and one verified voter V1."""
    vs = VotingSystem(settings, clock=clock)
    vs.catalog.add(make_election("E1", ["A", "B"], clock()))
    vs.identities.register(
        VOTER_NATIONAL_ID, VOTER_PASSWORD, "Val", "One", "val.one@example.com",
        verified=True, identity_id="V1", county="Nairobi",
    )
    return vs


@pytest.fixture
def seeded(settings, clock):
    return VotingSystem(settings, clock=clock, seed=True)


@pytest.fixture
def token(system):
    return system.authenticate(VOTER_NATIONAL_ID, VOTER_PASSWORD).token


def make_election(election_id: str, candidate_ids: list[str], now: datetime,
                  status: str = "active") -> Election:
    return Election(
        id=election_id,
        title=f"Election {election_id}",
        start_at=now,
        end_at=now + timedelta(days=30),
        status=status,
        candidates=tuple(
            Candidate(id=cid, name=f"Candidate {cid}", party=f"Party {cid}",
                      position="Test seat")
            for cid in candidate_ids
        ),
    )


def add_voters(system: VotingSystem, count: int, prefix: str = "V",
               county: str = "Nairobi") -> list[str]:
    """Register ``count`` verified voters and return a session token for each."""
    tokens = []
    for i in range(count):
        national_id = f"{prefix}-{i:05d}"
        system.identities.register(
            national_id, "voter-pass", "Test", f"Voter{i}",
            f"{prefix.lower()}{i}@example.com", verified=True, county=county,
        )
        tokens.append(system.authenticate(national_id, "voter-pass").token)
    return tokens

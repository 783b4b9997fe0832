from dataclasses import replace
from datetime import timedelta

import pytest

from votecore import VotingSystem
from votecore.errors import AuthError, DuplicateIdentity, InvalidSession

from conftest import VOTER_NATIONAL_ID, VOTER_PASSWORD


def test_authenticate_issues_24h_session(system, clock):
    session = system.sessions.authenticate(VOTER_NATIONAL_ID, VOTER_PASSWORD)

    assert session.identity_id == "V1"
    assert session.role == "voter"
    assert session.issued_at == clock()
    assert session.expires_at - session.issued_at == timedelta(hours=24)
    assert system.sessions.validate(session.token) == session


def test_authenticate_updates_last_login(system, clock):
    assert system.identities.get("V1").last_login is None
    system.sessions.authenticate(VOTER_NATIONAL_ID, VOTER_PASSWORD)
    assert system.identities.get("V1").last_login == clock()


def test_tokens_are_unique_per_login(system):
    a = system.sessions.authenticate(VOTER_NATIONAL_ID, VOTER_PASSWORD)
    b = system.sessions.authenticate(VOTER_NATIONAL_ID, VOTER_PASSWORD)
    assert a.token != b.token
    assert system.sessions.validate(a.token).identity_id == "V1"
    assert system.sessions.validate(b.token).identity_id == "V1"


def test_wrong_password_and_unknown_identity_look_the_same(system):
    with pytest.raises(AuthError) as wrong:
        system.sessions.authenticate(VOTER_NATIONAL_ID, "nope")
    with pytest.raises(AuthError) as unknown:
        system.sessions.authenticate("00000000", "nope")
    assert wrong.value.detail == unknown.value.detail == "Invalid credentials"


def test_unverified_identity_cannot_log_in(system):
    identity = system.identities.register(
        "40000001", "pending-pass", "New", "Voter", "new@example.com",
    )
    with pytest.raises(AuthError, match="not verified"):
        system.sessions.authenticate("40000001", "pending-pass")

    system.identities.verify(identity.id)
    assert system.sessions.authenticate("40000001", "pending-pass").identity_id == identity.id


def test_duplicate_registration_rejected(system):
    with pytest.raises(DuplicateIdentity):
        system.identities.register(VOTER_NATIONAL_ID, "whatever1", "X", "Y", "x@example.com")
    with pytest.raises(DuplicateIdentity):
        system.identities.register("40000002", "whatever1", "X", "Y", "Val.One@EXAMPLE.com")


@pytest.mark.parametrize("bad_token", [None, "", "garbage", "a.b.c"])
def test_malformed_tokens_are_invalid(system, bad_token):
    with pytest.raises(InvalidSession):
        system.sessions.validate(bad_token)


def test_token_signed_with_other_secret_is_invalid(system, clock):
    from votecore.security import encode_session_token

    forged = encode_session_token("made-up-sid", clock(), "other-secret")
    with pytest.raises(InvalidSession):
        system.sessions.validate(forged)


def test_session_rejected_after_expiry(system, clock, token):
    system.sessions.validate(token)

    clock.advance(hours=23, minutes=59)
    system.sessions.validate(token)

    clock.advance(minutes=1)
    with pytest.raises(InvalidSession):
        system.sessions.validate(token)
    # evicted, stays invalid even if the clock went backwards
    clock.advance(hours=-1)
    with pytest.raises(InvalidSession):
        system.sessions.validate(token)


def test_invalidate_is_idempotent(system, token):
    system.sessions.invalidate(token)
    system.sessions.invalidate(token)
    system.sessions.invalidate("never-issued")
    with pytest.raises(InvalidSession):
        system.sessions.validate(token)


def test_purge_expired(system, clock, token):
    clock.advance(hours=25)
    assert system.sessions.purge_expired() == 1
    assert system.sessions.purge_expired() == 0


def test_record_biometric_flags_session(system, token):
    assert system.sessions.validate(token).biometric_verified is False
    system.record_biometric(token, True)
    assert system.sessions.validate(token).biometric_verified is True


def test_seeded_roles(seeded):
    assert seeded.authenticate("11111111", "admin123").role == "admin"
    assert seeded.authenticate("22222222", "agent123").role == "agent"
    assert seeded.authenticate("12345678", "password123").role == "voter"


def test_expired_sessions_are_swept_on_later_logins(settings, clock):
    vs = VotingSystem(replace(settings, session_purge_interval=10), clock=clock)
    vs.identities.register(VOTER_NATIONAL_ID, VOTER_PASSWORD, "Val", "One",
                           "val.one@example.com", verified=True)
    for _ in range(9):
        vs.sessions.authenticate(VOTER_NATIONAL_ID, VOTER_PASSWORD)
    assert len(vs.sessions._sessions) == 9

    clock.advance(hours=48)
    fresh = vs.sessions.authenticate(VOTER_NATIONAL_ID, VOTER_PASSWORD).token

    # none of the stale tokens were presented again
    assert len(vs.sessions._sessions) == 1
    assert vs.sessions.validate(fresh).identity_id


def test_sweep_keeps_live_sessions(system, clock, token):
    clock.advance(hours=1)
    assert system.sessions.purge_expired() == 0
    assert system.sessions.validate(token).identity_id == "V1"


def test_lookup_by_national_id(system):
    assert system.identities.by_national_id(VOTER_NATIONAL_ID).id == "V1"
    assert system.identities.by_national_id("00000000") is None

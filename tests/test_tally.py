import pytest

from votecore.errors import ElectionNotFound, ReceiptNotFound

from conftest import add_voters, make_election


def test_results_with_no_votes_are_zero(system):
    results = system.results_for("E1")
    assert [(r.candidate_id, r.votes, r.percentage) for r in results] == [
        ("A", 0, 0.0), ("B", 0, 0.0),
    ]


def test_results_unknown_election(system):
    with pytest.raises(ElectionNotFound):
        system.results_for("nope")


def test_percentages_close_to_100_for_uneven_split(system, clock):
    system.catalog.add(make_election("E3", ["P", "Q", "R"], clock()))
    tokens = add_voters(system, 7)
    for t, cid in zip(tokens, "PPQQQRR"):
        system.cast_vote(t, "E3", cid)

    results = system.results_for("E3")
    assert [r.votes for r in results] == [2, 3, 2]
    assert abs(sum(r.percentage for r in results) - 100.0) <= 0.01
    assert results[1].percentage == pytest.approx(300 / 7)


def test_export_tally_rounds_and_names_candidates(system, clock):
    system.catalog.add(make_election("E3", ["P", "Q", "R"], clock()))
    tokens = add_voters(system, 3)
    for t, cid in zip(tokens, "PQR"):
        system.cast_vote(t, "E3", cid)

    rows = system.export_tally("E3")
    assert [(r.candidate_name, r.party, r.votes, r.percentage) for r in rows] == [
        ("Candidate P", "Party P", 1, 33.33),
        ("Candidate Q", "Party Q", 1, 33.33),
        ("Candidate R", "Party R", 1, 33.33),
    ]


def test_audit_trail_chains_votes_in_order(system):
    tokens = add_voters(system, 4)
    receipts = [system.cast_vote(t, "E1", "A") for t in tokens]

    trail = system.audit_trail("E1")
    assert trail.hash_chain_valid is True
    assert trail.total_votes == 4
    assert [e.vote_id for e in trail.audit_trail] == [r.vote_id for r in receipts]
    assert [e.sequence for e in trail.audit_trail] == [1, 2, 3, 4]
    assert trail.audit_trail[0].previous_hash is None
    for prev, cur in zip(trail.audit_trail, trail.audit_trail[1:]):
        assert cur.previous_hash == prev.ballot_hash


def test_audit_trail_detects_altered_vote(system):
    tokens = add_voters(system, 3)
    receipts = [system.cast_vote(t, "E1", "A") for t in tokens]

    # simulate tampering with the stored record underneath the ledger
    target = receipts[1].vote_id
    system.ledger._votes[target] = system.ledger._votes[target].model_copy(
        update={"candidate_id": "B"}
    )
    assert system.audit_trail("E1").hash_chain_valid is False


def test_verify_receipt(system, token):
    receipt = system.cast_vote(token, "E1", "B")
    check = system.verify_receipt(receipt.vote_id)
    assert check.verified is True
    assert check.ballot_hash == receipt.ballot_hash
    assert check.election_title == "Election E1"

    with pytest.raises(ReceiptNotFound):
        system.verify_receipt("vote_missing")


def test_election_details_timeline(system, clock):
    tokens = add_voters(system, 5)
    system.cast_vote(tokens[0], "E1", "A")
    system.cast_vote(tokens[1], "E1", "B")
    clock.advance(hours=2, minutes=10)
    system.cast_vote(tokens[2], "E1", "A")
    system.cast_vote(tokens[3], "E1", "A")

    details = system.tally.election_details("E1")
    assert details.total_votes == 4
    assert [p.count for p in details.vote_timeline] == [2, 2]
    assert details.vote_timeline[1].hour.hour == 10


def test_statistics(seeded):
    tokens = {
        nid: seeded.authenticate(nid, pw).token
        for nid, pw in [("12345678", "password123"), ("87654321", "mypassword"),
                        ("55443322", "kenya2027")]
    }
    seeded.cast_vote(tokens["12345678"], "election_2027_presidential", "candidate_1")
    seeded.cast_vote(tokens["12345678"], "election_2027_governor_nairobi", "gov_candidate_2")
    seeded.cast_vote(tokens["87654321"], "election_2027_presidential", "candidate_2")
    seeded.cast_vote(tokens["55443322"], "election_2027_presidential", "candidate_2")
    seeded.catalog.set_status("election_2027_mca_kilimani", "completed")

    stats = seeded.tally.statistics()
    assert stats.total_registered_voters == 5
    assert stats.total_votes_cast == 4
    assert stats.turnout_percentage == 60.0
    assert stats.elections_by_status.active == 5
    assert stats.elections_by_status.completed == 1
    assert stats.votes_by_election["election_2027_presidential"] == 3
    assert stats.votes_by_election["election_2027_senator_nairobi"] == 0
    assert stats.votes_by_county == {"Nairobi": 3, "Mombasa": 1}


def test_turnout_ignores_votes_from_admins_and_agents(system, token):
    for national_id, role in [("50000001", "admin"), ("50000002", "agent")]:
        system.identities.register(national_id, "staff-pass", "Staff", role.title(),
                                   f"{role}@example.com", role=role, verified=True)
        staff = system.authenticate(national_id, "staff-pass").token
        system.cast_vote(staff, "E1", "B")
    system.cast_vote(token, "E1", "A")

    stats = system.tally.statistics()
    assert stats.total_registered_voters == 1
    assert stats.total_votes_cast == 3
    assert stats.turnout_percentage == 100.0


def test_turnout_counts_each_voter_once(system, token, clock):
    system.catalog.add(make_election("E2", ["X"], clock()))
    add_voters(system, 3)
    system.cast_vote(token, "E1", "A")
    system.cast_vote(token, "E2", "X")

    stats = system.tally.statistics()
    assert stats.total_votes_cast == 2
    assert stats.turnout_percentage == 25.0

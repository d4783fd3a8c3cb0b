from datetime import datetime, timedelta, timezone

from conftest import auth, create_user, fetch_match, fetch_user, mutual_match, staked_match, update_match

from bartr.database.core.expiry import find_expired_matches, handle_expired_match, sweep_expired_matches
from bartr.jobs import expire_matches


def past():
    return datetime.now(timezone.utc) - timedelta(days=1)


def one_sided_expired_match(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    match_id = staked_match(client, alice, bob)
    client.post(f"/api/matches/{match_id}/submit", json={"content": "done"}, headers=auth(alice))
    update_match(match_id, project_end_date=past())
    return match_id, alice, bob


def test_sweep_refunds_submitter_and_forfeits_other_stake(client):
    match_id, alice, bob = one_sided_expired_match(client)

    assert [str(m) for m in find_expired_matches()] == [match_id]

    result = sweep_expired_matches()
    assert result == {"success": True, "processed": [match_id], "failed": [], "total_expired": 1}

    assert fetch_user(alice).credits == 50
    assert fetch_user(bob).credits == 40
    assert fetch_match(match_id).status == "expired"


def test_swept_match_is_not_swept_again(client):
    match_id, alice, _ = one_sided_expired_match(client)
    sweep_expired_matches()

    second = sweep_expired_matches()
    assert second["total_expired"] == 0
    assert second["processed"] == []
    assert fetch_user(alice).credits == 50


def test_only_one_sided_past_deadline_matches_qualify(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    carol = create_user("Carol", credits=50)
    dave = create_user("Dave", credits=50)
    erin = create_user("Erin", credits=50)

    nobody_submitted = staked_match(client, alice, bob)
    update_match(nobody_submitted, project_end_date=past())

    both_submitted = staked_match(client, carol, dave)
    update_match(both_submitted, project_end_date=past(), project_submitted_user1=True, project_submitted_user2=True)

    not_due = staked_match(client, alice, erin)
    update_match(not_due, project_submitted_user1=True)

    chat_locked = mutual_match(client, bob, erin)
    update_match(chat_locked, project_end_date=past(), project_submitted_user2=True)

    assert find_expired_matches() == []


def test_explicit_reference_time(client):
    match_id, _, _ = one_sided_expired_match(client)
    update_match(match_id, project_end_date=datetime(2030, 1, 10, tzinfo=timezone.utc))

    assert find_expired_matches(now=datetime(2030, 1, 1, tzinfo=timezone.utc)) == []
    assert len(find_expired_matches(now=datetime(2030, 1, 11, tzinfo=timezone.utc))) == 1


def test_handler_rejects_settled_match(client):
    match_id, _, _ = one_sided_expired_match(client)
    handle_expired_match(match_id=fetch_match(match_id).id)

    result = sweep_expired_matches()
    assert result["total_expired"] == 0


def test_sweep_records_failures_and_continues(client, monkeypatch):
    match_id, _, _ = one_sided_expired_match(client)

    from bartr.database.core import expiry

    def broken(match_id):
        raise RuntimeError("lock timeout")

    monkeypatch.setattr(expiry, "handle_expired_match", broken)
    result = expiry.sweep_expired_matches()
    assert result["success"] is False
    assert result["processed"] == []
    assert result["failed"] == [{"matchId": match_id, "error": "lock timeout"}]
    assert fetch_match(match_id).status == "active"


def test_job_endpoint_requires_secret(client):
    one_sided_expired_match(client)

    assert client.post("/api/jobs/expire-matches").status_code == 401
    assert client.post("/api/jobs/expire-matches", headers={"X-Job-Secret": "wrong"}).status_code == 401

    response = client.post("/api/jobs/expire-matches", headers={"X-Job-Secret": "job-secret"})
    assert response.status_code == 200
    assert response.json()["total_expired"] == 1


def test_cli_runs_the_sweep(client, capsys):
    match_id, _, _ = one_sided_expired_match(client)

    assert expire_matches.main([]) == 0
    assert match_id in capsys.readouterr().out
    assert fetch_match(match_id).status == "expired"

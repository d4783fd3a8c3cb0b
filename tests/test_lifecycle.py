from uuid import uuid4

from conftest import auth, create_user, fetch_match, fetch_user, mutual_match, staked_match


def stake(client, match_id, user_id):
    return client.post(f"/api/matches/{match_id}/stake", headers=auth(user_id))


def submit(client, match_id, user_id, content):
    return client.post(f"/api/matches/{match_id}/submit", json={"content": content}, headers=auth(user_id))


def confirm(client, match_id, user_id):
    return client.post(f"/api/matches/{match_id}/confirm", headers=auth(user_id))


def test_happy_path_settles_with_bonus(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    match_id = mutual_match(client, alice, bob)
    assert fetch_match(match_id).stake_amount == 10

    first = stake(client, match_id, alice)
    assert first.status_code == 200
    assert first.json()["balance"] == 40
    assert first.json()["chatEnabled"] is False
    assert fetch_match(match_id).has_staked(alice) is True

    second = stake(client, match_id, bob)
    assert second.json()["balance"] == 40
    assert second.json()["chatEnabled"] is True

    assert submit(client, match_id, alice, "X").json()["bothSubmitted"] is False
    assert submit(client, match_id, bob, "Y").json()["bothSubmitted"] is True

    settled = confirm(client, match_id, alice)
    assert settled.status_code == 200
    assert settled.json()["balances"] == {str(alice): 58, str(bob): 58}

    match = fetch_match(match_id)
    assert match.status == "completed"
    assert match.completed_on is not None
    assert fetch_user(alice).credits == 58
    assert fetch_user(bob).credits == 58


def test_chat_enabled_only_after_both_stakes(client):
    alice = create_user("Alice", credits=20)
    bob = create_user("Bob", credits=20)
    match_id = mutual_match(client, alice, bob)

    stake(client, match_id, bob)
    match = fetch_match(match_id)
    assert match.is_chat_enabled is False
    assert match.both_staked is False

    stake(client, match_id, alice)
    match = fetch_match(match_id)
    assert match.is_chat_enabled is True
    assert match.both_staked is True


def test_insufficient_balance_leaves_everything_untouched(client):
    alice = create_user("Alice", credits=5)
    bob = create_user("Bob", credits=50)
    match_id = mutual_match(client, alice, bob)

    response = stake(client, match_id, alice)
    assert response.status_code == 400
    assert response.json()["error"] == "insufficient_credits"
    assert response.json()["details"] == {"message": "Insufficient credits", "balance": 5, "required": 10}

    assert fetch_user(alice).credits == 5
    match = fetch_match(match_id)
    assert match.has_staked(alice) is False
    assert match.is_chat_enabled is False


def test_staking_twice_is_rejected(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    match_id = mutual_match(client, alice, bob)

    stake(client, match_id, alice)
    again = stake(client, match_id, alice)
    assert again.status_code == 409
    assert fetch_user(alice).credits == 40


def test_stake_requires_participant_and_existing_match(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    mallory = create_user("Mallory", credits=50)
    match_id = mutual_match(client, alice, bob)

    assert stake(client, match_id, mallory).status_code == 403
    assert stake(client, uuid4(), alice).status_code == 404
    assert fetch_user(mallory).credits == 50


def test_confirm_before_both_submissions_mutates_nothing(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    match_id = staked_match(client, alice, bob)
    submit(client, match_id, alice, "X")

    response = confirm(client, match_id, alice)
    assert response.status_code == 409
    assert response.json()["error"] == "both users must submit first"

    assert fetch_user(alice).credits == 40
    assert fetch_user(bob).credits == 40
    assert fetch_match(match_id).status == "active"


def test_settlement_runs_once(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    match_id = staked_match(client, alice, bob)
    submit(client, match_id, alice, "X")
    submit(client, match_id, bob, "Y")

    assert confirm(client, match_id, bob).status_code == 200
    again = confirm(client, match_id, alice)
    assert again.status_code == 409
    assert again.json()["error"] == "already_settled"
    assert fetch_user(alice).credits == 58


def test_submit_requires_unlocked_chat_and_content(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    match_id = mutual_match(client, alice, bob)

    locked = submit(client, match_id, alice, "X")
    assert locked.status_code == 409
    assert locked.json()["error"] == "chat_locked"

    stake(client, match_id, alice)
    stake(client, match_id, bob)
    blank = submit(client, match_id, alice, "   ")
    assert blank.status_code == 400
    assert fetch_match(match_id).project_submitted_user1 is False
    assert fetch_match(match_id).project_submitted_user2 is False


def test_resubmission_replaces_content(client):
    alice = create_user("Alice", credits=50)
    bob = create_user("Bob", credits=50)
    match_id = staked_match(client, alice, bob)

    submit(client, match_id, alice, "draft")
    submit(client, match_id, alice, "https://example.com/final")

    submissions = client.get(f"/api/matches/{match_id}/submissions", headers=auth(bob)).json()
    assert len(submissions) == 1
    assert submissions[0]["user_id"] == str(alice)
    assert submissions[0]["content"] == "https://example.com/final"


def test_match_listing_includes_partner(client):
    alice = create_user("Alice", credits=50, offered=["Python"])
    bob = create_user("Bob", credits=50, offered=["Design"])
    match_id = mutual_match(client, alice, bob)

    listed = client.get("/api/matches", headers=auth(alice)).json()
    assert [m["id"] for m in listed] == [match_id]
    assert listed[0]["partner"]["id"] == str(bob)
    assert listed[0]["partner"]["skillsOffered"] == ["Design"]

    detail = client.get(f"/api/matches/{match_id}", headers=auth(bob)).json()
    assert detail["partner"]["name"] == "Alice"

from uuid import uuid4

from conftest import auth, create_user, fetch_match, mutual_match

from bartr.database.config.config import settings
from bartr.database.daos.swipe_dao import SwipeDao
from bartr.database.daos.user_dao import UserDao
from bartr.database.entities.matches import Match
from bartr.database.entities.swipes import Swipe
from bartr.database.helpers.transactionManagement import SessionFactory


def swipe(client, actor, target, direction="like"):
    return client.post("/api/swipe", json={"swipedUserId": str(target), "direction": direction}, headers=auth(actor))


def count_matches():
    session = SessionFactory()
    try:
        return session.query(Match).count()
    finally:
        session.close()


def stored_swipes(swiper, target):
    session = SessionFactory()
    try:
        return [
            row.direction
            for row in session.query(Swipe).filter(Swipe.swiper_id == swiper, Swipe.swiped_user_id == target)
        ]
    finally:
        session.close()


def test_mutual_like_creates_one_canonical_match(client):
    alice = create_user("Alice")
    bob = create_user("Bob")

    first = swipe(client, alice, bob)
    assert first.status_code == 200
    assert first.json()["matchCreated"] is False

    second = swipe(client, bob, alice)
    body = second.json()
    assert body["success"] is True
    assert body["matchCreated"] is True

    user1, user2 = sorted([str(alice), str(bob)])
    assert body["match"]["user1_id"] == user1
    assert body["match"]["user2_id"] == user2
    assert body["match"]["status"] == "active"
    assert body["match"]["stake_amount"] == settings.STAKE_AMOUNT
    assert body["match"]["is_chat_enabled"] is False
    assert count_matches() == 1


def test_repeated_likes_do_not_duplicate_the_match(client):
    alice = create_user("Alice")
    bob = create_user("Bob")
    mutual_match(client, alice, bob)

    again = swipe(client, alice, bob)
    assert again.json()["matchCreated"] is False
    assert again.json()["match"] is not None
    assert count_matches() == 1


def test_repeated_swipe_keeps_one_record_with_latest_direction(client):
    alice = create_user("Alice")
    bob = create_user("Bob")

    swipe(client, alice, bob, "like")
    swipe(client, alice, bob, "like")
    swipe(client, alice, bob, "skip")

    assert stored_swipes(alice, bob) == ["skip"]


def test_swipe_inserted_concurrently_is_updated_in_place(client, monkeypatch):
    alice = create_user("Alice")
    bob = create_user("Bob")
    swipe(client, alice, bob, "like")

    # The first lookup misses the row, as if another transaction had just inserted it.
    original = SwipeDao.fetchSwipe
    misses = []

    def stale_fetch(self, session, swiper_id, swiped_user_id):
        if not misses:
            misses.append((swiper_id, swiped_user_id))
            return None
        return original(self, session, swiper_id, swiped_user_id)

    monkeypatch.setattr(SwipeDao, "fetchSwipe", stale_fetch)

    response = swipe(client, alice, bob, "skip")
    assert response.status_code == 200
    assert response.json()["matchCreated"] is False
    assert misses == [(alice, bob)]
    assert stored_swipes(alice, bob) == ["skip"]


def test_interest_locks_both_members(client, monkeypatch):
    alice = create_user("Alice")
    bob = create_user("Bob")
    carol = create_user("Carol")

    original = UserDao.fetchUsersForUpdate
    locked = []

    def recording_lock(self, session, user_ids):
        user_ids = list(user_ids)
        locked.append(set(user_ids))
        return original(self, session, user_ids)

    monkeypatch.setattr(UserDao, "fetchUsersForUpdate", recording_lock)

    swipe(client, alice, bob)
    client.post("/api/requests/send", json={"receiverId": str(carol)}, headers=auth(alice))
    assert locked == [{alice, bob}, {alice, carol}]


def test_skip_does_not_match(client):
    alice = create_user("Alice")
    bob = create_user("Bob")
    swipe(client, alice, bob, "like")

    response = swipe(client, bob, alice, "skip")
    assert response.json()["matchCreated"] is False
    assert count_matches() == 0


def test_swipe_validation(client):
    alice = create_user("Alice")

    self_target = swipe(client, alice, alice)
    assert self_target.status_code == 400

    missing = client.post("/api/swipe", json={"direction": "like"}, headers=auth(alice))
    assert missing.status_code == 400

    bad_direction = client.post(
        "/api/swipe", json={"swipedUserId": str(uuid4()), "direction": "maybe"}, headers=auth(alice)
    )
    assert bad_direction.status_code == 400
    assert bad_direction.json()["error"] == "Invalid request body"

    unknown = swipe(client, alice, uuid4())
    assert unknown.status_code == 404


def test_swipe_requires_authentication(client):
    response = client.post("/api/swipe", json={"swipedUserId": str(uuid4()), "direction": "like"})
    assert response.status_code == 401
    assert response.json() == {"error": "Missing Token"}


def test_swipe_candidates_exclude_already_swiped(client):
    alice = create_user("Alice")
    bob = create_user("Bob")
    carol = create_user("Carol")
    swipe(client, alice, bob, "skip")

    response = client.get("/api/swipe", headers=auth(alice))
    ids = {user["id"] for user in response.json()}
    assert ids == {str(carol)}


def test_request_mode_like_opens_request_and_accept_creates_match(client, monkeypatch):
    monkeypatch.setattr(settings, "SWIPE_MATCH_MODE", "request")
    alice = create_user("Alice")
    bob = create_user("Bob")

    response = swipe(client, alice, bob)
    assert response.json()["pendingRequestCreated"] is True
    assert count_matches() == 0

    duplicate = swipe(client, alice, bob)
    assert duplicate.json()["pendingRequestCreated"] is False

    incoming = client.get("/api/requests", params={"type": "incoming"}, headers=auth(bob)).json()
    assert len(incoming) == 1
    assert incoming[0]["sender"]["id"] == str(alice)

    outgoing = client.get("/api/requests", params={"type": "pending"}, headers=auth(alice)).json()
    assert outgoing[0]["receiver"]["id"] == str(bob)

    accepted = client.post(
        "/api/requests", json={"requestId": incoming[0]["id"], "action": "accept"}, headers=auth(bob)
    )
    assert accepted.status_code == 200
    body = accepted.json()
    assert body["status"] == "accepted"
    assert body["matchCreated"] is True

    match = fetch_match(body["match"]["id"])
    assert (str(match.user1_id), str(match.user2_id)) == tuple(sorted([str(alice), str(bob)]))
    assert client.get("/api/requests", params={"type": "incoming"}, headers=auth(bob)).json() == []


def test_resolve_request_rules(client):
    alice = create_user("Alice")
    bob = create_user("Bob")
    carol = create_user("Carol")

    sent = client.post("/api/requests/send", json={"receiverId": str(bob)}, headers=auth(alice))
    assert sent.status_code == 200
    request_id = sent.json()["request"]["id"]

    not_receiver = client.post("/api/requests", json={"requestId": request_id, "action": "accept"}, headers=auth(carol))
    assert not_receiver.status_code == 403

    rejected = client.post("/api/requests", json={"requestId": request_id, "action": "reject"}, headers=auth(bob))
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["match"] is None

    again = client.post("/api/requests", json={"requestId": request_id, "action": "accept"}, headers=auth(bob))
    assert again.status_code == 409
    assert count_matches() == 0

    unknown = client.post("/api/requests", json={"requestId": str(uuid4()), "action": "accept"}, headers=auth(bob))
    assert unknown.status_code == 404


def test_accepting_request_for_matched_pair_reuses_match(client):
    alice = create_user("Alice")
    bob = create_user("Bob")
    match_id = mutual_match(client, alice, bob)

    sent = client.post("/api/requests/send", json={"receiverId": str(alice)}, headers=auth(bob))
    accepted = client.post(
        "/api/requests", json={"requestId": sent.json()["request"]["id"], "action": "accept"}, headers=auth(alice)
    )
    assert accepted.json()["matchCreated"] is False
    assert accepted.json()["match"]["id"] == match_id
    assert count_matches() == 1


def test_list_requests_rejects_unknown_type(client):
    alice = create_user("Alice")
    response = client.get("/api/requests", params={"type": "archived"}, headers=auth(alice))
    assert response.status_code == 400

from conftest import auth, create_user

from bartr.api.errors import DomainPrecondition, InsufficientCredits, NotFound


def test_error_envelope_shape():
    assert NotFound().to_dict() == {"error": "Not found"}
    assert DomainPrecondition("chat_locked", "stake first").to_dict() == {
        "error": "chat_locked",
        "details": "stake first",
    }
    assert InsufficientCredits().status_code == 400
    assert InsufficientCredits().error == "insufficient_credits"
    assert DomainPrecondition().status_code == 409


def test_request_validation_errors_use_envelope(client):
    alice = create_user("Alice")
    response = client.post("/api/requests", json={"action": "accept"}, headers=auth(alice))
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request body"
    assert {"field": "requestId", "reason": "Field required"} in body["details"]


def test_malformed_path_id_is_a_bad_request(client):
    alice = create_user("Alice")
    response = client.get("/api/matches/not-a-uuid", headers=auth(alice))
    assert response.status_code == 400


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}

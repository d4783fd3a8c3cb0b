from uuid import uuid4

from fastapi.testclient import TestClient
from conftest import auth, create_user

from bartr.main import app


def register(client, email="ada@example.com", password="secret123", name="Ada"):
    return client.post("/register", json={"name": name, "email": email, "password": password})


def test_register_login_and_current_user(client):
    registered = register(client)
    assert registered.status_code == 200
    assert registered.json()["user"]["credits"] == 0

    login = client.post("/login", json={"email": "ADA@example.com", "password": "secret123"})
    assert login.status_code == 200
    assert "token" in login.cookies
    assert login.json()["user_details"]["email"] == "ada@example.com"

    me = client.get("/get_user")
    assert me.status_code == 200
    assert me.json()["name"] == "Ada"

    client.post("/logout")
    client.cookies.clear()
    assert client.get("/get_user").status_code == 401


def test_register_rejects_duplicates_and_weak_passwords(client):
    register(client)
    duplicate = register(client)
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "Email already registered"

    weak = register(client, email="bob@example.com", password="short")
    assert weak.status_code == 400


def test_login_with_wrong_password(client):
    register(client)
    response = client.post("/login", json={"email": "ada@example.com", "password": "wrong-pass1"})
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect email or password"}


def test_invalid_token_is_rejected():
    client = TestClient(app)
    response = client.get("/api/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_profile_round_trip(client):
    alice = create_user("Alice")
    payload = {
        "userId": str(alice),
        "name": "Alice Liddell",
        "bio": "Illustrator",
        "location": "Oxford",
        "timezone": "Europe/London",
        "offeredSkills": ["Drawing", "Watercolor"],
        "neededSkills": ["Python"],
    }
    saved = client.post("/api/saveProfile", json=payload, headers=auth(alice))
    assert saved.status_code == 200

    profile = client.get("/api/profile", headers=auth(alice)).json()
    assert profile["name"] == "Alice Liddell"
    assert profile["bio"] == "Illustrator"
    assert profile["location"] == "Oxford"
    assert profile["timezone"] == "Europe/London"
    assert profile["skillsOffered"] == ["Drawing", "Watercolor"]
    assert profile["skillsNeeded"] == ["Python"]


def test_cannot_save_someone_elses_profile(client):
    alice = create_user("Alice")
    bob = create_user("Bob")
    response = client.post("/api/saveProfile", json={"userId": str(bob), "name": "Hacked"}, headers=auth(alice))
    assert response.status_code == 403


def test_save_profile_requires_name(client):
    alice = create_user("Alice")
    response = client.post("/api/saveProfile", json={"userId": str(alice), "name": " "}, headers=auth(alice))
    assert response.status_code == 400


def test_needed_skills_must_be_a_list_of_strings(client):
    alice = create_user("Alice")

    bad = client.post("/api/saveNeededSkills", json={"skillsNeeded": "Python"}, headers=auth(alice))
    assert bad.status_code == 400

    good = client.post("/api/saveNeededSkills", json={"skillsNeeded": ["Python", " python ", "SQL"]}, headers=auth(alice))
    assert good.json()["profile"]["skillsNeeded"] == ["Python", "SQL"]


def test_browse_users_excludes_self(client):
    alice = create_user("Alice", offered=["Cooking"])
    bob = create_user("Bob", offered=["Guitar"], needed=["Cooking"])

    users = client.get("/api/browse-users", headers=auth(alice)).json()
    assert [u["id"] for u in users] == [str(bob)]
    assert users[0]["skillsOffered"] == ["Guitar"]
    assert users[0]["skillsNeeded"] == ["Cooking"]
    assert "credits" not in users[0]


def test_wallet_balance(client):
    alice = create_user("Alice", credits=12)
    assert client.get("/api/wallet", headers=auth(alice)).json() == {"balance": 12}


def test_unknown_user_in_token(client):
    response = client.get("/api/wallet", headers=auth(uuid4()))
    assert response.status_code == 404

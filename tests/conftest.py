import os
from uuid import UUID

# Settings are read at import time, so the test environment is pinned before
# anything from `bartr` is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INIT_MODE"] = "test"
os.environ["API_KEY"] = ""
os.environ["JOB_SECRET"] = "job-secret"
os.environ["SWIPE_MATCH_MODE"] = "mutual"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

import bartr.database.entities  # noqa: F401,E402
from bartr.api.events import broker  # noqa: E402
from bartr.api.utils import create_access_token  # noqa: E402
from bartr.database.config.connection_engine import connection_engine, metadata  # noqa: E402
from bartr.database.entities.matches import Match  # noqa: E402
from bartr.database.entities.user import User  # noqa: E402
from bartr.database.helpers.transactionManagement import SessionFactory  # noqa: E402
from bartr.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def database():
    metadata.create_all(connection_engine)
    yield
    metadata.drop_all(connection_engine)


@pytest.fixture(autouse=True)
def clean_broker():
    broker.subscribers.clear()
    yield
    broker.subscribers.clear()


@pytest.fixture
def client():
    return TestClient(app)


def create_user(name, credits=0, offered=None, needed=None, bio=None):
    """Insert a member directly and return their id."""
    session = SessionFactory()
    try:
        user = User(user_name=name, email=f"{name.lower()}@example.com", password="not-a-hash", credits=credits)
        user.skills_offered = list(offered or [])
        user.skills_needed = list(needed or [])
        user.bio = bio
        session.add(user)
        session.commit()
        return user.id
    finally:
        session.close()


def fetch_user(user_id):
    session = SessionFactory()
    try:
        return session.get(User, user_id)
    finally:
        session.close()


def auth(user_id):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id)})}"}


def update_match(match_id, **fields):
    """Force columns of a match (deadlines, flags) for scenario setup."""
    session = SessionFactory()
    try:
        match = session.get(Match, UUID(str(match_id)))
        for key, value in fields.items():
            setattr(match, key, value)
        session.commit()
    finally:
        session.close()


def mutual_match(client, first, second):
    """Both members like each other through the API; returns the match id."""
    client.post("/api/swipe", json={"swipedUserId": str(first), "direction": "like"}, headers=auth(second))
    response = client.post("/api/swipe", json={"swipedUserId": str(second), "direction": "like"}, headers=auth(first))
    return response.json()["match"]["id"]


def staked_match(client, first, second):
    match_id = mutual_match(client, first, second)
    client.post(f"/api/matches/{match_id}/stake", headers=auth(first))
    client.post(f"/api/matches/{match_id}/stake", headers=auth(second))
    return match_id


def fetch_match(match_id):
    session = SessionFactory()
    try:
        return session.get(Match, UUID(str(match_id)))
    finally:
        session.close()

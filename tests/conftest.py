"""Shared fixtures: a small catalog, user records and an in-memory database."""

import os

# Must be set before habit_farm is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from habit_farm.core import UserRecord, UserStore, get_session
from habit_farm.game import build_catalog
from habit_farm.main import app

CROPS = [
    {"id": "wheat", "name": "Wheat", "growthTime": 3, "harvestAmount": 5},
    {"id": "egg", "name": "Egg", "growthTime": 2, "harvestAmount": 2},
    {"id": "carrot", "name": "Carrot", "growthTime": 4, "harvestAmount": 4},
]

RECIPES = [
    {
        "id": "pancake", "name": "Pancake", "icon": "P", "difficulty": 2,
        "ingredients": [{"cropId": "wheat", "quantity": 2}, {"cropId": "egg", "quantity": 1}],
        "hints": ["A breakfast classic."],
        "clues": ["Something from the coop.", "Flour comes from grain.", "Flip it."],
    },
    {
        "id": "bread", "name": "Bread", "icon": "B", "difficulty": 1,
        "ingredients": [{"cropId": "wheat", "quantity": 3}],
        "hints": ["Freshly baked."],
    },
]

NOW = datetime(2026, 3, 10, 9, 30)


@pytest.fixture
def catalog():
    return build_catalog(CROPS, RECIPES)


@pytest.fixture
def record() -> UserRecord:
    return UserRecord(username="farmer", password_hash="not-a-real-hash", created_at=NOW, last_login=NOW)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def store(session) -> UserStore:
    return UserStore(session)


@pytest.fixture
def client(db_engine):
    """Create a test client backed by the in-memory database."""
    def override_session():
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client) -> dict:
    """Register and log in a user, returning its Authorization header."""
    client.post("/api/register", json={"username": "farmer", "password": "secret123"})
    response = client.post("/api/login", json={"username": "farmer", "password": "secret123"})
    return {"Authorization": f"Bearer {response.json()['token']}"}

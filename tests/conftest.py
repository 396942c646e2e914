"""
Shared fixtures: an in-memory Mongo (mongomock-motor), repositories and an
authenticated TestClient.
"""
from __future__ import annotations

import asyncio
import os

# Cheap bcrypt and quiet logs for tests; must be set before settings load
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "admin-secret")

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from accounts_api.application.services.auth_service import ensure_admin_user
from accounts_api.domain.models.user import User
from accounts_api.domain.schemas.user import UserCreate
from accounts_api.infrastructure.database import get_db
from accounts_api.infrastructure.repositories.user_repository import MongoUserRepository
from accounts_api.main import app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def db():
    return AsyncMongoMockClient()["accounts_test"]


@pytest.fixture()
def repo(db):
    return MongoUserRepository(db)


@pytest.fixture()
def actor():
    return User(id=ObjectId(), name="Admin", email="admin@example.com", role="admin")


def _user_create(**overrides) -> UserCreate:
    data = {
        "name": "Nguyen Van A",
        "email": "nguyenvana@example.com",
        "password": "password123",
        "phone": "0912345678",
        "age": 25,
        "gender": "male",
        "address": "123 Main St, City, Country",
        "role": "user",
    }
    data.update(overrides)
    return UserCreate(**data)


@pytest.fixture()
def make_user_create():
    """Factory for valid create payloads; keyword overrides replace defaults."""
    return _user_create


@pytest.fixture()
def client(db, repo):
    """TestClient bound to the mock database, lifespan not started."""
    app.dependency_overrides[get_db] = lambda: db
    asyncio.run(ensure_admin_user(repo))
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(client):
    response = client.post(
        "/api/v1/auth/login",
        json={"username": "admin@example.com", "password": "admin-secret"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}

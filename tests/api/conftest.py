"""Fixtures for endpoint tests; services are replaced with mocks."""

import pytest
from fastapi.testclient import TestClient

from dossier_engine.main import app


@pytest.fixture
def test_client() -> TestClient:
    """Client without lifespan, so no database is initialised."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Reset dependency overrides after each test."""
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def actor_headers() -> dict:
    return {"X-Actor-Id": "investigator-1"}

"""
Pytest configuration and fixtures for Liveboard tests
"""
import os

import pytest

# Must be set before `liveboard.main` is imported (logging/static config is read at import).
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-secret")

TEST_ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


@pytest.fixture
def admin_password() -> str:
    return TEST_ADMIN_PASSWORD


@pytest.fixture
def client():
    """TestClient with the lifespan running, so `app.state.room` is a fresh room per test."""
    from fastapi.testclient import TestClient

    from liveboard.main import app

    with TestClient(app) as c:
        yield c

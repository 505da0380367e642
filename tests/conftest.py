"""
Shared fixtures: an application wired to in-memory SQLite and the in-process
key-value store.
"""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from claimflow.config import Settings
from claimflow.infrastructure.container import ServiceContainer
from claimflow.infrastructure.db.database import Database
from claimflow.main import create_application
from tests.helpers import make_settings, register


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def container(settings) -> ServiceContainer:
    return ServiceContainer(settings)


@pytest.fixture
def app(container):
    return create_application(container=container)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database():
    """Standalone in-memory database for queue tests."""
    db = Database("sqlite:///:memory:")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def admin(client) -> Dict[str, Any]:
    """Registered organization admin: {user, organization, token, refreshToken}."""
    return register(client)

# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Provides a fake database connector so no MongoDB server is needed
# - Provides factories for settings, contexts and test clients
# =============================================================================

import asyncio
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# foodapi.main builds its module-level app from the environment on import

os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/sbfoods_test")

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from datastore.mongo_client import DatabaseConnectionError
from foodapi.config import Settings
from foodapi.context import AppContext
from foodapi.main import create_app


class FakeConnector:
    """In-memory stand-in for MongoConnector."""

    def __init__(self, host="mongo.test:27017", error=None, hang=False):
        self.host = None
        self.error = error
        self.hang = hang
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.handle = MagicMock(name="database")
        self._host = host

    @property
    def is_connected(self):
        return self.host is not None

    @property
    def database(self):
        if not self.is_connected:
            raise DatabaseConnectionError("not connected", code="NOT_CONNECTED")
        return self.handle

    async def connect(self):
        self.connect_calls += 1
        if self.hang:
            await asyncio.Event().wait()
        if self.error is not None:
            raise self.error
        self.host = self._host
        return self.host

    async def disconnect(self, on_closed=None):
        self.disconnect_calls += 1
        self.host = None
        if on_closed is not None:
            on_closed()


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def make_settings():
    """Factory for Settings that ignores any local .env file."""
    def _make(**overrides):
        overrides.setdefault("NODE_ENV", "test")
        return Settings(_env_file=None, **overrides)
    return _make


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def make_context(make_settings):
    """Factory for an AppContext backed by a FakeConnector."""
    def _make(connector=None, **settings_overrides):
        return AppContext(
            settings=make_settings(**settings_overrides),
            database=connector or FakeConnector(),
        )
    return _make


@pytest.fixture
def make_client(make_context):
    """
    Factory for a TestClient around a fresh app.

    The lifespan does not run (no `with` block), so no connect is attempted
    unless a test opts in.
    """
    def _make(context=None, collaborators=None, **settings_overrides):
        context = context or make_context(**settings_overrides)
        app = create_app(context, collaborators=collaborators)
        return TestClient(app, raise_server_exceptions=False)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()

"""Global pytest fixtures and environment overrides.

No test talks to Firebase: the Admin SDK is patched out or replaced by the
in-memory fakes in tests/factories.py.
"""

import os

import pytest
from rtdb_admin.config import Settings, get_settings
from rtdb_admin.observability import configure_logging

from tests.factories import FakeIdentityDirectory, InMemoryStore

TEST_ENV = {
    "FIREBASE_DATABASE_URL": "https://test-project-default-rtdb.firebaseio.com",
    "SERVICE_ACCOUNT_PATH": "serviceAccountKey.json",
}

# Flags read by the CLIs through typer envvars
CLI_ENV_FLAGS = ("DRY_RUN", "FORCE", "ENV_PATH", "GOOGLE_APPLICATION_CREDENTIALS")

os.environ.update(TEST_ENV)


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Reset the environment and the settings cache for every test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    for key in CLI_ENV_FLAGS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    configure_logging("DEBUG")
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def directory():
    return FakeIdentityDirectory()

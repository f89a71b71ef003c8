from contextlib import ExitStack
from unittest.mock import MagicMock, patch

import pytest
from rtdb_admin.domain.exceptions import ScanError, SetupError
from rtdb_admin.domain.schemas import IdentityRecord
from rtdb_admin.scripts.fix_orphan_auths import app
from typer.testing import CliRunner

from tests.factories import FakeIdentityDirectory, InMemoryStore

runner = CliRunner()

MODULE = "rtdb_admin.scripts.fix_orphan_auths"


@pytest.fixture
def store():
    return InMemoryStore({"users": {"u0": {"username": "zero"}}})


@pytest.fixture
def directory():
    return FakeIdentityDirectory(
        [
            [
                IdentityRecord(uid="u0", email="zero@x.com"),
                IdentityRecord(uid="u1", email="a.b@x.com"),
                IdentityRecord(uid="u2"),
            ]
        ]
    )


@pytest.fixture
def mock_firebase(store, directory):
    with ExitStack() as stack:
        firebase_app = stack.enter_context(patch(f"{MODULE}.firebase_app"))
        firebase_app.return_value.__enter__.return_value = MagicMock(name="app")
        firebase_app.return_value.__exit__.return_value = False
        stack.enter_context(
            patch(f"{MODULE}.FirebaseIdentityDirectory", return_value=directory)
        )
        stack.enter_context(patch(f"{MODULE}.RealtimeDatabaseStore", return_value=store))
        yield firebase_app


def test_creates_missing_profiles(mock_firebase, store):
    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert "Orphan auth user: u1 a.b@x.com" in result.output
    assert "Total orphan auth users processed: 2" in result.output
    assert store.data["users"]["u1"]["username"] == "ab"
    assert store.data["users"]["u2"]["username"] == "user_u2"
    assert store.data["users"]["u0"] == {"username": "zero"}
    assert store.data["usernameIndex"]["ab"]["uid"] == "u1"


def test_dry_run_flag(mock_firebase, store):
    result = runner.invoke(app, ["--dry-run"])

    assert result.exit_code == 0, result.output
    assert "[DRY] would create profile for u1 username -> ab" in result.output
    assert store.writes == []


def test_dry_run_from_environment(mock_firebase, store):
    result = runner.invoke(app, [], env={"DRY_RUN": "1"})

    assert result.exit_code == 0, result.output
    assert store.writes == []


def test_write_failures_do_not_fail_the_run(mock_firebase, store):
    store.fail_writes["usernameIndex/ab"] = RuntimeError("network reset")

    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert "failed to create profile for u1" in result.output
    assert "Repair them manually" in result.output
    assert store.data["users"]["u2"]["username"] == "user_u2"


def test_setup_error_exits_before_processing(mock_firebase, store):
    mock_firebase.side_effect = SetupError("Failed to load service account")

    result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "Failed to load service account" in result.output
    assert store.reads == []


def test_scan_error_exits_non_zero(mock_firebase, directory):
    directory.fail_on_page = 0

    result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "Script failed" in result.output


def test_invalid_configuration_exits(mock_firebase):
    result = runner.invoke(app, [], env={"LIST_USERS_PAGE_SIZE": "5000"})

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    mock_firebase.assert_not_called()


def test_unexpected_error_exits_one(mock_firebase, directory):
    directory.list_page = MagicMock(side_effect=RuntimeError("boom"))

    result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "Script failed: boom" in result.output

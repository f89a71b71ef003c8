"""
Firebase App Lifecycle.

Every command opens one named firebase_admin App at start, hands it to the
repositories explicitly and deletes it on exit. Nothing in the package
touches the firebase_admin default app.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import firebase_admin
from firebase_admin import credentials, db
from loguru import logger

from rtdb_admin.config import Settings, get_settings
from rtdb_admin.domain.exceptions import SetupError

APP_NAME = "rtdb-admin"


def load_credentials(settings: Settings) -> credentials.Certificate:
    """
    Load the service account certificate.

    GOOGLE_APPLICATION_CREDENTIALS takes precedence over SERVICE_ACCOUNT_PATH.

    Raises:
        SetupError: If the key file is missing or is not a valid service account.
    """
    path = settings.credentials_path
    if not path.is_file():
        raise SetupError(
            f"Failed to load service account from {path}. Place serviceAccountKey.json "
            "at project root or set GOOGLE_APPLICATION_CREDENTIALS."
        )
    try:
        return credentials.Certificate(str(path))
    except (ValueError, OSError) as e:
        raise SetupError(f"Invalid service account file {path}: {e}") from e


def init_firebase_app(settings: Optional[Settings] = None) -> firebase_admin.App:
    """
    Initialize the named Firebase app bound to the configured database.

    Raises:
        SetupError: If credentials cannot be loaded or the app cannot be created.
    """
    settings = settings or get_settings()
    cred = load_credentials(settings)
    try:
        app = firebase_admin.initialize_app(
            cred, {"databaseURL": settings.FIREBASE_DATABASE_URL}, name=APP_NAME
        )
    except ValueError as e:
        raise SetupError(f"Failed to initialize Firebase app: {e}") from e

    logger.info(
        f"Firebase app initialized | project={app.project_id} "
        f"| database={settings.FIREBASE_DATABASE_URL}"
    )
    return app


def verify_database(app: firebase_admin.App) -> None:
    """
    Perform one shallow read of the database root.

    Surfaces bad credentials or an unreachable database before any record
    is touched.

    Raises:
        SetupError: If the read fails.
    """
    try:
        db.reference("/", app=app).get(shallow=True)
    except Exception as e:
        raise SetupError(f"Realtime Database is unreachable: {e}") from e


@contextmanager
def firebase_app(settings: Optional[Settings] = None) -> Iterator[firebase_admin.App]:
    """Open the Firebase app for the duration of a command."""
    app = init_firebase_app(settings)
    try:
        verify_database(app)
        yield app
    finally:
        firebase_admin.delete_app(app)
        logger.debug("Firebase app deleted")

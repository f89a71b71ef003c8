#!/usr/bin/env python3
"""
Healing Script: Fix Orphan Auth Users.

Finds Firebase Auth users that do not have a users/{uid} record in the
Realtime Database and creates a minimal profile for each:

- username: email local-part (sanitized) or user_<uid prefix>, made unique
  against usernameIndex with a numeric suffix
- displayName: auth display name, else the username
- email: auth email
- friends: {}

It also writes usernameIndex/{username} = {uid, email}.

WARNING: This writes to the Realtime Database. Run with --dry-run first.

Usage:
    python -m rtdb_admin.scripts.fix_orphan_auths [--dry-run]
"""

import typer
from loguru import logger
from pydantic import ValidationError

from rtdb_admin.config import get_settings
from rtdb_admin.domain.exceptions import ScanError, SetupError, StoreError
from rtdb_admin.engine.reconciler import OrphanReconciler
from rtdb_admin.firebase import firebase_app
from rtdb_admin.observability import (
    configure_logging,
    console,
    create_failures_table,
    create_reconciliation_table,
    log_execution_time,
)
from rtdb_admin.repository.identity import FirebaseIdentityDirectory
from rtdb_admin.repository.realtime_db import RealtimeDatabaseStore

app = typer.Typer()


@app.command()
def fix_orphan_auths(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        envvar="DRY_RUN",
        help="Report orphans and the usernames they would get, write nothing",
    ),
):
    """Create missing profiles for Firebase Auth users."""
    configure_logging()
    try:
        settings = get_settings()
    except ValidationError as e:
        logger.critical(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)
    configure_logging(settings.LOG_LEVEL)

    try:
        with firebase_app(settings) as fb:
            reconciler = OrphanReconciler(
                FirebaseIdentityDirectory(fb),
                RealtimeDatabaseStore(fb),
                settings=settings,
                dry_run=dry_run,
            )
            with log_execution_time(logger, "orphan reconciliation", dry_run=dry_run):
                report = reconciler.reconcile()
    except SetupError as e:
        logger.critical(str(e))
        raise typer.Exit(code=1)
    except (ScanError, StoreError) as e:
        logger.critical(f"Script failed: {e}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.critical(f"Script failed: {e}")
        raise typer.Exit(code=1)

    console.print(create_reconciliation_table(report))
    if report.failures:
        console.print(create_failures_table(report))
    if report.needs_repair:
        logger.warning(
            f"{len(report.needs_repair)} profiles were written without a usernameIndex "
            "entry and will not be picked up by a re-run. Repair them manually."
        )


if __name__ == "__main__":
    app()

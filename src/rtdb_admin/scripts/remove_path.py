#!/usr/bin/env python3
"""
Safely remove a path from the Firebase Realtime Database.

Usage:
    python -m rtdb_admin.scripts.remove_path --path=/users --dry-run
    python -m rtdb_admin.scripts.remove_path --path=/users --confirm

Dry-run lists what would be deleted without writing. Actual deletion
requires --confirm (or FORCE=1). The database root is never removed.
"""

import typer
from loguru import logger
from pydantic import ValidationError

from rtdb_admin.config import get_settings
from rtdb_admin.domain.exceptions import SetupError, StoreError
from rtdb_admin.engine.path_removal import PathRemover, RemovalOutcome
from rtdb_admin.firebase import firebase_app
from rtdb_admin.observability import configure_logging, console, create_path_table
from rtdb_admin.repository.realtime_db import RealtimeDatabaseStore, normalize_path

EXIT_NOT_CONFIRMED = 2

app = typer.Typer()


@app.command()
def remove_path(
    path: str = typer.Option("/users", "--path", "-p", help="Database path to remove"),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        envvar="DRY_RUN",
        help="Only list what would be deleted",
    ),
    confirm: bool = typer.Option(
        False, "--confirm", envvar="FORCE", help="Actually delete the path"
    ),
):
    """Delete a Realtime Database subtree behind a dry-run / confirm gate."""
    configure_logging()
    if not normalize_path(path):
        logger.error("Refusing to remove the database root. Pass a non-root --path.")
        raise typer.Exit(code=EXIT_NOT_CONFIRMED)

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.critical(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)
    configure_logging(settings.LOG_LEVEL)

    logger.info(f"Target path: {path}")
    logger.info(f"Dry-run: {dry_run}")

    try:
        with firebase_app(settings) as fb:
            outcome, summary = PathRemover(RealtimeDatabaseStore(fb)).run(
                path, dry_run=dry_run, confirm=confirm
            )
    except SetupError as e:
        logger.critical(str(e))
        raise typer.Exit(code=1)
    except StoreError as e:
        logger.critical(f"Script failed: {e}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.critical(f"Script failed: {e}")
        raise typer.Exit(code=1)

    if summary.sample_keys and outcome != RemovalOutcome.DELETED:
        console.print(create_path_table(summary))

    if outcome == RemovalOutcome.NOT_CONFIRMED:
        logger.error(
            "Not deleting. To delete, re-run with the --confirm flag (or set FORCE=1)."
        )
        logger.error(f"Example: remove-path --path={path} --confirm")
        raise typer.Exit(code=EXIT_NOT_CONFIRMED)


if __name__ == "__main__":
    app()

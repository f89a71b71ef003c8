"""
Gated subtree removal for the Realtime Database.

A path is always inspected first. Deletion only happens when the caller
asked for it explicitly (confirm) and did not ask for a dry run.
"""

from enum import Enum

from loguru import logger

from rtdb_admin.domain.exceptions import StoreError
from rtdb_admin.domain.schemas import PathSummary
from rtdb_admin.repository.realtime_db import ProfileStore, normalize_path

SAMPLE_KEY_LIMIT = 20


class RemovalOutcome(str, Enum):
    """How a remove-path invocation ended."""

    MISSING = "missing"
    DRY_RUN = "dry_run"
    NOT_CONFIRMED = "not_confirmed"
    DELETED = "deleted"


class PathRemover:
    """Inspects and, when confirmed, deletes one database subtree."""

    def __init__(self, store: ProfileStore):
        self.store = store

    def inspect(self, path: str) -> PathSummary:
        """Count the children at path and keep a sample of their keys."""
        keys = self.store.child_keys(normalize_path(path))
        if keys is None:
            logger.info(f"Path does not exist: {path}")
            return PathSummary(path=path, exists=False)

        logger.info(f"Found {len(keys)} children under {path}")
        sample = keys[:SAMPLE_KEY_LIMIT]
        if sample:
            logger.info(f"Sample keys: {', '.join(sample)}")
        return PathSummary(path=path, exists=True, count=len(keys), sample_keys=sample)

    def run(
        self, path: str, dry_run: bool = False, confirm: bool = False
    ) -> tuple[RemovalOutcome, PathSummary]:
        """
        Inspect path and delete it if allowed.

        Raises:
            ValueError: If path points at the database root.
            StoreError: If inspection or deletion fails.
        """
        if not normalize_path(path):
            raise ValueError("Refusing to operate on the database root")

        summary = self.inspect(path)
        if not summary.exists:
            return RemovalOutcome.MISSING, summary

        if dry_run:
            logger.info("Dry-run complete. No data was modified.")
            return RemovalOutcome.DRY_RUN, summary

        if not confirm:
            return RemovalOutcome.NOT_CONFIRMED, summary

        logger.warning(f"Deleting {summary.count} children under {path}")
        try:
            self.store.remove(normalize_path(path))
        except StoreError:
            logger.error(f"Failed to delete path: {path}")
            raise
        logger.success("Delete complete.")
        return RemovalOutcome.DELETED, summary

"""Orphan Auth Reconciler.

Finds Firebase Auth users that have no profile under users/{uid} and
creates a minimal profile plus a usernameIndex entry for each of them.

Example:
    >>> from rtdb_admin.engine.reconciler import OrphanReconciler
    >>> from rtdb_admin.firebase import firebase_app
    >>> from rtdb_admin.repository.identity import FirebaseIdentityDirectory
    >>> from rtdb_admin.repository.realtime_db import RealtimeDatabaseStore
    >>>
    >>> with firebase_app() as app:
    ...     reconciler = OrphanReconciler(
    ...         FirebaseIdentityDirectory(app), RealtimeDatabaseStore(app)
    ...     )
    ...     report = reconciler.reconcile()
    >>> print(report.orphans, report.failed)
"""

import re
from typing import Optional, Set

from loguru import logger

from rtdb_admin.config import Settings, get_settings
from rtdb_admin.domain.exceptions import PerRecordWriteError, UsernameUnavailableError
from rtdb_admin.domain.schemas import (
    IdentityRecord,
    NameIndexEntry,
    Profile,
    ReconciliationReport,
    RecordFailure,
    WriteStage,
)
from rtdb_admin.repository.identity import IdentityDirectory, iter_identities
from rtdb_admin.repository.realtime_db import ProfileStore, join_path

USERNAME_MAX_LENGTH = 30
DEFAULT_USERNAME = "user"
FALLBACK_PREFIX = "user_"
FALLBACK_UID_CHARS = 6

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9_]")


def sanitize_username(value: Optional[str]) -> Optional[str]:
    """
    Lower-case, keep only [a-z0-9_], cap at 30 characters.

    Returns:
        The sanitized name, or None if nothing is left.
    """
    if not value:
        return None
    cleaned = _DISALLOWED_CHARS.sub("", str(value).lower())[:USERNAME_MAX_LENGTH]
    return cleaned or None


def derive_username(record: IdentityRecord) -> str:
    """Email local-part if it survives sanitizing, else user_<first 6 of uid>."""
    derived = None
    if record.email:
        derived = sanitize_username(record.email.split("@")[0])
    return derived or FALLBACK_PREFIX + record.uid[:FALLBACK_UID_CHARS]


def build_profile(record: IdentityRecord, username: str) -> Profile:
    return Profile(
        username=username,
        display_name=record.display_name or username,
        email=record.email or None,
        friends={},
    )


class OrphanReconciler:
    """
    Creates missing profiles for Firebase Auth users.

    Users are processed strictly one at a time: existence check, username
    resolution, profile write, index write. The existence check makes the
    run idempotent, so failed records are picked up by simply running again.
    """

    def __init__(
        self,
        directory: IdentityDirectory,
        store: ProfileStore,
        settings: Optional[Settings] = None,
        dry_run: bool = False,
    ):
        """
        Initialize the OrphanReconciler.

        Args:
            directory: Source of auth users.
            store: Realtime Database access for users/ and usernameIndex/.
            settings: Settings object (defaults to get_settings()).
            dry_run: Resolve usernames and report, but write nothing.
        """
        self.directory = directory
        self.store = store
        self.settings: Settings = settings or get_settings()
        self.dry_run = dry_run
        # Usernames handed out during the current run
        self._claimed: Set[str] = set()

    def profile_path(self, uid: str) -> str:
        return join_path(self.settings.USERS_PATH, uid)

    def index_path(self, username: str) -> str:
        return join_path(self.settings.USERNAME_INDEX_PATH, username)

    def reconcile(self) -> ReconciliationReport:
        """
        Scan every auth user and repair the ones without a profile.

        Returns:
            ReconciliationReport: Counts plus one entry per failed record.

        Raises:
            ScanError: If listing auth users fails. Records already repaired
                stay written.
            StoreError: If a profile existence check fails.
        """
        logger.info("Scanning Auth users...")
        report = ReconciliationReport(dry_run=self.dry_run)
        self._claimed.clear()

        for record in iter_identities(
            self.directory, self.settings.LIST_USERS_PAGE_SIZE
        ):
            report.scanned += 1
            if self.store.exists(self.profile_path(record.uid)):
                report.existing += 1
                continue

            report.orphans += 1
            logger.info(f"Orphan auth user: {record.uid} {record.email}")
            self._repair(record, report)

        logger.info(
            f"Done. Total orphan auth users processed: {report.orphans} "
            f"(created={report.created}, failed={report.failed})"
        )
        return report

    def _repair(self, record: IdentityRecord, report: ReconciliationReport) -> None:
        try:
            username = self.ensure_unique_username(derive_username(record))
        except UsernameUnavailableError as e:
            logger.error(f"  failed to pick a username for {record.uid}: {e}")
            report.failures.append(
                RecordFailure(uid=record.uid, stage=WriteStage.USERNAME, error=str(e))
            )
            return

        self._claimed.add(username)
        profile = build_profile(record, username)

        if self.dry_run:
            logger.info(
                f"  [DRY] would create profile for {record.uid} username -> {username}"
            )
            return

        logger.info(f"  creating profile for {record.uid} username -> {username}")
        try:
            self.write_profile(record.uid, profile)
        except PerRecordWriteError as e:
            logger.error(f"  failed to create profile for {record.uid}: {e}")
            report.failures.append(
                RecordFailure(
                    uid=record.uid,
                    stage=WriteStage(e.stage),
                    username=username,
                    error=str(e.cause),
                )
            )
            return

        report.created += 1
        report.created_usernames[record.uid] = username
        logger.info(f"  created profile and usernameIndex for {record.uid}")

    def ensure_unique_username(self, base: Optional[str]) -> str:
        """
        Return base, or base1, base2, ... whichever is first free in the index.

        Each candidate costs one point read. Names already handed out in this run
        count as taken.

        Raises:
            UsernameUnavailableError: After USERNAME_MAX_ATTEMPTS taken candidates.
        """
        base = base or DEFAULT_USERNAME
        candidate = base
        max_attempts = self.settings.USERNAME_MAX_ATTEMPTS
        for i in range(1, max_attempts + 1):
            if candidate not in self._claimed and not self.store.exists(
                self.index_path(candidate)
            ):
                return candidate
            candidate = f"{base}{i}"
        raise UsernameUnavailableError(base, max_attempts)

    def write_profile(self, uid: str, profile: Profile) -> None:
        """
        Write users/{uid} then usernameIndex/{username}.

        The two writes are not atomic. If the second fails the profile stays
        in place without its index entry.

        Raises:
            PerRecordWriteError: Tagged with the stage that failed.
        """
        try:
            self.store.write(self.profile_path(uid), profile.to_firebase())
        except Exception as e:
            raise PerRecordWriteError(uid, WriteStage.PROFILE.value, e) from e

        entry = NameIndexEntry(uid=uid, email=profile.email)
        try:
            self.store.write(self.index_path(profile.username), entry.to_firebase())
        except Exception as e:
            raise PerRecordWriteError(uid, WriteStage.USERNAME_INDEX.value, e) from e

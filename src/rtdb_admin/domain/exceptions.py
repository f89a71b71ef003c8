"""Admin tool exceptions."""


class RtdbAdminError(Exception):
    """Base class for every error raised by the admin tools."""


class SetupError(RtdbAdminError):
    """Raised when credentials, settings or the Firebase app cannot be initialized."""


class ScanError(RtdbAdminError):
    """Raised when paging through Firebase Auth users fails mid-scan."""


class StoreError(RtdbAdminError):
    """Raised when a Realtime Database read or removal fails."""


class PerRecordWriteError(RtdbAdminError):
    """Raised when the profile or username index write fails for one user."""

    def __init__(self, uid: str, stage: str, cause: Exception):
        super().__init__(f"{stage} write failed for {uid}: {cause}")
        self.uid = uid
        self.stage = stage
        self.cause = cause


class UsernameUnavailableError(RtdbAdminError):
    """Raised when no free username is found within the attempt limit."""

    def __init__(self, base: str, attempts: int):
        super().__init__(
            f"No free username for base '{base}' after {attempts} attempts"
        )
        self.base = base
        self.attempts = attempts

"""
Data Schemas for the Realtime Database admin tools.

This module defines the contract between Python logic, Firebase Auth and the
Realtime Database. All models use Pydantic for validation and serialization;
field aliases carry the camelCase names stored in the database.

Database layout:
- users/{uid}                 -> Profile
- usernameIndex/{username}    -> NameIndexEntry
"""

import os
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# ENUMS
# =============================================================================


class WriteStage(str, Enum):
    """Step of orphan repair at which a record failed."""

    USERNAME = "username"
    PROFILE = "profile"
    USERNAME_INDEX = "username_index"


# =============================================================================
# FIREBASE AUTH
# =============================================================================


class IdentityRecord(BaseModel):
    """A Firebase Auth user, reduced to the fields profile creation needs."""

    uid: str = Field(..., min_length=1, description="Firebase Auth uid")
    email: Optional[str] = Field(default=None, description="Primary email, if any")
    display_name: Optional[str] = Field(
        default=None, description="Auth display name, if any"
    )

    @classmethod
    def from_user_record(cls, user: Any) -> "IdentityRecord":
        """Build from a firebase_admin.auth.UserRecord / ExportedUserRecord."""
        return cls(uid=user.uid, email=user.email, display_name=user.display_name)


class IdentityPage(BaseModel):
    """One page of Auth users plus the cursor for the next page."""

    records: List[IdentityRecord] = Field(default_factory=list)
    next_page_token: Optional[str] = None


# =============================================================================
# REALTIME DATABASE
# =============================================================================


class Profile(BaseModel):
    """Minimal user profile stored at users/{uid}."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1)
    display_name: str = Field(..., alias="displayName")
    email: Optional[str] = None
    friends: Dict[str, Any] = Field(default_factory=dict)

    def to_firebase(self) -> dict:
        """Serialize with database field names."""
        return self.model_dump(by_alias=True)


class NameIndexEntry(BaseModel):
    """Owner of a username, stored at usernameIndex/{username}."""

    uid: str = Field(..., min_length=1)
    email: Optional[str] = None

    def to_firebase(self) -> dict:
        return self.model_dump()


# =============================================================================
# REPORTS
# =============================================================================


class RecordFailure(BaseModel):
    """An orphan that could not be fully repaired."""

    uid: str
    stage: WriteStage
    username: Optional[str] = None
    error: str


class ReconciliationReport(BaseModel):
    """Summary of one orphan reconciliation run."""

    scanned: int = 0
    existing: int = 0
    orphans: int = 0
    created: int = 0
    dry_run: bool = False
    created_usernames: Dict[str, str] = Field(
        default_factory=dict, description="uid -> username for profiles written"
    )
    failures: List[RecordFailure] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def needs_repair(self) -> List[RecordFailure]:
        """Profiles written without their username index entry."""
        return [f for f in self.failures if f.stage == WriteStage.USERNAME_INDEX]


class PathSummary(BaseModel):
    """What a Realtime Database path currently holds."""

    path: str
    exists: bool
    count: int = 0
    sample_keys: List[str] = Field(default_factory=list)


# =============================================================================
# WEB CLIENT CONFIG
# =============================================================================

# Environment variable -> key in window.FIREBASE_CONFIG
WEB_CONFIG_ENV_VARS = {
    "apiKey": "GOOGLE_API_KEY",
    "authDomain": "FIREBASE_AUTH_DOMAIN",
    "databaseURL": "FIREBASE_DATABASE_URL",
    "projectId": "FIREBASE_PROJECT_ID",
    "storageBucket": "FIREBASE_STORAGE_BUCKET",
    "messagingSenderId": "FIREBASE_MESSAGING_SENDER_ID",
    "appId": "FIREBASE_APP_ID",
    "measurementId": "FIREBASE_MEASUREMENT_ID",
}


class FirebaseWebConfig(BaseModel):
    """Browser SDK configuration published as window.FIREBASE_CONFIG."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(default="", alias="apiKey")
    auth_domain: str = Field(default="", alias="authDomain")
    database_url: str = Field(default="", alias="databaseURL")
    project_id: str = Field(default="", alias="projectId")
    storage_bucket: str = Field(default="", alias="storageBucket")
    messaging_sender_id: str = Field(default="", alias="messagingSenderId")
    app_id: str = Field(default="", alias="appId")
    measurement_id: str = Field(default="", alias="measurementId")

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "FirebaseWebConfig":
        """Read every key from its environment variable; unset means empty."""
        environ = os.environ if environ is None else environ
        return cls(
            **{
                alias: environ.get(var) or ""
                for alias, var in WEB_CONFIG_ENV_VARS.items()
            }
        )

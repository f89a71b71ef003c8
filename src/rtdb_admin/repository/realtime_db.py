"""Realtime Database repository for profiles and the username index."""

from typing import Any, List, Optional, Protocol

import firebase_admin
from firebase_admin import db
from loguru import logger

from rtdb_admin.domain.exceptions import StoreError


def normalize_path(path: str) -> str:
    """Strip surrounding slashes; the database root becomes ''."""
    return path.strip().strip("/")


def join_path(*parts: str) -> str:
    return "/".join(normalize_path(p) for p in parts if normalize_path(p))


class ProfileStore(Protocol):
    """Hierarchical key-value store addressed by slash-separated paths."""

    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> Any: ...

    def write(self, path: str, value: Any) -> None: ...

    def child_keys(self, path: str) -> Optional[List[str]]: ...

    def remove(self, path: str) -> None: ...


class RealtimeDatabaseStore:
    """ProfileStore backed by firebase_admin.db references."""

    def __init__(self, app: firebase_admin.App):
        self.app = app

    def _ref(self, path: str) -> db.Reference:
        return db.reference("/" + normalize_path(path), app=self.app)

    def read(self, path: str) -> Any:
        """
        Read the value at path.

        Returns:
            The stored value, or None if nothing is stored there.

        Raises:
            StoreError: If the read fails.
        """
        try:
            return self._ref(path).get()
        except Exception as e:
            raise StoreError(f"Failed to read {path}: {e}") from e

    def exists(self, path: str) -> bool:
        """True if any value is stored at path (shallow read, children not fetched)."""
        try:
            return self._ref(path).get(shallow=True) is not None
        except Exception as e:
            raise StoreError(f"Failed to read {path}: {e}") from e

    def write(self, path: str, value: Any) -> None:
        """Overwrite the value at path. Errors propagate to the caller."""
        self._ref(path).set(value)

    def child_keys(self, path: str) -> Optional[List[str]]:
        """
        List the immediate child keys of path without downloading the subtree.

        Returns:
            Child keys, [] for a scalar leaf, or None if path does not exist.
        """
        try:
            value = self._ref(path).get(shallow=True)
        except Exception as e:
            raise StoreError(f"Failed to list {path}: {e}") from e
        if value is None:
            return None
        if isinstance(value, dict):
            return list(value.keys())
        if isinstance(value, list):
            return [str(i) for i, v in enumerate(value) if v is not None]
        return []

    def remove(self, path: str) -> None:
        """Delete the whole subtree at path."""
        if not normalize_path(path):
            raise StoreError("Refusing to remove the database root")
        try:
            self._ref(path).delete()
        except Exception as e:
            raise StoreError(f"Failed to remove {path}: {e}") from e
        logger.debug(f"Removed {path}")

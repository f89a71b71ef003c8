"""Firebase Auth repository: paged enumeration of auth users."""

from typing import Iterator, Optional, Protocol

import firebase_admin
from firebase_admin import auth
from loguru import logger

from rtdb_admin.domain.exceptions import ScanError
from rtdb_admin.domain.schemas import IdentityPage, IdentityRecord

MAX_PAGE_SIZE = 1000


class IdentityDirectory(Protocol):
    """Anything that can list identity records page by page."""

    def list_page(
        self, page_size: int, page_token: Optional[str] = None
    ) -> IdentityPage: ...


def iter_identities(
    directory: IdentityDirectory, page_size: int = MAX_PAGE_SIZE
) -> Iterator[IdentityRecord]:
    """
    Yield every identity, following the page token until it runs out.

    The sequence is lazy and forward-only: a page is only fetched once the
    previous one has been fully consumed.
    """
    page_token: Optional[str] = None
    page_number = 0
    while True:
        page = directory.list_page(page_size, page_token)
        page_number += 1
        logger.debug(f"Fetched auth page {page_number} ({len(page.records)} users)")
        yield from page.records
        page_token = page.next_page_token
        if not page_token:
            return


class FirebaseIdentityDirectory:
    """Lists Firebase Auth users through the Admin SDK."""

    def __init__(self, app: firebase_admin.App):
        self.app = app

    def list_page(
        self, page_size: int = MAX_PAGE_SIZE, page_token: Optional[str] = None
    ) -> IdentityPage:
        """
        Fetch a single page of users.

        Raises:
            ScanError: If the Auth API call fails.
        """
        try:
            result = auth.list_users(
                page_token=page_token, max_results=page_size, app=self.app
            )
        except Exception as e:
            raise ScanError(f"Failed to list auth users: {e}") from e

        return IdentityPage(
            records=[IdentityRecord.from_user_record(u) for u in result.users],
            next_page_token=result.next_page_token or None,
        )

    def iter_records(self, page_size: int = MAX_PAGE_SIZE) -> Iterator[IdentityRecord]:
        return iter_identities(self, page_size)

"""
Table State.

Client-side filtering and pagination shared by every list screen.
Filtering happens locally because the API has no filter parameters;
changing the filter always returns to page 1.  After a successful
mutation the screen patches the local rows (``replace``/``remove``)
instead of refetching; a failed mutation leaves the rows untouched.
"""

from __future__ import annotations

import math
from typing import Callable, Generic, Optional, TypeVar

from lifestream.models.blog import BlogPost
from lifestream.models.donation_request import DonationRequest
from lifestream.models.enums import BlogStatus, RequestStatus, UserStatus
from lifestream.models.user import UserProfile

T = TypeVar("T")
F = TypeVar("F")

KeyFn = Callable[[T], Optional[str]]


class TableState(Generic[T, F]):
    """Rows, current filter and page for one table.

    Parameters
    ----------
    key:
        Returns a row's identity (used by ``replace``/``remove``).
    matches:
        ``matches(row, filter_value)`` decides whether a row is shown.
        A ``None`` filter shows everything.
    page_size:
        Rows per page.
    """

    def __init__(
        self,
        key: KeyFn[T],
        matches: Callable[[T, F], bool],
        page_size: int = 10,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._key = key
        self._matches = matches
        self.page_size = page_size
        self._rows: list[T] = []
        self._filter: Optional[F] = None
        self._page: int = 1

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def load(self, rows: list[T]) -> None:
        """Replace every row (fresh fetch); keeps the filter, clamps the page."""
        self._rows = list(rows)
        self._page = min(self._page, self.page_count)

    def replace(self, row: T) -> None:
        """Swap in the updated version of *row* (matched by key)."""
        row_key = self._key(row)
        self._rows = [row if self._key(r) == row_key else r for r in self._rows]

    def remove(self, row_key: str) -> None:
        self._rows = [r for r in self._rows if self._key(r) != row_key]
        self._page = min(self._page, self.page_count)

    @property
    def rows(self) -> list[T]:
        return list(self._rows)

    # ------------------------------------------------------------------
    # Filter
    # ------------------------------------------------------------------

    @property
    def filter(self) -> Optional[F]:
        return self._filter

    def set_filter(self, value: Optional[F]) -> None:
        self._filter = value
        self._page = 1

    @property
    def filtered(self) -> list[T]:
        if self._filter is None:
            return list(self._rows)
        return [r for r in self._rows if self._matches(r, self._filter)]

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_count(self) -> int:
        """Number of pages; an empty table still has one (empty) page."""
        return max(1, math.ceil(len(self.filtered) / self.page_size))

    def go_to(self, page: int) -> None:
        self._page = max(1, min(page, self.page_count))

    def next_page(self) -> None:
        self.go_to(self._page + 1)

    def previous_page(self) -> None:
        self.go_to(self._page - 1)

    @property
    def visible(self) -> list[T]:
        """Rows on the current page."""
        start = (self._page - 1) * self.page_size
        return self.filtered[start:start + self.page_size]


# ----------------------------------------------------------------------
# Table factories
# ----------------------------------------------------------------------

def parse_request_filter(value: str) -> Optional[RequestStatus]:
    """``"all"`` (or empty) means no filter; legacy spellings are accepted."""
    if not value or value.strip().lower() == "all":
        return None
    return RequestStatus.parse(value)


def request_table(page_size: int = 10) -> TableState[DonationRequest, RequestStatus]:
    return TableState(
        key=lambda r: r.id,
        matches=lambda r, status: r.status is status,
        page_size=page_size,
    )


def user_table(page_size: int = 10) -> TableState[UserProfile, UserStatus]:
    return TableState(
        key=lambda u: u.record_id,
        matches=lambda u, status: u.status is status,
        page_size=page_size,
    )


def blog_table(page_size: int = 10) -> TableState[BlogPost, BlogStatus]:
    return TableState(
        key=lambda b: b.id,
        matches=lambda b, status: b.status is status,
        page_size=page_size,
    )

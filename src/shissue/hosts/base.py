"""Base interface and issue model shared by all repository hosts."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar

from shissue.config import Credentials
from shissue.errors import HostNotInitializedError
from shissue.remote import Remote
from shissue.utils import WHITE

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
MAX_ITEMS = 1000

T = TypeVar("T")


@dataclass(frozen=True)
class Label:
    """An issue label. ``color`` is only used for decoration."""

    name: str
    color: tuple[int, int, int] = WHITE


@dataclass(frozen=True)
class Issue:
    """Host-independent issue.

    ``id`` is the host's internal identifier; ``number`` is the one users see.
    """

    id: int
    number: int
    title: str
    url: str
    author: str
    created_at: datetime
    body: str = ""
    assignees: tuple[str, ...] = ()
    labels: tuple[Label, ...] = ()
    is_closed: bool = False


@dataclass(frozen=True)
class Comment:
    """A comment on an issue."""

    id: int
    url: str
    author: str
    created_at: datetime
    body: str = ""


@dataclass
class IssueFilter:
    """Which issues to list.

    ``None`` fields are not filtered on. Asking for neither open nor closed
    issues is treated as asking for open ones.
    """

    labels: frozenset[str] | None = None
    assignee: str | None = None
    creator: str | None = None
    include_open: bool = True
    include_closed: bool = False

    def __post_init__(self) -> None:
        if self.labels is not None:
            self.labels = frozenset(self.labels)
        if not self.include_open and not self.include_closed:
            self.include_open = True

    @property
    def state(self) -> str:
        if self.include_open and self.include_closed:
            return "all"
        if self.include_closed:
            return "closed"
        return "open"

    @property
    def label_names(self) -> list[str]:
        return sorted(self.labels) if self.labels else []


def paginate(
    fetch_page: Callable[[int], Sequence[T]],
    page_size: int = PAGE_SIZE,
    max_items: int = MAX_ITEMS,
) -> list[T]:
    """Collect pages from ``fetch_page`` (called with 0, 1, 2, ...) serially.

    Stops after a short page or once ``max_items`` items were collected.
    Exceptions from ``fetch_page`` propagate and the pages collected so far
    are dropped.
    """
    items: list[T] = []
    page = 0
    while True:
        chunk = fetch_page(page)
        items.extend(chunk)
        page += 1
        if len(chunk) < page_size or len(items) >= max_items:
            break
    logger.debug("Fetched %d item(s) in %d page(s)", len(items), page)
    return items[:max_items]


class RepoHost(ABC):
    """Abstract interface for a repository host (GitHub, GitLab)."""

    #: Human readable host name, used in messages.
    name: str = ""

    def __init__(self, credentials: Credentials | None = None, *, verify: bool = True) -> None:
        self.credentials = credentials or Credentials()
        self.verify = verify
        self.remote: Remote | None = None

    def _require_remote(self) -> Remote:
        if self.remote is None:
            raise HostNotInitializedError(f"{self.name} host used before initialize()")
        return self.remote

    @abstractmethod
    def initialize(self, remote: Remote) -> str:
        """Look the repository up on this host.

        On success the remote's name, description, author, URL and API URL
        are replaced by the host's values and the API URL is returned.
        Raises ``NotFoundError``, ``AuthFailedError``, ``ForbiddenError``,
        ``RateLimitedError`` or ``TransportError`` otherwise.
        """

    @abstractmethod
    def list_issues(self, issue_filter: IssueFilter | None = None) -> list[Issue]:
        """Return every issue matching the filter.

        An empty list is returned when the repository has no issue tracker.
        """

    @abstractmethod
    def get_issue(self, number: int) -> Issue | None:
        """Return the issue with this number, or None if there is none."""

    @abstractmethod
    def list_comments(self, number: int) -> list[Comment]:
        """Return the comments of an issue, oldest first."""

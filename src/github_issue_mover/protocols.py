"""Protocols defining the contract between the IssueMover and the issue tracker.

The mover only knows about two things:

1. Page: one page of a listing, with a way to fetch the page after it
2. IssueTracker: the handful of REST operations needed to move an issue

Keeping the tracker behind a protocol lets the mover be tested against an
in-memory tracker, and keeps PyGithub specifics in ``github_tracker``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import Comment, Issue, IssueState, RepoRef, StateFilter

T_co = TypeVar("T_co", covariant=True)


class Page(Protocol[T_co]):
    """One page of a paginated listing.

    A page knows whether the tracker reported another page after it and how
    to fetch that page. Fetching is never cached: iterating from the first
    page again re-requests everything.
    """

    @property
    def items(self) -> Sequence[T_co]:
        """Items on this page, in the order the tracker returned them."""
        ...

    def has_next_page(self) -> bool:
        """Return True if the tracker reported a page after this one."""
        ...

    def get_next_page(self) -> Page[T_co]:
        """Fetch the page after this one.

        Raises:
            TransportError: If the request fails
        """
        ...


class IssueTracker(Protocol):
    """Operations on a hosted issue tracker used to move issues.

    All methods raise TransportError when the underlying API call fails.
    Authentication is handled when the tracker is constructed.
    """

    def list_issues(self, repo: RepoRef, state: StateFilter, per_page: int) -> Page[Issue]:
        """Return the first page of issues in ``repo`` matching ``state``."""
        ...

    def list_comments(self, repo: RepoRef, issue_number: int, per_page: int) -> Page[Comment]:
        """Return the first page of comments on an issue, oldest first."""
        ...

    def create_issue(
        self,
        repo: RepoRef,
        *,
        title: str,
        body: str,
        labels: Sequence[str],
        assignees: Sequence[str],
    ) -> Issue:
        """Create an issue and return it."""
        ...

    def create_comment(self, repo: RepoRef, issue_number: int, body: str) -> Comment:
        """Add a comment to an issue and return it."""
        ...

    def edit_issue(self, repo: RepoRef, issue_number: int, *, state: IssueState) -> Issue:
        """Change the state of an issue and return the updated issue."""
        ...

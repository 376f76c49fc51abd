"""
PyGithub implementation of the IssueTracker protocol.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Generic, TypeVar
from urllib.parse import urlparse

import requests
from github import GithubException

from .exceptions import TransportError
from .models import Comment, Issue

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    import github.Issue
    import github.IssueComment
    import github.Repository
    from github import Github
    from github.PaginatedList import PaginatedList

    from .models import IssueState, RepoRef, StateFilter

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Issues in use at once: the source issue being moved and its copy
ISSUE_CACHE_SIZE: Final[int] = 4


@contextmanager
def _transport(action: str) -> Iterator[None]:
    """Wrap GitHub API and network failures in TransportError."""
    try:
        yield
    except GithubException as e:
        msg = f"Failed to {action}: {e.status} {e.data}"
        raise TransportError(msg) from e
    except requests.RequestException as e:
        msg = f"Failed to {action}: {e}"
        raise TransportError(msg) from e


def is_pull_request_url(html_url: str) -> bool:
    """Return True if an issue URL (/owner/repo/<kind>/<number>) points to a pull request.

    Reading PyGithub's pull_request attribute would fetch every plain issue again.
    """
    segments = urlparse(html_url).path.strip("/").split("/")
    return len(segments) >= 4 and segments[2] == "pull"  # noqa: PLR2004


def to_issue(gh_issue: github.Issue.Issue) -> Issue:
    """Convert a PyGithub issue to the normalized model."""
    return Issue(
        number=gh_issue.number,
        title=gh_issue.title,
        body=gh_issue.body or "",
        author=gh_issue.user.login,
        created_at=gh_issue.created_at,
        state="closed" if gh_issue.state == "closed" else "open",
        html_url=gh_issue.html_url,
        labels=[label.name for label in gh_issue.labels],
        assignees=[assignee.login for assignee in gh_issue.assignees or []],
        is_pull_request=is_pull_request_url(gh_issue.html_url),
    )


def to_comment(gh_comment: github.IssueComment.IssueComment) -> Comment:
    """Convert a PyGithub issue comment to the normalized model."""
    return Comment(
        author=gh_comment.user.login,
        created_at=gh_comment.created_at,
        body=gh_comment.body or "",
        html_url=gh_comment.html_url,
    )


@dataclass
class GithubPage(Generic[R, T]):
    """A page of a PyGithub PaginatedList.

    PaginatedList hides the Link header, so a page shorter than the page size
    is taken as the last one. A listing that is an exact multiple of the page
    size costs one extra request returning an empty page.
    """

    listing: PaginatedList[R]
    index: int
    per_page: int
    convert: Callable[[R], T]
    description: str
    items: list[T]
    fetched: int

    @classmethod
    def fetch(
        cls, listing: PaginatedList[R], index: int, per_page: int, convert: Callable[[R], T], description: str
    ) -> GithubPage[R, T]:
        with _transport(f"fetch page {index + 1} of {description}"):
            raw_items = listing.get_page(index)
            items = [convert(raw) for raw in raw_items]
        logger.debug(f"Fetched page {index + 1} of {description}: {len(items)} items")
        return cls(listing, index, per_page, convert, description, items, len(raw_items))

    def has_next_page(self) -> bool:
        return self.fetched >= self.per_page

    def get_next_page(self) -> GithubPage[R, T]:
        return GithubPage.fetch(self.listing, self.index + 1, self.per_page, self.convert, self.description)


class GitHubTracker:
    """IssueTracker backed by the GitHub REST API through PyGithub.

    Listings are converted page by page and not kept. The few PyGithub issue
    objects last used for commenting or editing are kept by repository and
    number, so moving one issue fetches it at most once.
    """

    def __init__(self, client: Github, *, issue_cache_size: int = ISSUE_CACHE_SIZE) -> None:
        self._client: Github = client
        self._repos: dict[RepoRef, github.Repository.Repository] = {}
        self._issues: OrderedDict[tuple[RepoRef, int], github.Issue.Issue] = OrderedDict()
        self._issue_cache_size: int = issue_cache_size

    def _repo(self, repo: RepoRef) -> github.Repository.Repository:
        if repo not in self._repos:
            with _transport(f"load repository {repo}"):
                self._repos[repo] = self._client.get_repo(repo.full_name, lazy=True)
        return self._repos[repo]

    def _remember(self, repo: RepoRef, gh_issue: github.Issue.Issue) -> github.Issue.Issue:
        key = (repo, gh_issue.number)
        self._issues[key] = gh_issue
        self._issues.move_to_end(key)
        while len(self._issues) > self._issue_cache_size:
            self._issues.popitem(last=False)
        return gh_issue

    def _issue(self, repo: RepoRef, issue_number: int) -> github.Issue.Issue:
        gh_issue = self._issues.get((repo, issue_number))
        if gh_issue is None:
            with _transport(f"get issue #{issue_number} in {repo}"):
                gh_issue = self._repo(repo).get_issue(issue_number)
        return self._remember(repo, gh_issue)

    def list_issues(self, repo: RepoRef, state: StateFilter, per_page: int) -> GithubPage[github.Issue.Issue, Issue]:
        self._client.per_page = per_page
        with _transport(f"list issues in {repo}"):
            listing = self._repo(repo).get_issues(state=state)
        return GithubPage.fetch(listing, 0, per_page, to_issue, f"issues in {repo}")

    def list_comments(
        self, repo: RepoRef, issue_number: int, per_page: int
    ) -> GithubPage[github.IssueComment.IssueComment, Comment]:
        self._client.per_page = per_page
        with _transport(f"list comments on issue #{issue_number} in {repo}"):
            listing = self._issue(repo, issue_number).get_comments()
        return GithubPage.fetch(listing, 0, per_page, to_comment, f"comments on issue #{issue_number} in {repo}")

    def create_issue(
        self,
        repo: RepoRef,
        *,
        title: str,
        body: str,
        labels: Sequence[str],
        assignees: Sequence[str],
    ) -> Issue:
        with _transport(f"create issue in {repo}"):
            gh_issue = self._repo(repo).create_issue(
                title=title, body=body, labels=list(labels), assignees=list(assignees)
            )
        logger.debug(f"Created issue #{gh_issue.number} in {repo}")
        return to_issue(self._remember(repo, gh_issue))

    def create_comment(self, repo: RepoRef, issue_number: int, body: str) -> Comment:
        gh_issue = self._issue(repo, issue_number)
        with _transport(f"comment on issue #{issue_number} in {repo}"):
            gh_comment = gh_issue.create_comment(body)
        return to_comment(gh_comment)

    def edit_issue(self, repo: RepoRef, issue_number: int, *, state: IssueState) -> Issue:
        gh_issue = self._issue(repo, issue_number)
        with _transport(f"set issue #{issue_number} in {repo} to {state}"):
            gh_issue.edit(state=state)
        return to_issue(gh_issue)

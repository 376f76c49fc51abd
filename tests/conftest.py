"""
Pytest configuration and fixtures.

- Unit tests run the IssueMover against an in-memory issue tracker
- Integration tests are skipped unless the test repositories are configured,
  and fail on any warnings logged by the code under test
"""

from __future__ import annotations

import datetime as dt
import logging
import os
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Generic, TypeVar

from typing_extensions import override

import pytest

from github_issue_mover.exceptions import TransportError
from github_issue_mover.models import Comment, Issue, RepoRef

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from github_issue_mover.models import IssueState, StateFilter

INTEGRATION_ENV_VARS = ("SOURCE_GITHUB_TEST_REPO", "TARGET_GITHUB_TEST_REPO")

T = TypeVar("T")

SOURCE = RepoRef("old-org", "old-repo")
TARGET = RepoRef("new-org", "new-repo")


@dataclass
class FakePage(Generic[T]):
    """Page over a precomputed list of pages."""

    pages: list[list[T]]
    index: int = 0
    fetches: list[int] = field(default_factory=list)

    @property
    def items(self) -> list[T]:
        return self.pages[self.index]

    def has_next_page(self) -> bool:
        return self.index + 1 < len(self.pages)

    def get_next_page(self) -> FakePage[T]:
        self.fetches.append(self.index + 1)
        return FakePage(self.pages, self.index + 1, self.fetches)


def _split(items: list, per_page: int) -> list[list]:
    return [items[i : i + per_page] for i in range(0, len(items), per_page)] or [[]]


class FakeTracker:
    """In-memory IssueTracker recording every write call."""

    def __init__(self) -> None:
        self.issues: dict[RepoRef, dict[int, Issue]] = {}
        self.comments: dict[tuple[RepoRef, int], list[Comment]] = {}
        self.calls: list[tuple[str, RepoRef, int | None]] = []
        self.fail_on: str | None = None  # method name that raises TransportError
        self.fail_after: int = 0  # successful calls of fail_on before it fails
        self.page_requests: list[tuple[str, int]] = []

    def _maybe_fail(self, method: str) -> None:
        if self.fail_on != method:
            return
        if self.fail_after > 0:
            self.fail_after -= 1
            return
        msg = f"Failed to {method}: 502 Bad Gateway"
        raise TransportError(msg)

    def add_issue(
        self,
        repo: RepoRef,
        number: int,
        *,
        title: str | None = None,
        body: str = "Issue body",
        state: IssueState = "open",
        labels: Sequence[str] = (),
        assignees: Sequence[str] = (),
        is_pull_request: bool = False,
        author: str = "octocat",
    ) -> Issue:
        kind = "pull" if is_pull_request else "issues"
        issue = Issue(
            number=number,
            title=title or f"Issue {number}",
            body=body,
            author=author,
            created_at=dt.datetime(2020, 1, number % 28 + 1, 9, 30, tzinfo=dt.UTC),
            state=state,
            html_url=f"https://github.com/{repo}/{kind}/{number}",
            labels=list(labels),
            assignees=list(assignees),
            is_pull_request=is_pull_request,
        )
        self.issues.setdefault(repo, {})[number] = issue
        return issue

    def add_comment(self, repo: RepoRef, number: int, author: str, body: str) -> Comment:
        comments = self.comments.setdefault((repo, number), [])
        comment = Comment(
            author=author,
            created_at=dt.datetime(2020, 2, len(comments) + 1, 15, 5, tzinfo=dt.UTC),
            body=body,
            html_url=f"https://github.com/{repo}/issues/{number}#issuecomment-{len(comments) + 1}",
        )
        comments.append(comment)
        return comment

    def calls_to(self, method: str, repo: RepoRef | None = None) -> list[tuple[str, RepoRef, int | None]]:
        return [call for call in self.calls if call[0] == method and (repo is None or call[1] == repo)]

    # IssueTracker protocol

    def list_issues(self, repo: RepoRef, state: StateFilter, per_page: int) -> FakePage[Issue]:
        self._maybe_fail("list_issues")
        self.page_requests.append(("issues", per_page))
        issues = [
            replace(issue)
            for _, issue in sorted(self.issues.get(repo, {}).items())
            if state == "all" or issue.state == state
        ]
        return FakePage(_split(issues, per_page))

    def list_comments(self, repo: RepoRef, issue_number: int, per_page: int) -> FakePage[Comment]:
        self._maybe_fail("list_comments")
        self.page_requests.append(("comments", per_page))
        return FakePage(_split(list(self.comments.get((repo, issue_number), [])), per_page))

    def create_issue(
        self,
        repo: RepoRef,
        *,
        title: str,
        body: str,
        labels: Sequence[str],
        assignees: Sequence[str],
    ) -> Issue:
        self._maybe_fail("create_issue")
        number = max(self.issues.get(repo, {}), default=0) + 1
        self.calls.append(("create_issue", repo, number))
        issue = self.add_issue(repo, number, title=title, body=body, labels=labels, assignees=assignees)
        issue.author = "mover-bot"
        return replace(issue)

    def create_comment(self, repo: RepoRef, issue_number: int, body: str) -> Comment:
        self._maybe_fail("create_comment")
        self.calls.append(("create_comment", repo, issue_number))
        return self.add_comment(repo, issue_number, "mover-bot", body)

    def edit_issue(self, repo: RepoRef, issue_number: int, *, state: IssueState) -> Issue:
        self._maybe_fail("edit_issue")
        self.calls.append(("edit_issue", repo, issue_number))
        issue = self.issues[repo][issue_number]
        issue.state = state
        return replace(issue)


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture(autouse=True)
def check_integration_test_env_vars(request: pytest.FixtureRequest) -> None:
    """Skip integration tests when the test repositories are not configured."""
    if request.node.get_closest_marker("integration") is None:
        return

    missing = [name for name in INTEGRATION_ENV_VARS if not os.environ.get(name)]
    if missing:
        pytest.skip(f"Integration tests require environment variables: {', '.join(missing)}")


# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Logging handler capturing warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        _integration_test_warnings.setdefault(self.test_nodeid, []).append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """Collect WARNING and above log records emitted during integration tests.

    The mover logs warnings only for conditions a test run should never hit
    (no token found, failed moves). Unit tests are not affected.
    """
    if request.node.get_closest_marker("integration") is None:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """Mark a passed integration test as failed if warnings were logged during it."""
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        warning_records = _integration_test_warnings.get(item.nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]

            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(item.nodeid, None)

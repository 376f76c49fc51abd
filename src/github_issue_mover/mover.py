"""
Move issues, with their comments, from one repository to another.

For every issue selected in the source repository the IssueMover:

1. Creates a copy in the target repository, attributed to the original author
2. Copies the comments, in order, attributed the same way
3. Closes the copy if the original was closed
4. Comments on the original with a link to the copy
5. Closes the original

Issues and comments are handled strictly one at a time with a fixed pause in
front of each request batch, to stay clear of GitHub's abuse rate limits.
Tracker calls are blocking and run in a worker thread, one at a time.

Error Handling
--------------
Any tracker failure ends the run. Nothing is rolled back and there is no
marker to resume from: issues moved before the failure stay moved, the
failing issue may be half moved, and later issues are left untouched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from . import issue_builder
from .exceptions import ConfigurationError, MigrationError
from .models import STATE_FILTERS, MigrationConfig, MoveResult, MoveStats, RepoRef
from .pacing import DEFAULT_REQUEST_DELAY, run_sequentially
from .pagination import paginate

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .models import Comment, Issue, StateFilter
    from .protocols import IssueTracker

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

PAGE_SIZE = 100

T = TypeVar("T")


class IssueMover:
    """Moves issues between two repositories of one tracker.

    Usage:
        mover = IssueMover(GitHubTracker(client))
        mover.set_config("old-org/repo", "new-org/repo", state="all", label_filter={"bug"})
        result = asyncio.run(mover.move())
    """

    def __init__(
        self,
        tracker: IssueTracker,
        *,
        request_delay: float = DEFAULT_REQUEST_DELAY,
        per_page: int = PAGE_SIZE,
    ) -> None:
        self._tracker: IssueTracker = tracker
        self.request_delay: float = request_delay
        self.per_page: int = per_page
        self.config: MigrationConfig = MigrationConfig(source=None, target=None)
        self._stats: MoveStats = MoveStats()
        self._moved: dict[int, int] = {}

    def set_config(
        self,
        source: RepoRef | str | None,
        target: RepoRef | str | None,
        state: StateFilter = "open",
        label_filter: Iterable[str] | None = None,
    ) -> None:
        """Set source and target repositories and which issues to move. Performs no I/O."""
        if state not in STATE_FILTERS:
            msg = f"Invalid issue state '{state}'. Expected one of: {', '.join(STATE_FILTERS)}"
            raise ConfigurationError(msg)

        self.config = MigrationConfig(
            source=RepoRef.parse(source) if isinstance(source, str) else source,
            target=RepoRef.parse(target) if isinstance(target, str) else target,
            state=state,
            label_filter=frozenset(label_filter) if label_filter is not None else None,
        )

    @property
    def source(self) -> RepoRef:
        if self.config.source is None:
            msg = "Source repository not set. Call set_config() first."
            raise ConfigurationError(msg)
        return self.config.source

    @property
    def target(self) -> RepoRef:
        if self.config.target is None:
            msg = "Target repository not set. Call set_config() first."
            raise ConfigurationError(msg)
        return self.config.target

    async def _call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking tracker call off the event loop."""
        return await asyncio.to_thread(func, *args, **kwargs)

    async def move(self) -> MoveResult:
        """Move all selected issues from source to target.

        Returns:
            MoveResult; on failure it carries the error that ended the run
        """
        self._stats = MoveStats()
        self._moved = {}

        if self.config.source is None or self.config.target is None:
            error = ConfigurationError("Source and target repositories must be set.")
            logger.error(str(error))
            return MoveResult(success=False, stats=self._stats, error=error)

        logger.info(f"Moving {self.config.state} issues from {self.source} to {self.target}")
        try:
            issues = await self._call(self._fetch_issues)
            self._stats.issues_fetched = len(issues)
            logger.info(f"Found {len(issues)} {self.config.state} issues in {self.source}")

            await run_sequentially(issues, self.move_issue, delay=self.request_delay)
        except MigrationError as e:
            logger.exception(f"Moving issues from {self.source} to {self.target} failed")
            return MoveResult(success=False, stats=self._stats, moved=dict(self._moved), error=e)

        logger.info(
            f"Moved {self._stats.issues_moved} issues with {self._stats.comments_copied} comments, "
            f"skipped {self._stats.issues_skipped}"
        )
        return MoveResult(success=True, stats=self._stats, moved=dict(self._moved))

    def _fetch_issues(self) -> list[Issue]:
        first_page = self._tracker.list_issues(self.source, self.config.state, self.per_page)
        return paginate(first_page)

    def _fetch_comments(self, issue_number: int) -> list[Comment]:
        first_page = self._tracker.list_comments(self.source, issue_number, self.per_page)
        return paginate(first_page)

    def has_matching_labels(self, labels: Iterable[str]) -> bool:
        """Return True if no label filter is set or any label is in it."""
        if not self.config.label_filter:
            return True
        return any(label in self.config.label_filter for label in labels)

    def should_move(self, issue: Issue) -> bool:
        return not issue.is_pull_request and self.has_matching_labels(issue.labels)

    async def move_issue(self, issue: Issue) -> Issue | None:
        """Move one issue. Pull requests and issues not matching the label filter are skipped.

        Returns:
            The new issue in the target repository, or None if skipped
        """
        if not self.should_move(issue):
            logger.debug(f"Skipping #{issue.number}: {issue.title}")
            self._stats.issues_skipped += 1
            return None

        try:
            new_issue = await self._call(
                self._tracker.create_issue,
                self.target,
                title=issue.title,
                body=issue_builder.build_issue_body(issue),
                labels=issue.labels,
                assignees=issue.assignees,
            )
            self._moved[issue.number] = new_issue.number

            await self.clone_comments(issue.number, new_issue.number)

            if issue.state == "closed" and await self.close_issue(self.target, new_issue):
                self._stats.target_issues_closed += 1

            await self.link_issue(issue, new_issue)

            if await self.close_issue(self.source, issue):
                self._stats.source_issues_closed += 1
        except MigrationError:
            logger.error(f"Failed to move issue #{issue.number} from {self.source} to {self.target}")
            raise

        self._stats.issues_moved += 1
        logger.info(f"Moved {self.source}#{issue.number} to {self.target}#{new_issue.number}: {issue.title}")
        return new_issue

    async def clone_comments(self, source_issue_number: int, target_issue_number: int) -> int:
        """Copy all comments of a source issue to a target issue, in order.

        Returns:
            Number of comments copied
        """
        comments = await self._call(self._fetch_comments, source_issue_number)

        async def copy_comment(comment: Comment) -> None:
            await self._call(
                self._tracker.create_comment,
                self.target,
                target_issue_number,
                issue_builder.build_comment_body(comment),
            )
            self._stats.comments_copied += 1
            logger.debug(f"Copied comment by {comment.author} to {self.target}#{target_issue_number}")

        return await run_sequentially(comments, copy_comment, delay=self.request_delay)

    async def close_issue(self, repo: RepoRef, issue: Issue) -> bool:
        """Close an issue unless it is closed already. Returns True if an edit was made."""
        if issue.state == "closed":
            return False
        await self._call(self._tracker.edit_issue, repo, issue.number, state="closed")
        logger.debug(f"Closed {repo}#{issue.number}")
        return True

    async def link_issue(self, source_issue: Issue, new_issue: Issue) -> None:
        """Leave a comment on the source issue pointing to its copy."""
        await self._call(
            self._tracker.create_comment,
            self.source,
            source_issue.number,
            issue_builder.build_moved_notice(new_issue),
        )

"""Data models shared between the issue tracker and the IssueMover.

Issues and comments are normalized views of what the tracker returns, so the
mover never touches PyGithub objects directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, get_args

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from datetime import datetime

IssueState = Literal["open", "closed"]
StateFilter = Literal["open", "closed", "all"]

STATE_FILTERS: tuple[str, ...] = get_args(StateFilter)


@dataclass(frozen=True)
class RepoRef:
    """A repository on the tracker, identified by owner and name."""

    owner: str
    name: str

    @classmethod
    def parse(cls, repo_path: str) -> RepoRef:
        """Build a RepoRef from an ``owner/name`` path."""
        repo_path = repo_path.strip()
        parts = repo_path.split("/")
        if len(parts) != 2:  # noqa: PLR2004
            msg = f"Invalid repository path '{repo_path}'. Expected format: 'owner/repository'"
            raise ConfigurationError(msg)

        owner, name = parts
        if not owner or not name:
            msg = f"Invalid repository path '{repo_path}'. Both owner and repository name must be non-empty"
            raise ConfigurationError(msg)
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class MigrationConfig:
    """Where to move issues from and to, and which ones."""

    source: RepoRef | None
    target: RepoRef | None
    state: StateFilter = "open"
    label_filter: frozenset[str] | None = None


@dataclass
class Issue:
    """An issue as read from the tracker.

    Pull requests show up in issue listings too; ``is_pull_request`` marks them.
    """

    number: int
    title: str
    body: str
    author: str  # Login of the user who opened the issue
    created_at: datetime
    state: IssueState
    html_url: str
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    is_pull_request: bool = False


@dataclass
class Comment:
    """A comment on an issue."""

    author: str
    created_at: datetime
    body: str
    html_url: str = ""


@dataclass
class MoveStats:
    """Statistics collected during a move."""

    issues_fetched: int = 0
    issues_moved: int = 0
    issues_skipped: int = 0
    comments_copied: int = 0
    target_issues_closed: int = 0
    source_issues_closed: int = 0


@dataclass
class MoveResult:
    """Result of a move run."""

    success: bool
    stats: MoveStats
    moved: dict[int, int] = field(default_factory=dict)  # source issue number -> target issue number
    error: Exception | None = None

"""
GitHub Issue Mover

Moves issues and their comments from one GitHub repository to another,
keeping author attribution, timestamps, labels, assignees and state, and
linking each original issue to its copy.
"""

from __future__ import annotations

from .cli import main
from .exceptions import ConfigurationError, MigrationError, TransportError
from .github_tracker import GitHubTracker
from .models import Comment, Issue, MigrationConfig, MoveResult, MoveStats, RepoRef
from .mover import IssueMover
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "Comment",
    "ConfigurationError",
    "GitHubTracker",
    "Issue",
    "IssueMover",
    "MigrationConfig",
    "MigrationError",
    "MoveResult",
    "MoveStats",
    "RepoRef",
    "TransportError",
    "main",
    "setup_logging",
]

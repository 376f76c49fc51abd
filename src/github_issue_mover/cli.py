"""
Command-line interface for the GitHub issue mover.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import asdict
from typing import TYPE_CHECKING

from . import github_utils as ghu
from .exceptions import ConfigurationError
from .github_tracker import GitHubTracker
from .models import STATE_FILTERS
from .mover import IssueMover
from .pacing import DEFAULT_REQUEST_DELAY
from .utils import setup_logging

if TYPE_CHECKING:
    from .models import MoveResult

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Move GitHub issues and their comments to another repository")

    # Positional arguments
    _ = parser.add_argument("source_repo", help="Source repository path (owner/repo)")
    _ = parser.add_argument("target_repo", help="Target repository path (owner/repo)")

    # Optional arguments with short forms
    _ = parser.add_argument(
        "--state",
        choices=STATE_FILTERS,
        default="open",
        help="Only move issues in this state (default: open)",
    )

    _ = parser.add_argument(
        "--label",
        "-l",
        action="append",
        dest="labels",
        help="Only move issues carrying at least one of these labels. Can be specified multiple times.",
    )

    _ = parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_REQUEST_DELAY,
        help=f"Seconds to wait before each issue and each comment (default: {DEFAULT_REQUEST_DELAY})",
    )

    _ = parser.add_argument(
        "--github-pass-token", help="Path for GitHub token in pass utility (default: github/cli/token)"
    )

    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def _print_report(result: MoveResult) -> None:
    print(f"Move {'PASSED' if result.success else 'FAILED'}")
    if result.error is not None:
        print(f"Error: {result.error}")
    for key, value in asdict(result.stats).items():
        print(f"  {key}: {value}")
    for source_number, target_number in result.moved.items():
        print(f"  #{source_number} -> #{target_number}")


def exit_code(result: MoveResult) -> int:
    if result.success:
        return EXIT_OK
    if isinstance(result.error, ConfigurationError):
        return EXIT_CONFIGURATION_ERROR
    return EXIT_FAILURE


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbose: bool = args.verbose
    setup_logging(verbose=verbose)
    logger = logging.getLogger(__name__)

    try:
        token = ghu.get_token(args.github_pass_token)
        mover = IssueMover(GitHubTracker(ghu.get_client(token)), request_delay=args.delay)
        mover.set_config(args.source_repo, args.target_repo, state=args.state, label_filter=args.labels)
        result = asyncio.run(mover.move())
    except ConfigurationError:
        logger.exception("Invalid configuration")
        sys.exit(EXIT_CONFIGURATION_ERROR)
    except Exception:
        logger.exception("Issue move failed")
        sys.exit(EXIT_FAILURE)

    _print_report(result)
    sys.exit(exit_code(result))

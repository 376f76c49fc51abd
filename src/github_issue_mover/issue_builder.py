"""Build bodies for moved issues and comments."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Comment, Issue


def ordinal(day: int) -> str:
    """Return the day of month with its English suffix (1st, 2nd, 11th, 23rd)."""
    if 11 <= day % 100 <= 13:  # noqa: PLR2004
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_created_at(timestamp: dt.datetime | str) -> str:
    """Format a timestamp for attribution headers.

    Args:
        timestamp: Datetime or ISO 8601 string. Naive values are taken as UTC.

    Returns:
        Timestamp in UTC, e.g. "January 1st 2020, 12:00 am"
    """
    if isinstance(timestamp, str):
        timestamp = dt.datetime.fromisoformat(timestamp)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=dt.UTC)
    timestamp = timestamp.astimezone(dt.UTC)

    hour = timestamp.hour % 12 or 12
    meridiem = "am" if timestamp.hour < 12 else "pm"  # noqa: PLR2004
    return f"{timestamp:%B} {ordinal(timestamp.day)} {timestamp.year}, {hour}:{timestamp:%M} {meridiem}"


def build_attribution(author: str, created_at: dt.datetime | str) -> str:
    return f"From @{author} on {format_created_at(created_at)}"


def build_issue_body(issue: Issue) -> str:
    """Build the body of the copy of ``issue`` in the target repository.

    The original text is wrapped between an attribution header and a footer
    linking back to the original issue.
    """
    body = build_attribution(issue.author, issue.created_at) + "\n\n"
    body += issue.body or ""
    body += f"\n\n_Copied from original issue: {issue.html_url}_"
    return body


def build_comment_body(comment: Comment) -> str:
    """Build the body of a copied comment."""
    return f"{build_attribution(comment.author, comment.created_at)}\n\n{comment.body or ''}"


def build_moved_notice(new_issue: Issue) -> str:
    """Build the comment left on the original issue."""
    return f"This issue was moved to {new_issue.html_url}"

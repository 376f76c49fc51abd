from __future__ import annotations

import logging
import os
from typing import Final

from github import Auth, Github

from . import utils

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "github/cli/token"  # noqa: S105

REQUEST_TIMEOUT: Final[int] = 5  # seconds
PAGE_SIZE: Final[int] = 100


def get_token(pass_path: str | None = None) -> str | None:
    """Get GitHub token from pass path, env var GITHUB_TOKEN, or default pass location."""
    # An explicit pass path must work; its errors propagate
    if pass_path:
        return utils.get_pass_value(pass_path)

    token: str | None = os.environ.get(_TOKEN_ENV_VAR)
    if token:
        return token

    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATH)
    except utils.PassError:
        logger.warning("No GitHub token specified nor found, using anonymous access")
        return None


def get_client(token: str | None = None, *, timeout: int = REQUEST_TIMEOUT, per_page: int = PAGE_SIZE) -> Github:
    """Get a GitHub client using the token. Falls back to anonymous access without a token."""
    auth = Auth.Token(token) if token else None
    return Github(auth=auth, timeout=timeout, per_page=per_page)

"""
Utility functions for the GitHub issue mover.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from typing import Final

LOG_FILE: Final[str] = "issue-mover.log"

_PASS_PATH_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_-]+(?:/[A-Za-z0-9_-]+)*")
_LOOPBACK_GPG_OPTS: Final[str] = "--pinentry-mode=loopback --passphrase-fd 0"


class PassError(Exception):
    """Base class for pass-related errors."""


class InvalidPassPathError(PassError):
    """Raised when the pass path is malformed or has no entry."""


class PassphraseRequiredError(PassError):
    """Raised when pass needs a GPG passphrase that cannot be obtained."""


def setup_logging(*, verbose: bool = False) -> None:
    """Configure logging to the console and to the run log file."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler(LOG_FILE, mode="a")],
    )


def _run_pass(pass_path: str, *, passphrase: str | None = None) -> subprocess.CompletedProcess[str]:
    env = None
    if passphrase is not None:
        env = os.environ.copy() | {"PASSWORD_STORE_GPG_OPTS": _LOOPBACK_GPG_OPTS}
    return subprocess.run(  # noqa: S603
        ["pass", pass_path],  # noqa: S607
        input=passphrase,
        capture_output=True,
        text=True,
        check=True,
        env=env,
    )


def _describe_failure(pass_path: str, error: subprocess.CalledProcessError) -> str:
    return (
        f"Failed to get value from pass at '{pass_path}'.\n"
        f"Output: {error.stdout.strip()}\n"
        f"Error: {error.stderr.strip()}\n"
        f"Return code: {error.returncode}"
    )


def _needs_passphrase(error: subprocess.CalledProcessError) -> bool:
    stderr = error.stderr.lower()
    return error.returncode == 2 and "gpg" in stderr and "public key decryption failed" in stderr  # noqa: PLR2004


def get_pass_value(pass_path: str) -> str:
    """Read a secret from the pass password store.

    If gpg cannot decrypt without a passphrase, the user is prompted for it
    once. Prompting fails in non-interactive sessions.

    Raises:
        InvalidPassPathError: If the path is malformed or not in the store
        PassphraseRequiredError: If a passphrase was needed but not usable
        PassError: For any other pass failure
    """
    if not _PASS_PATH_PATTERN.fullmatch(pass_path):
        msg = f"Invalid pass path: {pass_path}"
        raise InvalidPassPathError(msg)

    try:
        return _run_pass(pass_path).stdout.strip()
    except FileNotFoundError as e:
        msg = "The pass utility is not installed."
        raise PassError(msg) from e
    except subprocess.CalledProcessError as e:
        if e.returncode == 1 and "not in the password store" in e.stderr.lower():
            msg = f"Pass path '{pass_path}' not found or invalid."
            raise InvalidPassPathError(msg) from e
        if not _needs_passphrase(e):
            raise PassError(_describe_failure(pass_path, e)) from e

    try:
        passphrase = input("Enter passphrase for GPG key used by pass: ")
    except EOFError as e:
        msg = "Passphrase input was interrupted. Please run the command in an interactive session."
        raise PassphraseRequiredError(msg) from e

    try:
        return _run_pass(pass_path, passphrase=passphrase).stdout.strip()
    except subprocess.CalledProcessError as e:
        raise PassphraseRequiredError(_describe_failure(pass_path, e)) from e

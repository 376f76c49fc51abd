"""
Custom exception classes for the GitHub issue mover.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for issue move errors."""


class ConfigurationError(MigrationError):
    """Raised when source/target repositories or filters are missing or invalid."""


class TransportError(MigrationError):
    """Raised when a call to the issue tracker API fails."""

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix Exceptions - Custom exceptions for the bwcmatrix package.

Every failure in version classification is fatal: the build that asked for
the matrix is expected to stop and surface the message.
"""


class BwcError(Exception):
    """Base exception for all bwcmatrix errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(BwcError):
    """Raised when configuration is invalid."""

    pass


class VersionParseError(BwcError):
    """Raised when version strings or declarations cannot be parsed."""

    pass


class VersionConsistencyError(BwcError):
    """Raised when parsed versions contradict the branching conventions."""

    pass


class AuthoritativeMismatchError(BwcError):
    """Raised when local release state disagrees with the authoritative list."""

    pass


class RepositorySettingsError(BwcError):
    """Raised when snapshot repository settings are invalid."""

    pass

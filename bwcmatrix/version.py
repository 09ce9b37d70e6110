# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix Versions - Immutable version triples and declaration parsing.

Versions are declared in source as constants such as:

    public static final Version V_2_1_0 = new Version(2010099, ...);

Only the numeric triple matters for compatibility computation; pre-release
qualifiers are accepted while parsing but do not take part in ordering.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple
import re

from bwcmatrix.errors import explain_invalid_version
from bwcmatrix.exceptions import VersionParseError


# Release-version constant declaration, e.g. "    public static final Version V_2_1_0 = ..."
DECLARATION_PATTERN = re.compile(
    r"\W+public static final (LegacyES)?Version V_(\d+)_(\d+)_(\d+)(_alpha\d+|_beta\d+|_rc\d+|_ee\d+)? .*"
)

VERSION_STRING_PATTERN = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(-alpha\d+|-beta\d+|-rc\d+)?(-SNAPSHOT)?$"
)


@dataclass(frozen=True, order=True)
class Version:
    """
    A released or planned version, ordered by (major, minor, revision).
    """

    major: int
    minor: int
    revision: int

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0 or self.revision < 0:
            raise VersionParseError(
                "Version components must be non-negative",
                details={"version": (self.major, self.minor, self.revision)},
            )

    @classmethod
    def from_string(cls, value: str) -> "Version":
        """
        Parse "MAJOR.MINOR.REVISION" with optional qualifier and -SNAPSHOT suffix.

        Raises:
            VersionParseError: If the string is not a version
        """
        if not isinstance(value, str):
            raise VersionParseError(explain_invalid_version(repr(value)))
        match = VERSION_STRING_PATTERN.match(value.strip())
        if not match:
            raise VersionParseError(explain_invalid_version(value))
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    def on_or_after(self, other: "Version | str") -> bool:
        return self >= as_version(other)

    def before(self, other: "Version | str") -> bool:
        return self < as_version(other)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}"


def as_version(value: Version | str) -> Version:
    """Coerce a Version or version string to a Version."""
    if isinstance(value, Version):
        return value
    return Version.from_string(value)


def parse_declaration(line: str) -> Version | None:
    """
    Extract a Version from a single declaration line.

    Lines that are not release-version constant declarations are not an
    error; they simply yield None.

    Args:
        line: A raw source line

    Returns:
        The declared Version, or None if the line does not match
    """
    match = DECLARATION_PATTERN.fullmatch(line)
    if not match:
        return None
    return Version(int(match.group(2)), int(match.group(3)), int(match.group(4)))


def parse_declarations(lines: Iterable[str]) -> Tuple[Version, ...]:
    """
    Parse every declaration line into a sorted, duplicate-free tuple.

    Args:
        lines: Raw source lines

    Returns:
        Sorted tuple of unique versions (may be empty)
    """
    found = set()
    for line in lines:
        version = parse_declaration(line.rstrip("\r\n"))
        if version is not None:
            found.add(version)
    return tuple(sorted(found))

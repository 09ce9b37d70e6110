# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation. The defaults encode
the historical version lineage of the search engine: the 1.x line was
released after the legacy 7.x line, so major 1 follows major 7, and the
first two majors carry extra compatibility lineages.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Tuple
import re

from bwcmatrix.version import Version


@dataclass(frozen=True)
class LineageTransition:
    """
    Extra compatibility lineages for a specific current major.

    When the current version's major equals ``major``, the lineages listed
    here are added to the compatibility sets on top of the regular
    previous-major rules.
    """

    major: int

    # Whole major lines prepended to the index-compatible list
    index_extra_majors: Tuple[int, ...] = ()

    # Major whose latest minor line seeds the wire-compatible list (None: previous major)
    wire_base_major: int | None = None

    # Whole major lines added to the wire-compatible list
    wire_extra_majors: Tuple[int, ...] = ()


DEFAULT_TRANSITIONS: Tuple[LineageTransition, ...] = (
    # 1.0 reads 6.x indices and speaks to every 7.x node
    LineageTransition(major=1, index_extra_majors=(6,), wire_base_major=6, wire_extra_majors=(7,)),
    # 2.0 still reads 7.x indices and speaks to every 1.x node
    LineageTransition(major=2, index_extra_majors=(7,), wire_base_major=7, wire_extra_majors=(1,)),
)

_BRANCH_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._/-]*$")


@dataclass(frozen=True)
class BwcConfig:
    """
    Immutable configuration for backward-compatibility version resolution.

    Only ``current_version`` and the file locations vary between builds; the
    remaining fields are lineage rules that change once per major release.
    """

    # Version this build produces (None: read from version_properties)
    current_version: Version | None = None

    # Source file holding the version constant declarations
    version_source: Path | None = None

    # Java properties file holding the current version
    version_properties: Path | None = None

    # Key of the current version inside version_properties
    properties_key: str = "opensearch"

    # Branch that builds the current version
    main_branch: str = "master"

    # Number of major lines retained outside the legacy window
    supported_majors: int = 2

    # Number of major lines retained inside the legacy window
    legacy_supported_majors: int = 3

    # Current majors below this value are inside the legacy window
    legacy_window_end_major: int = 3

    # First ever release: nothing else is unreleased while it is current
    bootstrap_version: Version = Version(1, 0, 0)

    # Versions before this are never reported as released
    first_release_version: Version = Version(1, 0, 0)

    # Predecessor-product majors: ordered before every product major and never released here
    legacy_majors: Tuple[int, ...] = (6, 7)

    # Majors that continue an older numbering, as (major, predecessor major) pairs;
    # a mapping is accepted and normalized
    major_aliases: Tuple[Tuple[int, int], ...] | Mapping[int, int] = ((1, 7),)

    # Historical compatibility extensions per current major
    transitions: Tuple[LineageTransition, ...] = DEFAULT_TRANSITIONS

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if self.current_version is not None and not isinstance(self.current_version, Version):
            errors.append(f"current_version must be a Version, got {self.current_version!r}")

        if not self.properties_key or not self.properties_key.strip():
            errors.append("properties_key must not be empty")

        if not self.main_branch or not _BRANCH_PATTERN.match(self.main_branch):
            errors.append(f"Invalid main_branch: {self.main_branch!r}")

        if self.supported_majors < 1:
            errors.append(f"supported_majors must be >= 1, got {self.supported_majors}")

        if self.legacy_supported_majors < 1:
            errors.append(
                f"legacy_supported_majors must be >= 1, got {self.legacy_supported_majors}"
            )

        aliases: Dict[int, int] = dict(self.major_aliases)
        for major, predecessor in aliases.items():
            if not isinstance(major, int) or not isinstance(predecessor, int):
                errors.append(f"major_aliases entries must be integers, got {major!r}: {predecessor!r}")
            elif major == predecessor:
                errors.append(f"major {major} cannot alias itself")

        seen: List[int] = []
        for transition in self.transitions:
            if transition.major in seen:
                errors.append(f"Duplicate lineage transition for major {transition.major}")
            seen.append(transition.major)

        # Raise all errors at once
        if errors:
            from bwcmatrix.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

        # Keep the instance hashable whatever sequence types were passed in
        object.__setattr__(self, "major_aliases", tuple(sorted(aliases.items())))
        object.__setattr__(self, "legacy_majors", tuple(self.legacy_majors))
        object.__setattr__(self, "transitions", tuple(self.transitions))

    @property
    def aliases(self) -> Dict[int, int]:
        """Major aliases as a fresh dict, {major: predecessor major}."""
        return dict(self.major_aliases)

    def effective_major(self, major: int) -> int:
        """Major number on the continuous lineage scale (1 -> 7 by default)."""
        return self.aliases.get(major, major)

    def previous_major(self, major: int) -> int:
        """Major line released immediately before ``major``."""
        if major in self.aliases:
            return self.aliases[major]
        return major - 1

    def expected_major_count(self, current_major: int) -> int:
        if current_major < self.legacy_window_end_major:
            return self.legacy_supported_majors
        return self.supported_majors

    def sort_key(self, version: Version) -> Tuple[int, Version]:
        """Order predecessor-product versions before every product version."""
        return (0 if version.major in self.legacy_majors else 1, version)

    def transition_for(self, major: int) -> LineageTransition | None:
        for transition in self.transitions:
            if transition.major == major:
                return transition
        return None

    def with_updates(self, **kwargs) -> "BwcConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import fields

        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(kwargs)
        return BwcConfig(**current)


DEFAULT_CONFIG = BwcConfig()

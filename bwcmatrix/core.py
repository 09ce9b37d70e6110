# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix Core - Backward-compatibility version resolution.

Given every version declared in source and the version this build produces,
figure out which versions are unreleased, which branch and build project
each unreleased version is built from, and which versions the current one
is index and wire compatible with.

With M the last released major and N its last released minor, the versions
being worked on at any time are:

- the unreleased major, M+1.0.0, on the main branch
- the unreleased minor, M.N.0, on the ``M.x`` branch
- the unreleased bugfix, M.N.c (c > 0), on the ``M.N`` branch
- the unreleased maintenance, (M-1).d.e (d > 0, e > 0), on the ``(M-1).d`` branch
- the unreleased staged minor, M.(N-2).0, on the ``M.(N-2)`` branch, while
  a minor is feature frozen

When a version is released, the next patch is declared on every later branch,
so the leaves of the version tree are always the unreleased versions.
"""

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

import structlog

from bwcmatrix.config import DEFAULT_CONFIG, BwcConfig
from bwcmatrix.exceptions import (
    AuthoritativeMismatchError,
    VersionConsistencyError,
    VersionParseError,
)
from bwcmatrix.version import Version, as_version, parse_declarations


class ProjectPath(str, Enum):
    """Build project that checks out and builds an unreleased version."""

    CURRENT = ":distribution"
    MINOR = ":distribution:bwc:minor"
    STAGED = ":distribution:bwc:staged"
    BUGFIX = ":distribution:bwc:bugfix"
    MAINTENANCE = ":distribution:bwc:maintenance"


@dataclass(frozen=True)
class UnreleasedVersionInfo:
    """Where an unreleased version lives and how it gets built."""

    version: Version
    branch: str
    gradle_project_path: str


def _group_by(versions: Iterable[Version], key: str) -> Dict[int, Tuple[Version, ...]]:
    groups: Dict[int, List[Version]] = {}
    for version in sorted(versions):
        groups.setdefault(getattr(version, key), []).append(version)
    return {k: tuple(v) for k, v in groups.items()}


class BwcVersions:
    """
    Read-only backward-compatibility view over a set of declared versions.

    Everything except the compatibility lists is computed at construction;
    those are computed on first access and cached. All exposed collections
    are tuples or read-only mappings.
    """

    def __init__(
        self,
        versions: Iterable[Version],
        current_version: Version | str,
        config: BwcConfig = DEFAULT_CONFIG,
    ):
        """
        Args:
            versions: Every declared version
            current_version: Version the build is configured to produce
            config: Lineage rules

        Raises:
            VersionParseError: If no versions were supplied
            VersionConsistencyError: If the versions break the branching conventions
        """
        logger = structlog.get_logger()

        all_versions = tuple(sorted(set(versions), key=config.sort_key))
        if not all_versions:
            raise VersionParseError("Could not parse any versions")

        self._config = config
        self._current = all_versions[-1]

        # Only the supported majors matter for BWC; older declarations may linger in source.
        window_floor = config.effective_major(self._current.major) - 2
        retained = [v for v in all_versions if config.effective_major(v.major) > window_floor]
        self._all_versions = tuple(retained)
        self._group_by_major: Mapping[int, Tuple[Version, ...]] = MappingProxyType(
            _group_by(retained, "major")
        )

        self._assert_current_version_matches(as_version(current_version))
        self._assert_supported_majors()

        self._unreleased = self._compute_unreleased()
        infos: Dict[Version, UnreleasedVersionInfo] = {}
        for version in self._unreleased:
            info = self._info_for(version)
            infos[version] = info
            logger.debug(
                "unreleased_version_mapped",
                version=str(version),
                branch=info.branch,
                project=info.gradle_project_path,
            )
        self._unreleased_info: Mapping[Version, UnreleasedVersionInfo] = MappingProxyType(infos)

        logger.info(
            "unreleased_versions_resolved",
            current=str(self._current),
            majors=sorted(self._group_by_major),
            unreleased=[str(v) for v in self._unreleased],
        )

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        current_version: Version | str,
        config: BwcConfig = DEFAULT_CONFIG,
    ) -> "BwcVersions":
        """
        Build from raw declaration lines; non-declaration lines are skipped.

        Raises:
            VersionParseError: If no line declares a version
        """
        versions = parse_declarations(lines)
        structlog.get_logger().info("bwc_versions_parsed", count=len(versions))
        return cls(versions, current_version, config)

    # ------------------------------------------------------------------
    # Construction checks
    # ------------------------------------------------------------------

    def _assert_current_version_matches(self, configured: Version) -> None:
        if configured != self._current:
            raise VersionConsistencyError(
                "Parsed versions latest version does not match the one configured in build properties. "
                f"Parsed latest version is {self._current} but the build has {configured}",
                details={"parsed": str(self._current), "configured": str(configured)},
            )

    def _assert_supported_majors(self) -> None:
        majors = sorted(self._group_by_major)
        expected = self._config.expected_major_count(self._current.major)
        if (
            len(majors) != expected
            and self._current.minor != 0
            and self._current.revision != 0
        ):
            raise VersionConsistencyError(
                f"Expected exactly {expected} majors in parsed versions but found: {majors}",
                details={"majors": majors, "expected": expected},
            )

    # ------------------------------------------------------------------
    # Unreleased versions
    # ------------------------------------------------------------------

    def _latest_by_key(self, groups: Mapping[int, Tuple[Version, ...]], key: int) -> Version:
        versions = groups.get(key, ())
        if not versions:
            raise VersionConsistencyError(
                "Unexpected number of versions in collection",
                details={"key": key, "available": sorted(groups)},
            )
        return max(versions)

    def _latest_in_minor(self, major: int, minor: int) -> Version | None:
        candidates = [v for v in self._group_by_major.get(major, ()) if v.minor == minor]
        return max(candidates) if candidates else None

    @cached_property
    def _released_major_grouped_by_minor(self) -> Mapping[int, Tuple[Version, ...]]:
        """
        Minor groups of the newest major that has released versions.

        If the current major holds only the current version (an unreleased
        x.0.0), the previous major is the one still receiving releases.
        """
        current_major = self._current.major
        current_major_versions = self._group_by_major.get(current_major, ())
        if len(current_major_versions) == 1:
            previous = self._config.previous_major(current_major)
            source = self._group_by_major.get(previous)
            if source is None:
                raise VersionConsistencyError(
                    f"Expected to find versions for previous major {previous}",
                    details={"current": str(self._current), "majors": sorted(self._group_by_major)},
                )
        else:
            source = current_major_versions
        return MappingProxyType(_group_by(source, "minor"))

    def _compute_unreleased(self) -> Tuple[Version, ...]:
        current = self._current
        unreleased: List[Version] = [current]

        if current == self._config.bootstrap_version:
            return tuple(unreleased)

        # The tip of the previous major is unreleased, be it a minor or a bugfix
        if current.major != self._config.bootstrap_version.major:
            latest_of_previous_major = self._latest_by_key(
                self._group_by_major, self._config.previous_major(current.major)
            )
            unreleased.append(latest_of_previous_major)
            if latest_of_previous_major.revision == 0:
                previous_minor = self._latest_in_minor(
                    latest_of_previous_major.major, latest_of_previous_major.minor - 1
                )
                if previous_minor is not None:
                    unreleased.append(previous_minor)

        group_by_minor = self._released_major_grouped_by_minor
        greatest_minor = max(group_by_minor, default=0)

        # The last bugfix of the newest minor is always unreleased
        unreleased.append(self._latest_by_key(group_by_minor, greatest_minor))

        if len(group_by_minor.get(greatest_minor, ())) == 1:
            # The newest minor is itself unreleased
            unreleased.append(self._latest_by_key(group_by_minor, greatest_minor - 1))
            if len(group_by_minor.get(greatest_minor - 1, ())) == 1:
                # The minor before it is staged; the one before that still takes bugfixes
                if greatest_minor >= 2:
                    unreleased.append(self._latest_by_key(group_by_minor, greatest_minor - 2))

        return tuple(sorted(set(unreleased), key=self._config.sort_key))

    # ------------------------------------------------------------------
    # Branch and build project mapping
    # ------------------------------------------------------------------

    def _project_path_for(self, version: Version) -> ProjectPath:
        if version == self._current:
            return ProjectPath.CURRENT

        if version.revision == 0:
            staged_or_minor = [v for v in self._unreleased if v.revision == 0]
            if len(staged_or_minor) > 2:
                if staged_or_minor[-2] == version:
                    return ProjectPath.MINOR
                return ProjectPath.STAGED
            return ProjectPath.MINOR

        if version in self._released_major_grouped_by_minor.get(version.minor, ()):
            return ProjectPath.BUGFIX
        return ProjectPath.MAINTENANCE

    def _branch_for(self, version: Version, project_path: str) -> str:
        if project_path == ProjectPath.CURRENT:
            return self._config.main_branch
        if project_path == ProjectPath.MINOR:
            # The .x branch tracks the newest minor of a major
            latest_in_major = self._latest_by_key(self._group_by_major, version.major)
            if latest_in_major.minor == version.minor:
                return f"{version.major}.x"
            return f"{version.major}.{version.minor}"
        if project_path in (ProjectPath.STAGED, ProjectPath.MAINTENANCE, ProjectPath.BUGFIX):
            return f"{version.major}.{version.minor}"
        raise VersionConsistencyError(
            "Unexpected Gradle project name",
            details={"version": str(version), "project": str(project_path)},
        )

    def _info_for(self, version: Version) -> UnreleasedVersionInfo:
        project_path = self._project_path_for(version)
        return UnreleasedVersionInfo(
            version=version,
            branch=self._branch_for(version, project_path),
            gradle_project_path=project_path.value,
        )

    # ------------------------------------------------------------------
    # Public read-only API
    # ------------------------------------------------------------------

    @property
    def config(self) -> BwcConfig:
        return self._config

    @property
    def current_version(self) -> Version:
        return self._current

    @property
    def all_versions(self) -> Tuple[Version, ...]:
        """Every retained version (inside the supported major window), sorted."""
        return self._all_versions

    @property
    def group_by_major(self) -> Mapping[int, Tuple[Version, ...]]:
        return self._group_by_major

    @property
    def unreleased(self) -> Tuple[Version, ...]:
        """Unreleased versions, sorted ascending; always includes the current version."""
        return self._unreleased

    def unreleased_info(self, version: Version | str) -> UnreleasedVersionInfo | None:
        """
        Return info about an unreleased version, or None if it is released.
        """
        return self._unreleased_info.get(as_version(version))

    def for_previous_unreleased(self) -> Iterator[UnreleasedVersionInfo]:
        """Yield info for every unreleased version except the current one."""
        for version in self._unreleased:
            if version != self._current:
                yield self._unreleased_info[version]

    @cached_property
    def released(self) -> Tuple[Version, ...]:
        """
        Versions considered released.

        Declarations from the legacy majors, or before
        ``first_release_version``, are never published by this project.
        """
        unreleased = set(self._unreleased)
        return tuple(
            v
            for v in self._all_versions
            if v not in unreleased
            and v.major not in self._config.legacy_majors
            and v.on_or_after(self._config.first_release_version)
        )

    def _lineage(self, major: int) -> Tuple[Version, ...]:
        return self._group_by_major.get(major, ())

    @cached_property
    def index_compatible(self) -> Tuple[Version, ...]:
        """
        Versions whose indices the current version can read.

        Ordered by lineage: historical extras first, then the previous and
        current majors.
        """
        current_major = self._current.major
        previous_major = self._config.previous_major(current_major)
        result = [
            v
            for v in self._lineage(previous_major) + self._lineage(current_major)
            if v != self._current
        ]
        transition = self._config.transition_for(current_major)
        if transition is not None:
            extras: List[Version] = []
            for major in transition.index_extra_majors:
                extras.extend(self._lineage(major))
            result = extras + result
        return tuple(result)

    @cached_property
    def wire_compatible(self) -> Tuple[Version, ...]:
        """
        Versions the current version can talk to over the wire, sorted.

        That is the newest minor line of the previous major, any historical
        extra lineages, and the whole current major (minus current itself).
        """
        current_major = self._current.major
        transition = self._config.transition_for(current_major)
        base_major = self._config.previous_major(current_major)
        if transition is not None and transition.wire_base_major is not None:
            base_major = transition.wire_base_major

        base_lineage = self._group_by_major.get(base_major)
        if not base_lineage:
            raise VersionConsistencyError(
                f"Expected to find a list of versions for version: {base_major}",
                details={"current": str(self._current), "majors": sorted(self._group_by_major)},
            )

        last_minor = base_lineage[-1].minor
        wire_compat = {v for v in base_lineage if v.minor == last_minor}

        if transition is not None:
            for major in transition.wire_extra_majors:
                wire_compat.update(self._lineage(major))

        wire_compat.update(self._lineage(current_major))
        wire_compat.discard(self._current)
        return tuple(sorted(wire_compat, key=self._config.sort_key))

    @property
    def unreleased_index_compatible(self) -> Tuple[Version, ...]:
        unreleased = set(self._unreleased)
        return tuple(v for v in self.index_compatible if v in unreleased)

    @property
    def unreleased_wire_compatible(self) -> Tuple[Version, ...]:
        unreleased = set(self._unreleased)
        return tuple(v for v in self.wire_compatible if v in unreleased)

    # ------------------------------------------------------------------
    # Authoritative cross-check
    # ------------------------------------------------------------------

    def compare_to_authoritative(self, authoritative_released: Iterable[Version | str]) -> None:
        """
        Check local release state against an authoritative list of releases.

        Args:
            authoritative_released: Versions known to be published

        Raises:
            AuthoritativeMismatchError: Listing every version the build thinks
                is released but is not, and every released version the build
                still considers unreleased
        """
        authoritative = {as_version(v) for v in authoritative_released}

        not_really_released = sorted(set(self.released) - authoritative, key=self._config.sort_key)
        incorrectly_unreleased = sorted(authoritative & set(self._unreleased), key=self._config.sort_key)

        if not not_really_released and not incorrectly_unreleased:
            return

        lines = ["out-of-date released versions"]
        if not_really_released:
            lines.append(
                "Following versions are not really released, but the build thinks they are: "
                + ", ".join(str(v) for v in not_really_released)
            )
        if incorrectly_unreleased:
            lines.append(
                "Build considers versions unreleased, but they are released according to an "
                "authoritative source: "
                + ", ".join(str(v) for v in incorrectly_unreleased)
            )
            lines.append(
                "The next versions probably need to be added to the version declarations "
                "(the current version doesn't count)."
            )

        structlog.get_logger().error(
            "authoritative_check_failed",
            not_really_released=[str(v) for v in not_really_released],
            incorrectly_unreleased=[str(v) for v in incorrectly_unreleased],
        )
        raise AuthoritativeMismatchError(
            "\n".join(lines),
            details={
                "not_really_released": [str(v) for v in not_really_released],
                "incorrectly_unreleased": [str(v) for v in incorrectly_unreleased],
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly summary of the whole matrix.

        Wire lists are empty when the wire base lineage is not declared, as for
        the bootstrap version alone.
        """
        try:
            wire_compatible = [str(v) for v in self.wire_compatible]
            unreleased_wire_compatible = [str(v) for v in self.unreleased_wire_compatible]
        except VersionConsistencyError as e:
            structlog.get_logger().warning(
                "wire_lineage_missing",
                current=str(self._current),
                reason=e.message,
            )
            wire_compatible = []
            unreleased_wire_compatible = []

        return {
            "current": str(self._current),
            "majors": sorted(self._group_by_major),
            "unreleased": [
                {
                    "version": str(info.version),
                    "branch": info.branch,
                    "gradle_project_path": info.gradle_project_path,
                }
                for info in (self._unreleased_info[v] for v in self._unreleased)
            ],
            "released": [str(v) for v in self.released],
            "index_compatible": [str(v) for v in self.index_compatible],
            "wire_compatible": wire_compatible,
            "unreleased_index_compatible": [str(v) for v in self.unreleased_index_compatible],
            "unreleased_wire_compatible": unreleased_wire_compatible,
        }

    def __repr__(self) -> str:
        return (
            f"BwcVersions(current={self._current}, "
            f"unreleased=[{', '.join(str(v) for v in self._unreleased)}])"
        )

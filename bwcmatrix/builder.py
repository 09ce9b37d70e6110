# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix Builder - Functional builder pattern for configuration.

This module provides pure functions for building BwcConfig objects.
Each function takes a config dict and returns a new dict with the
modification applied (immutable updates).
"""

from pathlib import Path
from typing import Any, Callable, Dict

from bwcmatrix.config import DEFAULT_TRANSITIONS, BwcConfig, LineageTransition
from bwcmatrix.version import Version, as_version


# Type alias for builder functions
ConfigDict = Dict[str, Any]
BuilderFunc = Callable[[ConfigDict], ConfigDict]


def create_empty_config() -> ConfigDict:
    """
    Create an initial configuration dictionary.

    Returns:
        Dict with default values for all configuration fields
    """
    return {
        "current_version": None,
        "version_source": None,
        "version_properties": None,
        "properties_key": "opensearch",
        "main_branch": "master",
        "supported_majors": 2,
        "legacy_supported_majors": 3,
        "legacy_window_end_major": 3,
        "bootstrap_version": Version(1, 0, 0),
        "first_release_version": Version(1, 0, 0),
        "legacy_majors": (6, 7),
        "major_aliases": {1: 7},
        "transitions": DEFAULT_TRANSITIONS,
    }


def with_current_version(config: ConfigDict, version: Version | str) -> ConfigDict:
    """
    Set the version this build produces.

    Args:
        config: Current configuration dictionary
        version: Version or version string, e.g. '2.1.0-SNAPSHOT'

    Returns:
        New configuration dictionary with the current version set
    """
    return {**config, "current_version": as_version(version)}


def with_version_source(config: ConfigDict, path: Path | str) -> ConfigDict:
    """
    Set the source file holding the version constant declarations.
    """
    return {**config, "version_source": Path(path)}


def with_version_properties(
    config: ConfigDict,
    path: Path | str,
    key: str = "opensearch",
) -> ConfigDict:
    """
    Read the current version from a properties file instead of setting it.

    Args:
        config: Current configuration dictionary
        path: Path to the properties file
        key: Property holding the version

    Returns:
        New configuration dictionary with the properties file set
    """
    return {**config, "version_properties": Path(path), "properties_key": key}


def with_main_branch(config: ConfigDict, branch: str) -> ConfigDict:
    return {**config, "main_branch": branch}


def with_supported_majors(
    config: ConfigDict,
    supported: int,
    legacy_supported: int | None = None,
) -> ConfigDict:
    """
    Set how many major lines are retained for compatibility.

    Args:
        config: Current configuration dictionary
        supported: Majors retained outside the legacy window
        legacy_supported: Majors retained inside the legacy window (unchanged if None)

    Returns:
        New configuration dictionary with the major window set
    """
    if supported < 1:
        raise ValueError(f"supported_majors must be >= 1, got {supported}")
    updated = {**config, "supported_majors": supported}
    if legacy_supported is not None:
        if legacy_supported < 1:
            raise ValueError(f"legacy_supported_majors must be >= 1, got {legacy_supported}")
        updated["legacy_supported_majors"] = legacy_supported
    return updated


def with_major_alias(config: ConfigDict, major: int, predecessor: int) -> ConfigDict:
    """
    Declare that ``major`` continues the ``predecessor`` major line.
    """
    return {**config, "major_aliases": {**dict(config["major_aliases"]), major: predecessor}}


def with_transition(config: ConfigDict, transition: LineageTransition) -> ConfigDict:
    """
    Add or replace the lineage transition for ``transition.major``.

    Args:
        config: Current configuration dictionary
        transition: Extra lineages for one current major

    Returns:
        New configuration dictionary with the transition table updated
    """
    kept = tuple(t for t in config["transitions"] if t.major != transition.major)
    ordered = tuple(sorted(kept + (transition,), key=lambda t: t.major))
    return {**config, "transitions": ordered}


def without_transitions(config: ConfigDict) -> ConfigDict:
    """Drop every historical lineage transition."""
    return {**config, "transitions": ()}


def build_config(config_dict: ConfigDict) -> BwcConfig:
    """
    Validate and build an immutable BwcConfig from a configuration dictionary.

    Args:
        config_dict: Configuration dictionary built using builder functions

    Returns:
        Validated, immutable BwcConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    return BwcConfig(**config_dict)


def pipe(*funcs: BuilderFunc) -> BuilderFunc:
    """
    Compose multiple builder functions into a single function.

        config = pipe(
            lambda c: with_current_version(c, "3.0.0"),
            lambda c: with_main_branch(c, "main"),
        )(create_empty_config())

    Args:
        *funcs: Builder functions to compose

    Returns:
        A single function that applies all functions in sequence
    """

    def composed(config: ConfigDict) -> ConfigDict:
        result = config
        for func in funcs:
            result = func(result)
        return result

    return composed


def create_config(
    current_version: Version | str | None = None,
    *,
    version_source: Path | str | None = None,
    version_properties: Path | str | None = None,
    properties_key: str = "opensearch",
    main_branch: str = "master",
    supported_majors: int | None = None,
    **kwargs: Any,
) -> BwcConfig:
    """
    Create bwcmatrix configuration from simple parameters.

    This is the recommended user-facing API for creating configurations.

    Args:
        current_version: Version the build produces (optional if version_properties is set)
        version_source: Source file declaring the version constants
        version_properties: Properties file holding the current version
        properties_key: Property holding the version (default: "opensearch")
        main_branch: Branch building the current version (default: "master")
        supported_majors: Majors retained outside the legacy window (default: 2)
        **kwargs: Additional configuration options

    Returns:
        Validated, immutable BwcConfig instance

    Example:
        config = create_config(
            "3.1.0",
            version_source="server/src/main/java/org/opensearch/Version.java",
            main_branch="main",
        )
    """
    config_dict = create_empty_config()

    if current_version is not None:
        config_dict = with_current_version(config_dict, current_version)

    if version_source:
        config_dict = with_version_source(config_dict, version_source)

    if version_properties:
        config_dict = with_version_properties(config_dict, version_properties, properties_key)

    if main_branch:
        config_dict = with_main_branch(config_dict, main_branch)

    if supported_majors is not None:
        config_dict = with_supported_majors(config_dict, supported_majors)

    # Apply any additional kwargs
    for key, value in kwargs.items():
        if key in config_dict:
            config_dict[key] = value

    return build_config(config_dict)

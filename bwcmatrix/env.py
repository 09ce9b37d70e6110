# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration helpers.

CI jobs usually know the checkout layout and the version under build only
through environment variables; these helpers turn them into a BwcConfig.
"""

from __future__ import annotations

import os

from bwcmatrix.builder import create_config
from bwcmatrix.config import BwcConfig
from bwcmatrix.errors import (
    explain_invalid_supported_majors_env,
    explain_missing_current_version,
)
from bwcmatrix.exceptions import ConfigurationError, VersionParseError
from bwcmatrix.version import Version


def _parse_supported_majors(value: str | None) -> int | None:
    if not value:
        return None
    try:
        majors = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_supported_majors_env(value)) from exc
    if majors < 1:
        raise ConfigurationError(explain_invalid_supported_majors_env(value))
    return majors


def _parse_current_version(value: str | None) -> Version | None:
    if not value:
        return None
    try:
        return Version.from_string(value)
    except VersionParseError as exc:
        raise ConfigurationError(
            f"Invalid BWC_CURRENT_VERSION value: {value!r}",
            details={"cause": exc.message},
        ) from exc


def create_config_from_env() -> BwcConfig:
    """
    Create a BwcConfig from environment variables.

    Either BWC_CURRENT_VERSION or BWC_VERSION_PROPERTIES must be set.

    Environment variables:
        - BWC_CURRENT_VERSION: Version this build produces, e.g. '2.1.0-SNAPSHOT'
        - BWC_VERSION_SOURCE: Source file declaring the version constants
        - BWC_VERSION_PROPERTIES: Properties file holding the current version
        - BWC_PROPERTIES_KEY: Property holding the version (default: opensearch)
        - BWC_MAIN_BRANCH: Branch building the current version (default: master)
        - BWC_SUPPORTED_MAJORS: Majors retained outside the legacy window (default: 2)
    """

    current_version = _parse_current_version(os.getenv("BWC_CURRENT_VERSION"))
    version_properties = os.getenv("BWC_VERSION_PROPERTIES")

    if current_version is None and not version_properties:
        raise ConfigurationError(explain_missing_current_version())

    return create_config(
        current_version,
        version_source=os.getenv("BWC_VERSION_SOURCE") or None,
        version_properties=version_properties or None,
        properties_key=os.getenv("BWC_PROPERTIES_KEY", "opensearch"),
        main_branch=os.getenv("BWC_MAIN_BRANCH", "master"),
        supported_majors=_parse_supported_majors(os.getenv("BWC_SUPPORTED_MAJORS")),
    )

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for bwcmatrix.

These helpers centralize wording for common configuration errors so that
all modules present consistent, actionable messages.
"""


def explain_missing_current_version() -> str:
    """
    Explain that no current version was configured.
    """

    return (
        "Current version is not configured. "
        "Set BWC_CURRENT_VERSION, point BWC_VERSION_PROPERTIES at a version.properties file, "
        "or pass current_version=... to create_config()."
    )


def explain_missing_version_source() -> str:
    """
    Explain that the declaration source file is required for loading.
    """

    return (
        "version_source is not configured. "
        "bwcmatrix needs the source file holding the version constant declarations. "
        "Set BWC_VERSION_SOURCE or pass version_source=... to create_config()."
    )


def explain_missing_file(kind: str, path: str) -> str:
    """
    Explain that a configured file does not exist.
    """

    return f"The {kind} file {path!r} does not exist or is not a regular file."


def explain_missing_properties_key(key: str, path: str) -> str:
    """
    Explain that the version properties file lacks the configured key.
    """

    return (
        f"No {key!r} entry found in {path!r}. "
        f"Expected a line like '{key} = 2.0.0'."
    )


def explain_invalid_supported_majors_env(value: str | None) -> str:
    """
    Explain that BWC_SUPPORTED_MAJORS is invalid.
    """

    return (
        f"Invalid BWC_SUPPORTED_MAJORS value: {value!r}. "
        "It must be a positive integer number of major lines."
    )


def explain_invalid_version(value: str | None) -> str:
    """
    Explain that a version string could not be parsed.
    """

    return (
        f"Invalid version: {value!r}. "
        "Expected MAJOR.MINOR.REVISION, optionally followed by -alphaN, -betaN, -rcN and/or -SNAPSHOT."
    )

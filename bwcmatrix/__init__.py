# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix - Backward-compatibility version matrix for build tooling.

Parses release-version declarations, works out which versions are still
unreleased and which branch builds each of them, and computes the index and
wire compatible version lists used to plan BWC test runs.
"""

__version__ = "0.1.0"

# Configuration creation (user-facing API)
from bwcmatrix.builder import create_config
from bwcmatrix.config import BwcConfig, LineageTransition

# Core classification
from bwcmatrix.core import BwcVersions, ProjectPath, UnreleasedVersionInfo
from bwcmatrix.version import Version, parse_declaration, parse_declarations

# Loading from files and the environment
from bwcmatrix.env import create_config_from_env
from bwcmatrix.loader import load_bwc_versions, read_current_version, read_version_lines

# Snapshot repository settings
from bwcmatrix.repository import (
    S3RepositorySettings,
    from_settings,
    parse_byte_size,
    parse_time_value,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "create_config",
    "create_config_from_env",
    "BwcConfig",
    "LineageTransition",
    # Core
    "BwcVersions",
    "ProjectPath",
    "UnreleasedVersionInfo",
    "Version",
    "parse_declaration",
    "parse_declarations",
    # Loaders
    "load_bwc_versions",
    "read_current_version",
    "read_version_lines",
    # Repository settings
    "S3RepositorySettings",
    "from_settings",
    "parse_byte_size",
    "parse_time_value",
]

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix Loader - Reads version declarations and build properties from disk.

The classifier itself never touches the filesystem; these helpers turn the
files a build already has into the plain strings it consumes.
"""

from pathlib import Path
from typing import List

import structlog

from bwcmatrix.config import BwcConfig
from bwcmatrix.core import BwcVersions
from bwcmatrix.errors import (
    explain_missing_current_version,
    explain_missing_file,
    explain_missing_properties_key,
    explain_missing_version_source,
)
from bwcmatrix.exceptions import ConfigurationError
from bwcmatrix.version import Version


def _require_file(path: Path, kind: str) -> Path:
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(
            explain_missing_file(kind, str(path)),
            details={"path": str(path)},
        )
    return path


def read_version_lines(path: Path | str) -> List[str]:
    """
    Read every line of the version declaration source file.

    Args:
        path: Path to the source file declaring the version constants

    Returns:
        Lines without trailing newlines
    """
    source = _require_file(Path(path), "version source")
    return source.read_text(encoding="utf-8").splitlines()


def read_current_version(path: Path | str, key: str = "opensearch") -> Version:
    """
    Read the current version from a Java-style properties file.

    Accepts ``key = value`` and ``key: value`` entries; blank lines and
    ``#``/``!`` comments are ignored.

    Args:
        path: Path to the properties file
        key: Property holding the version

    Returns:
        The parsed current version (qualifiers dropped)
    """
    properties = _require_file(Path(path), "version properties")

    for raw in properties.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", "!")):
            continue
        for separator in ("=", ":"):
            if separator in line:
                name, value = line.split(separator, 1)
                break
        else:
            continue
        if name.strip() == key:
            return Version.from_string(value.strip())

    raise ConfigurationError(
        explain_missing_properties_key(key, str(properties)),
        details={"path": str(properties), "key": key},
    )


def load_bwc_versions(config: BwcConfig) -> BwcVersions:
    """
    Build BwcVersions from the files named in the configuration.

    The current version comes from ``config.current_version`` when set,
    otherwise from ``config.version_properties``.

    Raises:
        ConfigurationError: If a required file or setting is missing
    """
    logger = structlog.get_logger()

    if config.version_source is None:
        raise ConfigurationError(explain_missing_version_source())

    if config.current_version is not None:
        current = config.current_version
    elif config.version_properties is not None:
        current = read_current_version(config.version_properties, config.properties_key)
    else:
        raise ConfigurationError(explain_missing_current_version())

    lines = read_version_lines(config.version_source)
    logger.info(
        "version_source_loaded",
        path=str(config.version_source),
        lines=len(lines),
        current=str(current),
    )
    return BwcVersions.from_lines(lines, current, config)

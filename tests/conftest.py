# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for bwcmatrix tests.

Provides version sets modelled on real branching situations, declaration
source lines, and on-disk source/properties files.
"""

from pathlib import Path
from typing import List

import pytest

from bwcmatrix.version import Version


def v(value: str) -> Version:
    """Shorthand for Version.from_string in tests."""
    return Version.from_string(value)


def versions(*values: str) -> List[Version]:
    return [v(value) for value in values]


# Unreleased 5.0.0 on master, 4.1.0 on 4.x, 4.0.1 on 4.0
MINOR_VERSIONS = versions("4.0.1", "4.1.0", "5.0.0")

# 4.0.0 feature frozen but not yet released
STAGED_VERSIONS = versions("4.0.0", "4.1.0", "5.0.0")

# Current 4.1.0 with a maintenance line on 3.90
MAINTENANCE_VERSIONS = versions("3.90.1", "4.0.0", "4.1.0")

# Current 4.3.0 with released bugfixes on both majors
ACTIVE_VERSIONS = versions(
    "3.0.0", "3.0.1", "3.1.0", "3.1.1", "3.1.2",
    "4.0.0", "4.0.1", "4.1.0", "4.1.1", "4.2.0", "4.3.0",
)

# 2.0.0 still compatible with the legacy 7.x line
LEGACY_TWO_VERSIONS = versions(
    "7.10.0", "7.10.1", "7.10.2",
    "1.0.0", "1.1.0", "1.2.0", "1.2.1",
    "2.0.0",
)

# 1.1.0 compatible with the legacy 6.x and 7.x lines
LEGACY_ONE_VERSIONS = versions(
    "6.8.0", "6.8.1",
    "7.9.0", "7.10.0", "7.10.1", "7.10.2",
    "1.0.0", "1.1.0",
)


VERSION_SOURCE_LINES = [
    "/*",
    " * SPDX-License-Identifier: Apache-2.0",
    " */",
    "package org.opensearch;",
    "",
    "public class Version implements Comparable<Version> {",
    "    public static final int V_EMPTY_ID = 0;",
    "    public static final Version V_3_0_0 = new Version(3000099, org.apache.lucene.util.Version.LUCENE_9_0_0);",
    "    public static final Version V_3_0_1 = new Version(3000199, org.apache.lucene.util.Version.LUCENE_9_0_0);",
    "    public static final Version V_3_1_0 = new Version(3010099, org.apache.lucene.util.Version.LUCENE_9_1_0);",
    "    public static final Version V_3_1_1 = new Version(3010199, org.apache.lucene.util.Version.LUCENE_9_1_0);",
    "    public static final Version V_3_1_2 = new Version(3010299, org.apache.lucene.util.Version.LUCENE_9_1_0);",
    "    public static final Version V_4_0_0 = new Version(4000099, org.apache.lucene.util.Version.LUCENE_9_2_0);",
    "    public static final Version V_4_0_1 = new Version(4000199, org.apache.lucene.util.Version.LUCENE_9_2_0);",
    "    public static final Version V_4_1_0 = new Version(4010099, org.apache.lucene.util.Version.LUCENE_9_3_0);",
    "    public static final Version V_4_1_1 = new Version(4010199, org.apache.lucene.util.Version.LUCENE_9_3_0);",
    "    public static final Version V_4_2_0 = new Version(4020099, org.apache.lucene.util.Version.LUCENE_9_4_0);",
    "    public static final Version V_4_3_0 = new Version(4030099, org.apache.lucene.util.Version.LUCENE_9_5_0);",
    "    public static final Version CURRENT = V_4_3_0;",
    "}",
]


@pytest.fixture
def version_source_lines() -> List[str]:
    return list(VERSION_SOURCE_LINES)


@pytest.fixture
def version_source(tmp_path: Path) -> Path:
    """Write a declaration source file for the ACTIVE_VERSIONS set."""
    path = tmp_path / "Version.java"
    path.write_text("\n".join(VERSION_SOURCE_LINES) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def version_properties(tmp_path: Path) -> Path:
    """Write a version.properties file declaring 4.3.0 as current."""
    path = tmp_path / "version.properties"
    path.write_text(
        "# build versions\n"
        "opensearch        = 4.3.0-SNAPSHOT\n"
        "lucene            = 9.5.0\n"
        "bundled_jdk       = 17.0.2+8\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def bwc_env(monkeypatch):
    """Clear every BWC_* environment variable for the test."""
    for name in (
        "BWC_CURRENT_VERSION",
        "BWC_VERSION_SOURCE",
        "BWC_VERSION_PROPERTIES",
        "BWC_PROPERTIES_KEY",
        "BWC_MAIN_BRANCH",
        "BWC_SUPPORTED_MAJORS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch

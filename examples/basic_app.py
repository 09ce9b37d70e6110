# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Example FastAPI Application publishing the BWC version matrix.

Run with:
    uvicorn examples.basic_app:app --reload

Environment variables:
    BWC_VERSION_SOURCE: Source file declaring the version constants
    BWC_VERSION_PROPERTIES: Properties file holding the current version
    BWC_MAIN_BRANCH: Branch building the current version (default: master)
"""

import os
from pathlib import Path

from fastapi import FastAPI

from bwcmatrix.builder import (
    build_config,
    create_empty_config,
    pipe,
    with_main_branch,
    with_version_properties,
    with_version_source,
)
from bwcmatrix.integrations.fastapi import get_bwc_versions, setup_bwc_plugin

app = FastAPI(
    title="BWC matrix",
    description="Unreleased versions and compatibility lists for BWC test planning",
    version="1.0.0",
)


def create_bwc_config():
    """
    Create bwcmatrix configuration from environment variables.

    This uses the functional builder pattern for clean, composable configuration.
    """
    checkout = Path(os.getenv("CHECKOUT_DIR", "."))
    source = os.getenv(
        "BWC_VERSION_SOURCE",
        str(checkout / "server/src/main/java/org/opensearch/Version.java"),
    )
    properties = os.getenv(
        "BWC_VERSION_PROPERTIES",
        str(checkout / "buildSrc/version.properties"),
    )

    return build_config(
        pipe(
            lambda c: with_version_source(c, source),
            lambda c: with_version_properties(c, properties),
            lambda c: with_main_branch(c, os.getenv("BWC_MAIN_BRANCH", "master")),
        )(create_empty_config())
    )


setup_bwc_plugin(app, create_bwc_config())


@app.get("/")
async def root():
    """Summary of what this build is testing against."""
    versions = get_bwc_versions(app)
    return {
        "current": str(versions.current_version),
        "previous_unreleased": [
            {"version": str(info.version), "branch": info.branch}
            for info in versions.for_previous_unreleased()
        ],
    }

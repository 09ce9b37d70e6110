# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
bwcmatrix FastAPI Integration - Read-only matrix endpoints.

This module publishes a BwcVersions instance to test-plan generators and
build agents over HTTP:
- Lifespan management (load the matrix on startup)
- Read-only endpoints for unreleased versions and compatibility lists
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException

from bwcmatrix.config import BwcConfig
from bwcmatrix.core import BwcVersions, UnreleasedVersionInfo
from bwcmatrix.exceptions import VersionConsistencyError, VersionParseError
from bwcmatrix.loader import load_bwc_versions
from bwcmatrix.version import Version

logger = structlog.get_logger()


def _info_to_dict(info: UnreleasedVersionInfo) -> dict:
    return {
        "version": str(info.version),
        "branch": info.branch,
        "gradle_project_path": info.gradle_project_path,
    }


def register_bwc_routes(
    app: FastAPI,
    versions: BwcVersions,
    prefix: str = "/bwc",
) -> None:
    """
    Register read-only BWC endpoints on a FastAPI app.

    Args:
        app: FastAPI application
        versions: Resolved version matrix
        prefix: URL prefix for endpoints (default: /bwc)
    """

    @app.get(f"{prefix}/current")
    async def get_current() -> dict:
        """Version this build produces and the branch it is built from."""
        info = versions.unreleased_info(versions.current_version)
        return _info_to_dict(info)

    @app.get(f"{prefix}/unreleased")
    async def list_unreleased(include_current: bool = True) -> list:
        """
        List unreleased versions with their branches and build projects.

        Args:
            include_current: Include the current version (default: true)
        """
        if include_current:
            return [_info_to_dict(versions.unreleased_info(v)) for v in versions.unreleased]
        return [_info_to_dict(info) for info in versions.for_previous_unreleased()]

    @app.get(f"{prefix}/unreleased/{{version}}")
    async def get_unreleased(version: str) -> dict:
        """
        Look up one unreleased version.

        Returns 404 if the version is released or unknown.
        """
        try:
            parsed = Version.from_string(version)
        except VersionParseError as e:
            raise HTTPException(status_code=400, detail=e.message) from e

        info = versions.unreleased_info(parsed)
        if info is None:
            raise HTTPException(
                status_code=404,
                detail=f"Version {parsed} is not an unreleased version",
            )
        return _info_to_dict(info)

    @app.get(f"{prefix}/index-compatible")
    async def get_index_compatible(unreleased_only: bool = False) -> list:
        """Versions whose indices the current version can read."""
        if unreleased_only:
            return [str(v) for v in versions.unreleased_index_compatible]
        return [str(v) for v in versions.index_compatible]

    @app.get(f"{prefix}/wire-compatible")
    async def get_wire_compatible(unreleased_only: bool = False) -> list:
        """
        Versions the current version can talk to over the wire.

        Returns 409 if the wire base lineage is not declared.
        """
        try:
            if unreleased_only:
                return [str(v) for v in versions.unreleased_wire_compatible]
            return [str(v) for v in versions.wire_compatible]
        except VersionConsistencyError as e:
            raise HTTPException(status_code=409, detail=e.message) from e

    @app.get(f"{prefix}/matrix")
    async def get_matrix() -> dict:
        """The whole compatibility matrix in one document; see BwcVersions.to_dict."""
        return versions.to_dict()


def setup_bwc_plugin(
    app: FastAPI,
    config: BwcConfig,
    prefix: str = "/bwc",
) -> None:
    """
    Set up the BWC endpoints, loading the matrix on app startup.

    Args:
        app: FastAPI application
        config: bwcmatrix configuration (version_source is required)
        prefix: URL prefix for endpoints
    """
    app.state.bwc_config = config
    app.state.bwc_versions = None

    @app.on_event("startup")
    async def startup():
        """Load the version matrix on app startup."""
        logger.info("bwc_plugin_starting", source=str(config.version_source))

        versions = load_bwc_versions(config)
        app.state.bwc_versions = versions
        register_bwc_routes(app, versions, prefix)

        logger.info(
            "bwc_plugin_started",
            current=str(versions.current_version),
            unreleased=len(versions.unreleased),
        )


@asynccontextmanager
async def bwc_lifespan(app: FastAPI, config: BwcConfig, prefix: str = "/bwc"):
    """
    Alternative lifespan context manager for FastAPI.

        app = FastAPI(lifespan=lambda app: bwc_lifespan(app, config))

    Args:
        app: FastAPI application
        config: bwcmatrix configuration
        prefix: URL prefix for endpoints
    """
    versions = load_bwc_versions(config)
    app.state.bwc_config = config
    app.state.bwc_versions = versions
    register_bwc_routes(app, versions, prefix)

    logger.info("bwc_lifespan_started", current=str(versions.current_version))
    yield
    logger.info("bwc_lifespan_stopped")


def get_bwc_versions(app: FastAPI) -> BwcVersions:
    """
    Get the loaded BwcVersions from a FastAPI app.

    Raises:
        RuntimeError: If the matrix has not been loaded
    """
    versions = getattr(app.state, "bwc_versions", None)
    if versions is None:
        raise RuntimeError("bwcmatrix not initialized. Call setup_bwc_plugin first.")
    return versions

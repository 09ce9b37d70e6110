# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Framework Integrations - FastAPI plugin for publishing the BWC matrix.
"""

from bwcmatrix.integrations.fastapi import (
    bwc_lifespan,
    get_bwc_versions,
    register_bwc_routes,
    setup_bwc_plugin,
)

__all__ = [
    "bwc_lifespan",
    "get_bwc_versions",
    "register_bwc_routes",
    "setup_bwc_plugin",
]

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Configuration Tests.

Covers the immutable config, the functional builder, environment loading
and the file loaders.
"""

from pathlib import Path

import pytest

from bwcmatrix.builder import (
    build_config,
    create_config,
    create_empty_config,
    pipe,
    with_current_version,
    with_main_branch,
    with_major_alias,
    with_supported_majors,
    with_transition,
    with_version_properties,
    without_transitions,
)
from bwcmatrix.config import DEFAULT_CONFIG, DEFAULT_TRANSITIONS, BwcConfig, LineageTransition
from bwcmatrix.env import create_config_from_env
from bwcmatrix.exceptions import ConfigurationError, VersionConsistencyError
from bwcmatrix.loader import load_bwc_versions, read_current_version, read_version_lines
from bwcmatrix.version import Version


# ============================================================================
# BwcConfig
# ============================================================================

def test_default_config():
    """Defaults describe the historical lineage."""
    config = BwcConfig()

    assert config.current_version is None
    assert config.main_branch == "master"
    assert config.supported_majors == 2
    assert config.legacy_supported_majors == 3
    assert config.bootstrap_version == Version(1, 0, 0)
    assert config.major_aliases == ((1, 7),)
    assert config.aliases == {1: 7}
    assert config.transitions == DEFAULT_TRANSITIONS


def test_config_collects_all_errors():
    """Every invalid field is reported in one ConfigurationError."""
    with pytest.raises(ConfigurationError) as exc_info:
        BwcConfig(main_branch="", supported_majors=0, legacy_supported_majors=0)

    errors = exc_info.value.details["errors"]
    assert len(errors) == 3
    assert any("main_branch" in e for e in errors)
    assert any("legacy_supported_majors" in e for e in errors)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"current_version": "2.0.0"},
        {"properties_key": "  "},
        {"main_branch": "bad branch"},
        {"major_aliases": {3: 3}},
        {"transitions": (LineageTransition(major=2), LineageTransition(major=2))},
    ],
)
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(ConfigurationError):
        BwcConfig(**kwargs)


def test_previous_major_follows_aliases():
    assert DEFAULT_CONFIG.previous_major(1) == 7
    assert DEFAULT_CONFIG.previous_major(2) == 1
    assert DEFAULT_CONFIG.previous_major(5) == 4


def test_effective_major():
    assert DEFAULT_CONFIG.effective_major(1) == 7
    assert DEFAULT_CONFIG.effective_major(3) == 3


def test_expected_major_count():
    """Three majors are retained inside the legacy window, two after it."""
    assert DEFAULT_CONFIG.expected_major_count(1) == 3
    assert DEFAULT_CONFIG.expected_major_count(2) == 3
    assert DEFAULT_CONFIG.expected_major_count(3) == 2
    assert DEFAULT_CONFIG.expected_major_count(10) == 2


def test_sort_key_orders_legacy_majors_first():
    ordered = sorted(
        [Version(1, 0, 0), Version(7, 10, 2), Version(2, 0, 0), Version(6, 8, 0)],
        key=DEFAULT_CONFIG.sort_key,
    )
    assert ordered == [Version(6, 8, 0), Version(7, 10, 2), Version(1, 0, 0), Version(2, 0, 0)]


def test_transition_for():
    transition = DEFAULT_CONFIG.transition_for(2)

    assert transition is not None
    assert transition.index_extra_majors == (7,)
    assert transition.wire_base_major == 7
    assert transition.wire_extra_majors == (1,)
    assert DEFAULT_CONFIG.transition_for(3) is None


def test_with_updates_returns_new_config():
    """Frozen configs are updated by copying."""
    updated = DEFAULT_CONFIG.with_updates(main_branch="main", supported_majors=3)

    assert updated.main_branch == "main"
    assert updated.supported_majors == 3
    assert DEFAULT_CONFIG.main_branch == "master"
    assert updated.transitions == DEFAULT_CONFIG.transitions


def test_with_updates_validates():
    with pytest.raises(ConfigurationError):
        DEFAULT_CONFIG.with_updates(supported_majors=0)


def test_config_is_hashable():
    """Configs built from mappings or lists compare and hash like the defaults."""
    config = BwcConfig(major_aliases={1: 7}, legacy_majors=[6, 7], transitions=list(DEFAULT_TRANSITIONS))

    assert config == DEFAULT_CONFIG
    assert hash(config) == hash(DEFAULT_CONFIG)
    assert len({BwcConfig(), DEFAULT_CONFIG, config}) == 1


def test_aliases_cannot_be_mutated_through_config():
    aliases = DEFAULT_CONFIG.aliases
    aliases[3] = 1

    assert DEFAULT_CONFIG.previous_major(3) == 2
    assert DEFAULT_CONFIG.major_aliases == ((1, 7),)


def test_major_aliases_are_sorted_pairs():
    config = BwcConfig(major_aliases={10: 4, 1: 7})

    assert config.major_aliases == ((1, 7), (10, 4))
    assert config.previous_major(10) == 4
    assert config.effective_major(10) == 4


# ============================================================================
# Builder
# ============================================================================

def test_create_config_parses_version_strings():
    config = create_config("2.1.0-SNAPSHOT", main_branch="main")

    assert config.current_version == Version(2, 1, 0)
    assert config.main_branch == "main"


def test_create_config_paths(tmp_path: Path):
    config = create_config(
        version_source=tmp_path / "Version.java",
        version_properties=str(tmp_path / "version.properties"),
        properties_key="product",
    )

    assert config.version_source == tmp_path / "Version.java"
    assert config.version_properties == tmp_path / "version.properties"
    assert config.properties_key == "product"


def test_create_config_passes_known_kwargs():
    config = create_config("3.0.0", supported_majors=3, legacy_majors=(7,))

    assert config.supported_majors == 3
    assert config.legacy_majors == (7,)


def test_pipe_composes_builders():
    config = build_config(
        pipe(
            lambda c: with_current_version(c, "3.1.0"),
            lambda c: with_main_branch(c, "main"),
            lambda c: with_version_properties(c, "version.properties", "product"),
        )(create_empty_config())
    )

    assert config.current_version == Version(3, 1, 0)
    assert config.main_branch == "main"
    assert config.version_properties == Path("version.properties")
    assert config.properties_key == "product"


def test_builders_do_not_mutate_input():
    base = create_empty_config()
    updated = with_main_branch(base, "main")

    assert base["main_branch"] == "master"
    assert updated["main_branch"] == "main"


def test_with_supported_majors():
    config = with_supported_majors(create_empty_config(), 3, legacy_supported=4)

    assert config["supported_majors"] == 3
    assert config["legacy_supported_majors"] == 4


@pytest.mark.parametrize("supported,legacy", [(0, None), (2, 0)])
def test_with_supported_majors_rejects_non_positive(supported, legacy):
    with pytest.raises(ValueError):
        with_supported_majors(create_empty_config(), supported, legacy_supported=legacy)


def test_with_major_alias():
    config = with_major_alias(create_empty_config(), 10, 4)

    assert config["major_aliases"] == {1: 7, 10: 4}
    assert create_empty_config()["major_aliases"] == {1: 7}


def test_with_transition_replaces_and_orders():
    config = pipe(
        lambda c: with_transition(c, LineageTransition(major=5, index_extra_majors=(3,))),
        lambda c: with_transition(c, LineageTransition(major=1, wire_base_major=7)),
    )(create_empty_config())

    majors = [t.major for t in config["transitions"]]
    assert majors == [1, 2, 5]
    assert config["transitions"][0].wire_base_major == 7
    assert config["transitions"][0].index_extra_majors == ()


def test_without_transitions():
    config = build_config(without_transitions(create_empty_config()))
    assert config.transitions == ()
    assert config.transition_for(2) is None


# ============================================================================
# Environment
# ============================================================================

def test_config_from_env(bwc_env, tmp_path: Path):
    bwc_env.setenv("BWC_CURRENT_VERSION", "4.3.0-SNAPSHOT")
    bwc_env.setenv("BWC_VERSION_SOURCE", str(tmp_path / "Version.java"))
    bwc_env.setenv("BWC_MAIN_BRANCH", "main")
    bwc_env.setenv("BWC_SUPPORTED_MAJORS", "3")

    config = create_config_from_env()

    assert config.current_version == Version(4, 3, 0)
    assert config.version_source == tmp_path / "Version.java"
    assert config.version_properties is None
    assert config.main_branch == "main"
    assert config.supported_majors == 3


def test_config_from_env_with_properties_only(bwc_env, version_properties: Path):
    bwc_env.setenv("BWC_VERSION_PROPERTIES", str(version_properties))
    bwc_env.setenv("BWC_PROPERTIES_KEY", "product")

    config = create_config_from_env()

    assert config.current_version is None
    assert config.version_properties == version_properties
    assert config.properties_key == "product"
    assert config.supported_majors == 2


def test_config_from_env_requires_current_version(bwc_env):
    with pytest.raises(ConfigurationError) as exc_info:
        create_config_from_env()
    assert "BWC_CURRENT_VERSION" in exc_info.value.message


@pytest.mark.parametrize("value", ["two", "0", "-1"])
def test_config_from_env_rejects_bad_supported_majors(bwc_env, value):
    bwc_env.setenv("BWC_CURRENT_VERSION", "4.3.0")
    bwc_env.setenv("BWC_SUPPORTED_MAJORS", value)

    with pytest.raises(ConfigurationError) as exc_info:
        create_config_from_env()
    assert "BWC_SUPPORTED_MAJORS" in exc_info.value.message


def test_config_from_env_rejects_bad_version(bwc_env):
    bwc_env.setenv("BWC_CURRENT_VERSION", "4.3")

    with pytest.raises(ConfigurationError) as exc_info:
        create_config_from_env()
    assert "cause" in exc_info.value.details


# ============================================================================
# Loaders
# ============================================================================

def test_read_current_version(version_properties: Path):
    assert read_current_version(version_properties) == Version(4, 3, 0)
    assert read_current_version(version_properties, key="lucene") == Version(9, 5, 0)


def test_read_current_version_colon_separator(tmp_path: Path):
    path = tmp_path / "version.properties"
    path.write_text("! comment\n\nopensearch: 2.0.0-rc1\n", encoding="utf-8")

    assert read_current_version(path) == Version(2, 0, 0)


def test_read_current_version_missing_key(version_properties: Path):
    with pytest.raises(ConfigurationError) as exc_info:
        read_current_version(version_properties, key="elasticsearch")
    assert exc_info.value.details["key"] == "elasticsearch"


def test_read_current_version_missing_file(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        read_current_version(tmp_path / "missing.properties")


def test_read_version_lines(version_source: Path, version_source_lines):
    assert read_version_lines(version_source) == version_source_lines


def test_read_version_lines_rejects_directory(tmp_path: Path):
    with pytest.raises(ConfigurationError) as exc_info:
        read_version_lines(tmp_path)
    assert exc_info.value.details["path"] == str(tmp_path)


def test_load_bwc_versions_from_files(version_source: Path, version_properties: Path):
    config = create_config(version_source=version_source, version_properties=version_properties)

    bwc = load_bwc_versions(config)

    assert bwc.current_version == Version(4, 3, 0)
    assert [str(v) for v in bwc.unreleased] == ["3.1.2", "4.1.1", "4.2.0", "4.3.0"]


def test_load_bwc_versions_prefers_configured_version(version_source: Path, tmp_path: Path):
    """The configured current version wins over the properties file."""
    config = create_config(
        "4.3.0",
        version_source=version_source,
        version_properties=tmp_path / "missing.properties",
    )

    assert load_bwc_versions(config).current_version == Version(4, 3, 0)


def test_load_bwc_versions_requires_source():
    with pytest.raises(ConfigurationError):
        load_bwc_versions(create_config("4.3.0"))


def test_load_bwc_versions_requires_current_version(version_source: Path):
    with pytest.raises(ConfigurationError):
        load_bwc_versions(create_config(version_source=version_source))


def test_load_bwc_versions_detects_mismatch(version_source: Path):
    config = create_config("4.2.0", version_source=version_source)

    with pytest.raises(VersionConsistencyError) as exc_info:
        load_bwc_versions(config)
    assert exc_info.value.details == {"parsed": "4.3.0", "configured": "4.2.0"}

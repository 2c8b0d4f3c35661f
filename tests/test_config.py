"""Tests for config loading (config.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from taskquery.config import CONFIG_FILE, STATE_DIR_NAME, ResolverConfig, get_resolver_config, load_config


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    (tmp_path / STATE_DIR_NAME).mkdir()
    return tmp_path


def _write(project_dir: Path, text: str) -> None:
    (project_dir / STATE_DIR_NAME / CONFIG_FILE).write_text(text, encoding="utf-8")


class TestLoadConfig:
    def test_missing_file(self, project_dir: Path) -> None:
        assert load_config(project_dir) == ({}, None)

    def test_empty_file(self, project_dir: Path) -> None:
        _write(project_dir, "")
        assert load_config(project_dir) == ({}, None)

    def test_reads_mapping(self, project_dir: Path) -> None:
        _write(project_dir, "resolver:\n  ambiguous_prefix: smallest\n")
        data, err = load_config(project_dir)
        assert err is None
        assert data == {"resolver": {"ambiguous_prefix": "smallest"}}

    def test_invalid_yaml_reports_error(self, project_dir: Path) -> None:
        _write(project_dir, "resolver: [oops")
        data, err = load_config(project_dir)
        assert data == {}
        assert err is not None and "YAMLError" in err

    def test_non_mapping_reports_error(self, project_dir: Path) -> None:
        _write(project_dir, "- a\n- b\n")
        data, err = load_config(project_dir)
        assert data == {}
        assert "expected object" in err


class TestGetResolverConfig:
    def test_defaults(self) -> None:
        cfg = get_resolver_config({})
        assert cfg == ResolverConfig()
        assert cfg.ambiguous_prefix == "error"
        assert cfg.memoize_working_set is True

    def test_values(self) -> None:
        cfg = get_resolver_config({"resolver": {"ambiguous_prefix": "smallest", "memoize_working_set": False}})
        assert cfg == ResolverConfig(ambiguous_prefix="smallest", memoize_working_set=False)

    def test_bad_values_fall_back(self) -> None:
        cfg = get_resolver_config({"resolver": {"ambiguous_prefix": "first", "memoize_working_set": "yes"}})
        assert cfg == ResolverConfig()

    def test_non_dict_block(self) -> None:
        assert get_resolver_config({"resolver": "smallest"}) == ResolverConfig()

    def test_round_trip_through_file(self, project_dir: Path) -> None:
        _write(project_dir, "resolver:\n  memoize_working_set: false\n")
        data, _ = load_config(project_dir)
        assert get_resolver_config(data).memoize_working_set is False

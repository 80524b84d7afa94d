"""Tests for engine configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from deltacalc.config import (
    DEFAULT_CONFIG,
    ConfigError,
    EngineConfig,
    build_config,
    load_engine_config,
)


class TestBuildConfig:
    def test_defaults(self):
        cfg = build_config()
        assert cfg == EngineConfig(**DEFAULT_CONFIG)
        assert cfg.use_dependency_index is True
        assert cfg.verify_after_apply is False
        assert cfg.emit_events is False
        assert cfg.log_dir is None

    def test_overrides(self):
        cfg = build_config({"verify_after_apply": True})
        assert cfg.verify_after_apply is True
        assert cfg.use_dependency_index is True

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigError, match="Invalid engine configuration"):
            build_config({"use_index": True})

    def test_wrong_type_rejected(self):
        with pytest.raises(ConfigError):
            build_config({"emit_events": "sometimes"})


class TestLoadEngineConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_engine_config(tmp_path) == build_config()

    def test_reads_yaml(self, tmp_path: Path):
        (tmp_path / "deltacalc.yaml").write_text(
            yaml.dump({"use_dependency_index": False, "emit_events": True})
        )
        cfg = load_engine_config(tmp_path)
        assert cfg.use_dependency_index is False
        assert cfg.emit_events is True

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        (tmp_path / "deltacalc.yaml").write_text("")
        assert load_engine_config(tmp_path) == build_config()

    def test_relative_log_dir_resolved(self, tmp_path: Path):
        (tmp_path / "deltacalc.yaml").write_text("log_dir: logs\n")
        cfg = load_engine_config(tmp_path)
        assert cfg.log_dir == tmp_path / "logs"

    def test_absolute_log_dir_kept(self, tmp_path: Path):
        target = tmp_path / "elsewhere"
        (tmp_path / "deltacalc.yaml").write_text(f"log_dir: {target}\n")
        assert load_engine_config(tmp_path).log_dir == target

    def test_non_mapping_rejected(self, tmp_path: Path):
        (tmp_path / "deltacalc.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_engine_config(tmp_path)

    def test_malformed_yaml_rejected(self, tmp_path: Path):
        (tmp_path / "deltacalc.yaml").write_text("emit_events: [unclosed\n")
        with pytest.raises(ConfigError, match="Cannot parse"):
            load_engine_config(tmp_path)

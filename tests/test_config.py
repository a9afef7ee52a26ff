"""
Configuration Test Suite
========================

Tests for option defaults and environment overrides.
"""

from pathlib import Path

import pytest

from psc_lua.config import RunnerConfig, TranspilerOptions


class TestTranspilerOptions:
    """Tests for TranspilerOptions defaults."""

    def test_defaults(self):
        options = TranspilerOptions()
        assert options.emit_runtime is True
        assert options.comment_prefix == "--"
        assert options.indent == "\t"


class TestRunnerConfig:
    """Tests for RunnerConfig.from_env."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("PSC_LUA_COMMAND", "PSC_LUA_TIMEOUT", "PSC_KEEP_SCRIPT", "PSC_TEMP_DIR"):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        config = RunnerConfig.from_env()
        assert config == RunnerConfig()
        assert config.lua_command == "lua"
        assert config.timeout is None
        assert config.keep_script is False
        assert config.temp_dir is None

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PSC_LUA_COMMAND", "lua5.4")
        monkeypatch.setenv("PSC_LUA_TIMEOUT", "3")
        monkeypatch.setenv("PSC_KEEP_SCRIPT", "Yes")
        monkeypatch.setenv("PSC_TEMP_DIR", str(tmp_path))
        config = RunnerConfig.from_env()
        assert config.lua_command == "lua5.4"
        assert config.timeout == 3.0
        assert config.keep_script is True
        assert config.temp_dir == Path(tmp_path)

    def test_invalid_timeout_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("PSC_LUA_TIMEOUT", "soon")
        with caplog.at_level("WARNING"):
            config = RunnerConfig.from_env()
        assert config.timeout is None
        assert "PSC_LUA_TIMEOUT" in caplog.text

    def test_keep_script_false_values(self, monkeypatch):
        monkeypatch.setenv("PSC_KEEP_SCRIPT", "0")
        assert RunnerConfig.from_env().keep_script is False

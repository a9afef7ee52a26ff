"""
Lua Runner Test Suite
=====================

The interpreter process is stubbed with monkeypatch; no Lua is needed.
"""

import subprocess
from pathlib import Path

import pytest

from psc_lua.config import RunnerConfig
from psc_lua.errors import ExecutionTimeoutError, InterpreterNotFoundError
from psc_lua.runner import LuaRunner, RunResult


@pytest.fixture
def fake_lua(monkeypatch):
    """Pretend 'lua' is installed and record each subprocess call."""
    calls = []

    def fake_which(command):
        return f"/usr/bin/{command}"

    def fake_run(cmd, **kwargs):
        script = Path(cmd[1])
        calls.append({
            "cmd": cmd,
            "kwargs": kwargs,
            "script": script,
            "code": script.read_text(encoding="utf-8"),
        })
        return subprocess.CompletedProcess(cmd, 0, stdout="42\n", stderr="")

    monkeypatch.setattr("psc_lua.runner.shutil.which", fake_which)
    monkeypatch.setattr("psc_lua.runner.subprocess.run", fake_run)
    return calls


class TestLuaRunner:
    """Tests for LuaRunner.run."""

    def test_runs_script(self, fake_lua):
        result = LuaRunner().run("print(42)")
        assert isinstance(result, RunResult)
        assert result.ok
        assert result.stdout == "42\n"

        call = fake_lua[0]
        assert call["cmd"][0] == "/usr/bin/lua"
        assert call["code"] == "print(42)"
        assert call["script"].suffix == ".lua"
        assert call["kwargs"]["capture_output"] is True
        assert call["kwargs"]["text"] is True

    def test_script_removed(self, fake_lua):
        result = LuaRunner().run("print(1)")
        assert not result.script_path.exists()

    def test_script_kept(self, fake_lua, tmp_path):
        config = RunnerConfig(keep_script=True, temp_dir=tmp_path / "scripts")
        result = LuaRunner(config).run("print(1)")
        assert result.script_path.exists()
        assert result.script_path.parent == tmp_path / "scripts"
        assert result.script_path.read_text(encoding="utf-8") == "print(1)"

    def test_configured_command_and_timeout(self, fake_lua):
        LuaRunner(RunnerConfig(lua_command="luajit", timeout=2.5)).run("")
        call = fake_lua[0]
        assert call["cmd"][0] == "/usr/bin/luajit"
        assert call["kwargs"]["timeout"] == 2.5

    def test_input_forwarded(self, fake_lua):
        LuaRunner().run("", input_text="12\n")
        assert fake_lua[0]["kwargs"]["input"] == "12\n"

    def test_interpreter_missing(self, monkeypatch):
        monkeypatch.setattr("psc_lua.runner.shutil.which", lambda command: None)
        with pytest.raises(InterpreterNotFoundError) as exc_info:
            LuaRunner(RunnerConfig(lua_command="lua9")).run("")
        assert exc_info.value.command == "lua9"
        assert "PSC_LUA_COMMAND" in str(exc_info.value)

    def test_interpreter_vanished(self, monkeypatch):
        def fail(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr("psc_lua.runner.shutil.which", lambda command: "/nowhere/lua")
        monkeypatch.setattr("psc_lua.runner.subprocess.run", fail)
        with pytest.raises(InterpreterNotFoundError):
            LuaRunner().run("")

    def test_timeout(self, monkeypatch):
        def slow(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr("psc_lua.runner.shutil.which", lambda command: "/usr/bin/lua")
        monkeypatch.setattr("psc_lua.runner.subprocess.run", slow)
        with pytest.raises(ExecutionTimeoutError) as exc_info:
            LuaRunner(RunnerConfig(timeout=0.5)).run("while true do end")
        assert exc_info.value.timeout == 0.5
        assert not Path(exc_info.value.script_path).exists()

    def test_uncaptured_output(self, monkeypatch):
        """Without capture the program writes to the terminal directly."""
        seen = {}

        def passthrough(cmd, **kwargs):
            seen.update(kwargs)
            return subprocess.CompletedProcess(cmd, 0)

        monkeypatch.setattr("psc_lua.runner.shutil.which", lambda command: "/usr/bin/lua")
        monkeypatch.setattr("psc_lua.runner.subprocess.run", passthrough)
        result = LuaRunner().run("print(1)", capture=False)
        assert seen["capture_output"] is False
        assert seen["input"] is None
        assert (result.stdout, result.stderr) == ("", "")

"""
Lua Runner
==========

Executes generated Lua with an external interpreter.

The code is written to a temporary ``.lua`` file which is passed to the
configured interpreter; stdout and stderr are captured and returned in a
RunResult, or left on the terminal with ``capture=False``. The temporary file is removed afterwards unless
``RunnerConfig.keep_script`` is set.

Usage
-----
>>> from psc_lua import transpile
>>> from psc_lua.runner import LuaRunner
>>> result = LuaRunner().run(transpile('écrire("Bonjour")'))
>>> result.stdout
'Bonjour\\n'
"""

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from psc_lua.config import RunnerConfig
from psc_lua.errors import ExecutionTimeoutError, InterpreterNotFoundError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of one interpreter run.

    Attributes:
        returncode: Interpreter exit status
        stdout: Captured standard output
        stderr: Captured standard error
        script_path: Path of the generated script (may no longer exist)
    """
    returncode: int
    stdout: str
    stderr: str
    script_path: Path

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class LuaRunner:
    """
    Runs Lua source through an external interpreter.

    Example:
        runner = LuaRunner(RunnerConfig(lua_command="lua5.4", timeout=5))
        result = runner.run(lua_code, input_text="42\\n")
    """

    def __init__(self, config: Optional[RunnerConfig] = None):
        self.config = config or RunnerConfig()

    def resolve_interpreter(self) -> str:
        """
        Locate the interpreter on PATH.

        Raises:
            InterpreterNotFoundError: If the command cannot be found
        """
        resolved = shutil.which(self.config.lua_command)
        if resolved is None:
            raise InterpreterNotFoundError(self.config.lua_command)
        return resolved

    def run(
        self,
        lua_code: str,
        input_text: Optional[str] = None,
        capture: bool = True,
    ) -> RunResult:
        """
        Execute ``lua_code``.

        Args:
            lua_code: Complete Lua program (runtime prelude included)
            input_text: Data fed to the program's stdin; None inherits the
                        caller's stdin so ``lire()`` stays interactive
            capture: Capture stdout and stderr into the RunResult; False lets
                     an interactive program write straight to the terminal,
                     and the RunResult then holds empty strings

        Raises:
            InterpreterNotFoundError: If the interpreter cannot be started
            ExecutionTimeoutError: If the run exceeds the configured timeout
        """
        interpreter = self.resolve_interpreter()
        script_path = self._write_script(lua_code)
        cmd = [interpreter, str(script_path)]
        logger.debug(f"Running {' '.join(cmd)}")

        try:
            completed = subprocess.run(
                cmd,
                input=input_text,
                capture_output=capture,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutionTimeoutError(self.config.timeout, str(script_path)) from e
        except FileNotFoundError as e:
            raise InterpreterNotFoundError(self.config.lua_command) from e
        finally:
            if not self.config.keep_script:
                script_path.unlink(missing_ok=True)

        logger.debug(f"Interpreter exited with status {completed.returncode}")
        return RunResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            script_path=script_path,
        )

    def _write_script(self, lua_code: str) -> Path:
        temp_dir = self.config.temp_dir
        if temp_dir is not None:
            temp_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(suffix=".lua", prefix="psc_", dir=temp_dir)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(lua_code)
        return Path(name)

"""
PSC → Lua Configuration
=======================

Option records for the transpiler and the Lua runner. Configuration can
come from:
- Default values (defined here)
- Keyword arguments from the caller (the CLI maps its flags onto them)
- Environment variables, for the runner (``RunnerConfig.from_env``)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class TranspilerOptions:
    """
    Transpiler configuration options.

    Attributes:
        emit_runtime: Prepend the Lua runtime prelude (default True). Turn it
                      off to inspect or diff the rewritten statements alone.
        comment_prefix: Lua marker that replaces ``//`` on trailing comments
        indent: Indentation unit for generated lines (array initialization
                loops, injected InOut returns)
    """
    emit_runtime: bool = True
    comment_prefix: str = "--"
    indent: str = "\t"


@dataclass
class RunnerConfig:
    """
    Configuration for executing generated Lua.

    Attributes:
        lua_command: Interpreter executable, looked up on PATH
        timeout: Seconds before the interpreter is killed (None = no limit)
        keep_script: Leave the temporary ``.lua`` file on disk after the run
        temp_dir: Directory for the temporary script (None = system default)
    """
    lua_command: str = "lua"
    timeout: Optional[float] = None
    keep_script: bool = False
    temp_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "RunnerConfig":
        """
        Create RunnerConfig from environment variables.

        Environment variables (all optional):
            PSC_LUA_COMMAND: Interpreter executable (e.g. "lua5.4", "luajit")
            PSC_LUA_TIMEOUT: Timeout in seconds (number)
            PSC_KEEP_SCRIPT: Keep the generated script ("1", "true", "yes")
            PSC_TEMP_DIR: Directory for generated scripts

        Returns:
            RunnerConfig with values from environment variables
        """
        config = cls()

        if command := os.environ.get("PSC_LUA_COMMAND"):
            config.lua_command = command

        if timeout := os.environ.get("PSC_LUA_TIMEOUT"):
            try:
                config.timeout = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid PSC_LUA_TIMEOUT value: {timeout!r}")

        if keep := os.environ.get("PSC_KEEP_SCRIPT"):
            config.keep_script = keep.strip().lower() in _TRUE_VALUES

        if temp_dir := os.environ.get("PSC_TEMP_DIR"):
            config.temp_dir = Path(temp_dir)

        return config

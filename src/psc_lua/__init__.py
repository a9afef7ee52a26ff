"""
PSC → Lua Toolchain
===================

Tools for running PSC, the French pseudo-code used to teach algorithms, on
a stock Lua interpreter.

Components
----------
- **transpiler**: Line-oriented PSC → Lua rewriting with a Lua runtime
  prelude (linked lists, stacks, queues, tables, console and file I/O)
- **linter**: Undeclared identifiers and built-in arity diagnostics
- **runner**: Executes generated Lua through an external interpreter
- **cli**: The psc2lua, pscrun and psclint commands

Example Usage
-------------
>>> from psc_lua import transpile, LuaRunner
>>> lua = transpile('''
... Début
...     x ← 6 * 7
...     écrire(x)
... Fin
... ''')
>>> LuaRunner().run(lua).stdout
'42\\n'
"""

__version__ = "1.0.0"
__author__ = "PSC Lua Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

# Configuration
from psc_lua.config import RunnerConfig, TranspilerOptions

# Language definitions
from psc_lua.definitions import DEFAULT_DEFINITIONS, BuiltinFunction, Definitions

# Error types
from psc_lua.errors import (
    DiagnosticError,
    ExecutionTimeoutError,
    InterpreterNotFoundError,
    PscError,
    RunnerError,
    SourceLocation,
    TranspileError,
)

# Transpiler
from psc_lua.transpiler import Transpiler, transpile

# Linter
from psc_lua.linter import Diagnostic, Linter, Severity

# Runner
from psc_lua.runner import LuaRunner, RunResult

__all__ = [
    # Version
    "__version__",
    # Configuration
    "TranspilerOptions",
    "RunnerConfig",
    # Definitions
    "DEFAULT_DEFINITIONS",
    "Definitions",
    "BuiltinFunction",
    # Errors
    "PscError",
    "TranspileError",
    "DiagnosticError",
    "RunnerError",
    "InterpreterNotFoundError",
    "ExecutionTimeoutError",
    "SourceLocation",
    # Transpiler
    "Transpiler",
    "transpile",
    # Linter
    "Linter",
    "Diagnostic",
    "Severity",
    # Runner
    "LuaRunner",
    "RunResult",
]

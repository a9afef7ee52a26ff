"""
Shared fixtures for the PSC → Lua test suite.
"""

import textwrap

import pytest

from psc_lua.config import TranspilerOptions
from psc_lua.runner import LuaRunner
from psc_lua.transpiler import Transpiler


@pytest.fixture
def body():
    """Transpile dedented PSC source without the runtime prelude."""
    transpiler = Transpiler(TranspilerOptions(emit_runtime=False))

    def _body(source: str) -> str:
        return transpiler.transpile(textwrap.dedent(source))

    return _body


@pytest.fixture
def lines(body):
    """Transpiled statements as a list of stripped, non-empty lines."""
    def _lines(source: str) -> list[str]:
        return [line.strip() for line in body(source).splitlines() if line.strip()]

    return _lines


@pytest.fixture
def run_psc():
    """Transpile dedented PSC source and run it; returns the RunResult."""
    transpiler = Transpiler()
    runner = LuaRunner()

    def _run(source: str, input_text: str = ""):
        return runner.run(transpiler.transpile(textwrap.dedent(source)), input_text=input_text)

    return _run

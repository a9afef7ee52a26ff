"""
PSC → Lua Transpiler
====================

Source-to-source translation of PSC pseudo-code into Lua, without an AST:
declarations are collected by independent scans, then the source is
rewritten line by line and the Lua runtime prelude is prepended.

Pipeline
--------

    PSC source → FunctionRegistry + CompositeTypeRegistry + variable types
               → TranspileEngine (line by line) → LUA_RUNTIME + statements

Usage
-----
>>> from psc_lua.transpiler import Transpiler, TranspilerOptions
>>> lua = Transpiler(TranspilerOptions(emit_runtime=False)).transpile("x ← 3")
>>> lua
'x = 3\\n'
"""

from psc_lua.config import TranspilerOptions
from psc_lua.transpiler.composites import (
    CompositeField,
    CompositeType,
    CompositeTypeRegistry,
)
from psc_lua.transpiler.engine import TranspileEngine
from psc_lua.transpiler.functions import FunctionInfo, FunctionRegistry, ParamInfo
from psc_lua.transpiler.runtime import LUA_RUNTIME, defined_helpers
from psc_lua.transpiler.spans import SpanStore, StringSpan, TableSpan
from psc_lua.transpiler.statements import StatementKind, classify
from psc_lua.transpiler.transpiler import Transpiler, transpile
from psc_lua.transpiler.variables import collect_variable_types

__all__ = [
    # Main API
    "Transpiler",
    "TranspilerOptions",
    "transpile",
    # Components
    "TranspileEngine",
    "FunctionRegistry",
    "FunctionInfo",
    "ParamInfo",
    "CompositeTypeRegistry",
    "CompositeType",
    "CompositeField",
    "collect_variable_types",
    "StatementKind",
    "classify",
    # Spans
    "SpanStore",
    "StringSpan",
    "TableSpan",
    # Runtime
    "LUA_RUNTIME",
    "defined_helpers",
]

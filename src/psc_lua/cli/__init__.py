"""
PSC → Lua Command-Line Interface
================================

This package provides command-line tools for PSC pseudo-code:

- **psc2lua**: Transpile a PSC file to Lua
- **pscrun**: Transpile and run a PSC file with a Lua interpreter
- **psclint**: Report undeclared identifiers and built-in arity mistakes

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["psc2lua", "pscrun", "psclint"]

"""
PSC Toolchain Error Hierarchy
=============================

This module defines the exception hierarchy for the PSC-to-Lua toolchain.
All exceptions inherit from PscError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
PscError (base)
├── TranspileError - source cannot be read or options are invalid
├── DiagnosticError - aggregate of linter diagnostics (CLI use)
└── RunnerError (Lua process collaborator)
    ├── InterpreterNotFoundError - Lua interpreter missing from PATH
    └── ExecutionTimeoutError - interpreter exceeded the configured timeout

Design Philosophy
-----------------
The transpile engine itself never raises on malformed pseudo-code: it
degrades to best-effort output. Exceptions are reserved for conditions the
engine cannot work around (unreadable input, a missing interpreter) and for
the command-line tools, which turn diagnostics into exit codes.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class PscError(Exception):
    """
    Base exception for all PSC toolchain errors.

    Example:
        try:
            lua = transpile_file("exo.psc")
        except PscError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in PSC source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed, 0 for the whole file)
        column: Column number (1-indexed, 0 for the whole line)
    """
    filename: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        if self.line <= 0:
            return self.filename
        if self.column <= 0:
            return f"{self.filename}:{self.line}"
        return f"{self.filename}:{self.line}:{self.column}"


class LocatedError(PscError):
    """
    Error carrying an optional source location, source line and hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            exo.psc:4:5: error: l'identifiant 'y' est utilisé avant d'avoir reçu une valeur
                x ← y + 1
                    ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Transpiler Exceptions
# =============================================================================

class TranspileError(LocatedError):
    """
    The transpiler could not start or finish its work.

    Raised for input that cannot be decoded as UTF-8 text, missing input
    files and invalid options. Malformed pseudo-code is NOT a
    TranspileError: the engine always produces best-effort Lua for it.
    """
    pass


class DiagnosticError(PscError):
    """
    Aggregate error built from linter diagnostics.

    The message is the pre-formatted report; it is not prefixed again.

    Attributes:
        diagnostics: The diagnostics that caused the failure
    """

    def __init__(self, report: str, diagnostics: Optional[list] = None):
        self.diagnostics = diagnostics or []
        super().__init__(report)


# =============================================================================
# Runner Exceptions
# =============================================================================

class RunnerError(PscError):
    """Base exception for failures launching or supervising the Lua process."""
    pass


class InterpreterNotFoundError(RunnerError):
    """
    The configured Lua interpreter cannot be found.

    Attributes:
        command: The interpreter command that was looked up
    """

    def __init__(self, command: str):
        self.command = command
        super().__init__(
            f"Lua interpreter '{command}' not found; "
            f"install Lua or set PSC_LUA_COMMAND"
        )


class ExecutionTimeoutError(RunnerError):
    """
    The Lua process ran longer than the configured timeout.

    Attributes:
        timeout: The timeout in seconds
        script_path: The generated script that was running
    """

    def __init__(self, timeout: float, script_path: str):
        self.timeout = timeout
        self.script_path = script_path
        super().__init__(f"execution of {script_path} timed out after {timeout}s")

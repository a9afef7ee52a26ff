"""
CLI Exit Codes and Error Reporting
==================================

Shared by psc2lua, pscrun and psclint so that every tool reports failures
on stderr and exits with the same codes.
"""

import logging
import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from psc_lua.errors import DiagnosticError, LocatedError, PscError


class ExitCode(IntEnum):
    """Process exit codes of the PSC tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Transpile failure, lint errors, runner failure
    INVALID_ARGS = 2     # Bad option value, missing or unreadable input
    INTERNAL_ERROR = 3   # Bug in the toolchain


def configure_logging(verbose: bool) -> None:
    """Route library debug records to stderr when ``-v`` is given."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report ``error`` on stderr and exit with its ExitCode.

    Args:
        error: The exception caught by the command
        verbose: Print the traceback of internal errors
        error_type: Tool action prefixed to runner errors ("Run error: ...")
    """
    if isinstance(error, (LocatedError, DiagnosticError)):
        # message already carries file:line:col
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, PscError):
        prefix = f"{error_type} error" if error_type else "Error"
        click.echo(f"{prefix}: {error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)

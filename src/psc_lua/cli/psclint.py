"""
psclint - PSC Linter Command-Line Interface
===========================================

Prints one line per diagnostic, in the usual compiler format:

    exo.psc:4:5: error: L'identifiant 'y' est utilisé avant d'avoir reçu une valeur.

Exit status is 1 when any error is reported (or any warning with
``--strict``), 0 otherwise.
"""

from pathlib import Path

import click

from psc_lua import __version__
from psc_lua.cli.errors import configure_logging, handle_cli_exception
from psc_lua.errors import DiagnosticError
from psc_lua.linter import Linter, Severity


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on warnings too",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show detailed progress",
)
@click.version_option(version=__version__, prog_name="psclint")
def main(input_file: Path, strict: bool, verbose: bool) -> None:
    """
    Check a PSC source file.

    INPUT_FILE is the PSC source file (.psc) to check.

    \b
    Checks:
        - identifiers used before being declared or assigned
        - built-in functions called with the wrong number of arguments
        - unbalanced parentheses and unclosed blocks (warnings)
    """
    configure_logging(verbose)

    try:
        source = input_file.read_text(encoding="utf-8")
        diagnostics = Linter().refresh(source)

        failing = [
            d for d in diagnostics
            if strict or d.severity == Severity.ERROR
        ]
        if failing:
            report = "\n".join(d.format(str(input_file)) for d in diagnostics)
            raise DiagnosticError(report, failing)

        for diagnostic in diagnostics:
            click.echo(diagnostic.format(str(input_file)))
        if verbose:
            click.echo(f"{input_file}: {len(diagnostics)} diagnostic(s)", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose, "Lint")


if __name__ == "__main__":
    main()

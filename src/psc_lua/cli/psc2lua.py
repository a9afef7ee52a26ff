"""
psc2lua - PSC to Lua Transpiler Command-Line Interface
======================================================

Usage Examples
--------------
Basic transpilation:
    $ psc2lua tri.psc

With output file:
    $ psc2lua tri.psc -o tri.lua

Print to the terminal without the runtime prelude:
    $ psc2lua tri.psc -o - --no-runtime

Verbose mode:
    $ psc2lua -v tri.psc
"""

from pathlib import Path
from typing import Optional

import click

from psc_lua import __version__
from psc_lua.cli.errors import configure_logging, handle_cli_exception
from psc_lua.config import TranspilerOptions
from psc_lua.transpiler import Transpiler


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, allow_dash=True, path_type=Path),
    help="Output Lua file, '-' for stdout (default: input.lua)",
)
@click.option(
    "--no-runtime",
    is_flag=True,
    help="Omit the Lua runtime prelude",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show detailed transpiler progress",
)
@click.version_option(version=__version__, prog_name="psc2lua")
def main(
    input_file: Path,
    output: Optional[Path],
    no_runtime: bool,
    verbose: bool,
) -> None:
    """
    Transpile PSC pseudo-code to Lua.

    INPUT_FILE is the PSC source file (.psc) to transpile.

    The generated program embeds the runtime support library (lists,
    stacks, queues, tables, console and file I/O) and runs with any
    Lua 5.3+ interpreter.

    \b
    Examples:
        psc2lua tri.psc                  # Outputs tri.lua
        psc2lua tri.psc -o out.lua       # Specify output file
        psc2lua tri.psc -o -             # Print to stdout
        psc2lua --no-runtime tri.psc     # Statements only
    """
    configure_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".lua")

    try:
        if verbose:
            click.echo(f"Transpiling {input_file}...", err=True)

        transpiler = Transpiler(TranspilerOptions(emit_runtime=not no_runtime))
        lua = transpiler.transpile_file(input_file)

        if str(output) == "-":
            click.echo(lua, nl=False)
            return

        output.write_text(lua, encoding="utf-8")
        click.echo(f"Transpiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose, "Transpile")


if __name__ == "__main__":
    main()

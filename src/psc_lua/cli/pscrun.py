"""
pscrun - Run PSC Programs
=========================

Transpiles a PSC file and executes the result with a Lua interpreter. The
interpreter's stdout, stderr and exit status are passed through.

Usage Examples
--------------
    $ pscrun tri.psc
    $ pscrun --lua luajit --timeout 5 tri.psc
    $ pscrun --keep -v tri.psc        # leave the generated script on disk

The interpreter, timeout and script retention default to the PSC_LUA_COMMAND,
PSC_LUA_TIMEOUT and PSC_KEEP_SCRIPT environment variables.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from psc_lua import __version__
from psc_lua.cli.errors import configure_logging, handle_cli_exception
from psc_lua.config import RunnerConfig
from psc_lua.runner import LuaRunner
from psc_lua.transpiler import Transpiler


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--lua", "lua_command",
    metavar="PATH",
    help="Lua interpreter command (default: $PSC_LUA_COMMAND or 'lua')",
)
@click.option(
    "--keep",
    is_flag=True,
    help="Keep the generated .lua script",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Kill the interpreter after this many seconds",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show detailed progress",
)
@click.version_option(version=__version__, prog_name="pscrun")
def main(
    input_file: Path,
    lua_command: Optional[str],
    keep: bool,
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """
    Transpile and run a PSC program.

    INPUT_FILE is the PSC source file (.psc) to run. Piped standard input is
    fed to the program; from a terminal, lire() prompts interactively and
    output appears as it is written.

    \b
    Examples:
        pscrun tri.psc
        pscrun --lua lua5.4 tri.psc
        echo 12 | pscrun carre.psc
    """
    configure_logging(verbose)

    config = RunnerConfig.from_env()
    if lua_command:
        config.lua_command = lua_command
    if keep:
        config.keep_script = True
    if timeout is not None:
        config.timeout = timeout

    try:
        lua = Transpiler().transpile_file(input_file)
        # a terminal is handed to the program as is, output included
        interactive = sys.stdin.isatty()
        input_text = None if interactive else sys.stdin.read()
        result = LuaRunner(config).run(lua, input_text=input_text, capture=not interactive)
    except Exception as e:
        handle_cli_exception(e, verbose, "Run")

    if result.stdout:
        click.echo(result.stdout, nl=False)
    if result.stderr:
        click.echo(result.stderr, nl=False, err=True)
    if config.keep_script:
        click.echo(f"Script kept at {result.script_path}", err=True)

    sys.exit(result.returncode)


if __name__ == "__main__":
    main()

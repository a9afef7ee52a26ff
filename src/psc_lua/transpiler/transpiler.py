"""
PSC → Lua Transpiler Main Module
================================

Orchestrates a complete transpilation:

    Source → pre-passes → registries → engine → runtime + body → post-passes

Usage
-----
Command line:
    $ psc2lua tri.psc -o tri.lua

Programmatic:
    >>> from psc_lua import transpile
    >>> lua = transpile('écrire("Bonjour")')

Pipeline
--------
1. **Pre-passes**: optional ``str -> str`` callables over the PSC source
2. **Collection**: function signatures, composite record types and variable
   type hints, three independent read-only scans of the same source
3. **Rewriting**: the TranspileEngine rewrites the source line by line
4. **Assembly**: the Lua runtime prelude is prepended (unless disabled)
5. **Post-passes**: optional ``str -> str`` callables over the Lua output

Every call builds fresh registries; only the frozen Definitions value is
shared, so a Transpiler may be used from several threads.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from psc_lua.config import TranspilerOptions
from psc_lua.definitions import DEFAULT_DEFINITIONS, Definitions
from psc_lua.errors import SourceLocation, TranspileError
from psc_lua.transpiler.composites import CompositeTypeRegistry
from psc_lua.transpiler.engine import TranspileEngine
from psc_lua.transpiler.functions import FunctionRegistry
from psc_lua.transpiler.runtime import LUA_RUNTIME
from psc_lua.transpiler.variables import collect_variable_types


logger = logging.getLogger(__name__)

TextPass = Callable[[str], str]


class Transpiler:
    """
    PSC to Lua transpiler.

    Example:
        transpiler = Transpiler()
        transpiler.register_post_pass(lambda lua: lua.replace("\\t", "    "))
        lua = transpiler.transpile_file("tri.psc")

    Attributes:
        options: Transpiler configuration options
        definitions: PSC language definitions injected into every component
    """

    def __init__(
        self,
        options: Optional[TranspilerOptions] = None,
        definitions: Definitions = DEFAULT_DEFINITIONS,
    ):
        self.options = options or TranspilerOptions()
        self.definitions = definitions
        self._pre_passes: list[TextPass] = []
        self._post_passes: list[TextPass] = []

    def register_pre_pass(self, text_pass: TextPass) -> TextPass:
        """Run ``text_pass`` on the PSC source before collection."""
        self._pre_passes.append(text_pass)
        return text_pass

    def register_post_pass(self, text_pass: TextPass) -> TextPass:
        """Run ``text_pass`` on the Lua output, runtime included."""
        self._post_passes.append(text_pass)
        return text_pass

    def transpile(self, source: str) -> str:
        """
        Transpile PSC source code to Lua.

        Args:
            source: PSC source text

        Returns:
            Lua source text

        Raises:
            TranspileError: If ``source`` is not text
        """
        if not isinstance(source, str):
            raise TranspileError(
                f"Expected PSC source text, got {type(source).__name__}",
                hint="decode bytes with .decode('utf-8') first",
            )

        for text_pass in self._pre_passes:
            source = text_pass(source)

        functions = FunctionRegistry.collect(source)
        composites = CompositeTypeRegistry.collect(source, self.definitions)
        variable_types = collect_variable_types(source, self.definitions)

        engine = TranspileEngine(
            functions,
            composites,
            variable_types,
            definitions=self.definitions,
            options=self.options,
        )
        body = engine.run(source)
        output = f"{LUA_RUNTIME}\n{body}" if self.options.emit_runtime else body
        logger.debug(f"Transpiled {len(source.splitlines())} PSC line(s) to {len(body.splitlines())} Lua line(s)")

        for text_pass in self._post_passes:
            output = text_pass(output)
        return output

    def transpile_file(self, filepath: Union[str, Path], encoding: str = "utf-8") -> str:
        """
        Transpile a PSC source file.

        Raises:
            TranspileError: If the file cannot be decoded
            FileNotFoundError: If the file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")
        try:
            source = path.read_text(encoding=encoding)
        except UnicodeDecodeError as e:
            raise TranspileError(
                f"Cannot decode source as {encoding}: {e.reason}",
                SourceLocation(str(path)),
                hint="save the file as UTF-8",
            ) from e
        return self.transpile(source)


def transpile(source: str, options: Optional[TranspilerOptions] = None) -> str:
    """Transpile PSC source code to Lua with a one-off Transpiler."""
    return Transpiler(options).transpile(source)

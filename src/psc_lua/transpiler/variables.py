"""
Variable type hints.

Maps identifiers to their declared PSC type, from Lexique declarations
(``a, b : entier``) and function parameter lists. The map is advisory: it
only decides whether ``x ← lire()`` reads a number or a raw string.
Redeclaration silently overwrites.
"""

import logging
import re

from psc_lua.definitions import DEFAULT_DEFINITIONS, Definitions
from psc_lua.transpiler.functions import IN_OUT_PATTERN, parse_function_header
from psc_lua.transpiler.lexical import smart_split_args


logger = logging.getLogger(__name__)

VARIABLE_DECLARATION_PATTERN = re.compile(r"^([\w,\s]+?)\s*:\s*(\w+(?:\([^()]*\))?)")
TYPE_NAME_PATTERN = re.compile(r"^(\w+)")


def _hint(raw_type: str, definitions: Definitions) -> str:
    match = TYPE_NAME_PATTERN.match(raw_type.strip())
    name = match.group(1) if match else raw_type.strip()
    return definitions.normalize_type(name)


def collect_variable_types(
    source: str,
    definitions: Definitions = DEFAULT_DEFINITIONS,
) -> dict[str, str]:
    """Scan ``source`` for declarations; returns ``{identifier: type}``."""
    types = {}
    for line in source.splitlines():
        stripped = line.strip()

        header = parse_function_header(stripped)
        if header is not None:
            for param in smart_split_args(header[1]):
                parts = [p.strip() for p in param.split(":")]
                if len(parts) != 2:
                    continue
                name = IN_OUT_PATTERN.sub("", parts[0]).strip()
                if name and parts[1]:
                    types[name] = _hint(parts[1], definitions)
            continue

        match = VARIABLE_DECLARATION_PATTERN.match(stripped)
        if match:
            hint = _hint(match.group(2), definitions)
            for name in match.group(1).split(","):
                name = name.strip()
                if name:
                    types[name] = hint

    logger.debug(f"Collected {len(types)} variable type hint(s)")
    return types

"""
Statement Classifier
====================

Every PSC line (comments removed, indentation stripped) is classified into
exactly one StatementKind by testing a fixed, ordered list of patterns. The
first match wins, so the order below IS the priority:

    BLANK, ALGORITHM_HEADER, LEXIQUE, SECTION_MARKER, TYPE_DECLARATION,
    VARIABLE_DECLARATION, ARRAY_DECLARATION, BLOCK_CLOSE, READ,
    FUNCTION_HEADER, FOR_EACH, FOR, WHILE, ELSE_IF, IF, ELSE, RETURN,
    WRITE, ASSIGNMENT, EXPRESSION

``Sinon si`` must be tested before ``Sinon`` and ``Pour k de t Faire`` before
the counted ``Pour`` loop; everything else is unambiguous.
"""

import re
from enum import Enum, auto
from typing import Optional

from psc_lua.definitions import DEFAULT_DEFINITIONS, Definitions
from psc_lua.transpiler.composites import parse_composite_type
from psc_lua.transpiler.lexical import IDENTIFIER


class StatementKind(Enum):
    BLANK = auto()
    ALGORITHM_HEADER = auto()
    LEXIQUE = auto()
    SECTION_MARKER = auto()
    TYPE_DECLARATION = auto()
    VARIABLE_DECLARATION = auto()
    ARRAY_DECLARATION = auto()
    BLOCK_CLOSE = auto()
    READ = auto()
    FUNCTION_HEADER = auto()
    FOR_EACH = auto()
    FOR = auto()
    WHILE = auto()
    ELSE_IF = auto()
    IF = auto()
    ELSE = auto()
    RETURN = auto()
    WRITE = auto()
    ASSIGNMENT = auto()
    EXPRESSION = auto()


BLANK_PATTERN = re.compile(r"^[/*\s]*$")
ALGORITHM_PATTERN = re.compile(r"^algorithme\b", re.IGNORECASE)
LEXIQUE_PATTERN = re.compile(r"^lexique\b", re.IGNORECASE)
SECTION_MARKER_PATTERN = re.compile(r"^d[ée]but\b", re.IGNORECASE)
VARIABLE_DECLARATION_PATTERN = re.compile(
    rf"^({IDENTIFIER}(?:\s*,\s*{IDENTIFIER})*)\s*:\s*(\S.*)$"
)
ARRAY_DECLARATION_PATTERN = re.compile(
    rf"^({IDENTIFIER})\s*(?:=|←)\s*tableau\s+({IDENTIFIER})\s*\[(.+)\]\s*$",
    re.IGNORECASE,
)
BLOCK_CLOSE_PATTERN = re.compile(r"^(fin|fsi|fpour|ftq|ftant)\b", re.IGNORECASE)
READ_PATTERN = re.compile(rf"^({IDENTIFIER})\s*←\s*lire\s*\(\s*\)\s*$", re.IGNORECASE)
FUNCTION_HEADER_PATTERN = re.compile(r"^fonction\s", re.IGNORECASE)
FOR_EACH_PATTERN = re.compile(r"^Pour\s+(\S+)\s+de\s+(\S+)\s+Faire\s*:?$", re.IGNORECASE)
FOR_PATTERN = re.compile(r"^Pour\s", re.IGNORECASE)
WHILE_PATTERN = re.compile(r"^Tant\s+que\b", re.IGNORECASE)
ELSE_IF_PATTERN = re.compile(r"^Sinon\s+si\b", re.IGNORECASE)
IF_PATTERN = re.compile(r"^Si\b", re.IGNORECASE)
ELSE_PATTERN = re.compile(r"^Sinon\b", re.IGNORECASE)
RETURN_PATTERN = re.compile(r"^retourner?\b", re.IGNORECASE)
WRITE_PATTERN = re.compile(r"^[ée]crire\s*\(", re.IGNORECASE)


def _is_variable_declaration(line: str, definitions: Definitions) -> bool:
    match = VARIABLE_DECLARATION_PATTERN.match(line)
    if not match:
        return False
    first = match.group(1).split(",")[0].strip().lower()
    return first not in definitions.keyword_names()


def classify(line: str, definitions: Definitions = DEFAULT_DEFINITIONS) -> StatementKind:
    """
    Classify one stripped, comment-free PSC line.

    Args:
        line: Line text without indentation or comments
        definitions: Language definitions (keyword names for declarations)

    Returns:
        The first StatementKind whose pattern matches
    """
    if BLANK_PATTERN.match(line):
        return StatementKind.BLANK
    if ALGORITHM_PATTERN.match(line):
        return StatementKind.ALGORITHM_HEADER
    if LEXIQUE_PATTERN.match(line):
        return StatementKind.LEXIQUE
    if SECTION_MARKER_PATTERN.match(line):
        return StatementKind.SECTION_MARKER
    if parse_composite_type(line, definitions) is not None:
        return StatementKind.TYPE_DECLARATION
    if _is_variable_declaration(line, definitions):
        return StatementKind.VARIABLE_DECLARATION
    if ARRAY_DECLARATION_PATTERN.match(line):
        return StatementKind.ARRAY_DECLARATION
    if BLOCK_CLOSE_PATTERN.match(line):
        return StatementKind.BLOCK_CLOSE
    if READ_PATTERN.match(line):
        return StatementKind.READ
    if FUNCTION_HEADER_PATTERN.match(line):
        return StatementKind.FUNCTION_HEADER
    if FOR_EACH_PATTERN.match(line):
        return StatementKind.FOR_EACH
    if FOR_PATTERN.match(line):
        return StatementKind.FOR
    if WHILE_PATTERN.match(line):
        return StatementKind.WHILE
    if ELSE_IF_PATTERN.match(line):
        return StatementKind.ELSE_IF
    if IF_PATTERN.match(line):
        return StatementKind.IF
    if ELSE_PATTERN.match(line):
        return StatementKind.ELSE
    if RETURN_PATTERN.match(line):
        return StatementKind.RETURN
    if WRITE_PATTERN.match(line):
        return StatementKind.WRITE
    if "←" in line:
        return StatementKind.ASSIGNMENT
    return StatementKind.EXPRESSION


# Block keyword each closer ends; a bare "Fin" ends whatever block is open.
CLOSER_BLOCKS = (
    (re.compile(r"^(?:fsi|fin\s+si)\b", re.IGNORECASE), "si"),
    (re.compile(r"^(?:fpour|fin\s+pour)\b", re.IGNORECASE), "pour"),
    (re.compile(r"^(?:ftq|ftant|fin\s+tant(?:\s*que)?|fin\s+tq)\b", re.IGNORECASE), "tant que"),
)


def closed_block(line: str) -> Optional[str]:
    """
    Block keyword (``"si"``, ``"pour"``, ``"tant que"``) ended by a closer.

    Returns None for ``Fin`` and any other closer that names no block.
    """
    for pattern, keyword in CLOSER_BLOCKS:
        if pattern.match(line):
            return keyword
    return None

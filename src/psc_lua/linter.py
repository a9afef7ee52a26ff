"""
PSC Linter
==========

Static checks over PSC source, reported as Diagnostic records:

- an identifier read before it is declared or assigned in an enclosing
  scope ("L'identifiant 'x' est utilisé avant d'avoir reçu une valeur.")
- a built-in function called with the wrong number of arguments
- an unbalanced parenthesis (warning)
- a block left open at the end of the file (warning)

Scopes
------
``Fonction``, ``Début``, ``Si``, ``Tant que`` and ``Pour`` open a scope;
``Fin``, ``fsi``, ``fpour``, ``ftq`` and ``ftant`` close the innermost one.
A function's ``Début`` reuses the scope opened by its header, so the
parameters go out of scope at the function's ``Fin``. An assignment declares
its target in the current scope, as does a ``x : type`` declaration line.

Identifiers are matched after masking string literals and field names, so
``p.nom`` only checks ``p`` and ``"x vaut"`` checks nothing.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from psc_lua.definitions import DEFAULT_DEFINITIONS, Definitions
from psc_lua.transpiler.composites import CompositeTypeRegistry
from psc_lua.transpiler.functions import FunctionRegistry, extract_function_params, parse_function_header
from psc_lua.transpiler.lexical import (
    IDENTIFIER,
    NOT_FOUND,
    find_matching_paren,
    mask_field_access,
    mask_strings,
    smart_split_args,
    split_comments,
)
from psc_lua.transpiler.statements import (
    ARRAY_DECLARATION_PATTERN,
    FOR_EACH_PATTERN,
    StatementKind,
    classify,
)


logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(rf"(?<!\w){IDENTIFIER}")
CALL_PATTERN = re.compile(rf"(?<![\w.])({IDENTIFIER})\s*\(")
FOR_VARIABLE_PATTERN = re.compile(rf"^Pour\s+({IDENTIFIER})", re.IGNORECASE)
OPENING_BLOCK_PATTERN = re.compile(r"^(Si|Tant\s+que)(?!\w)", re.IGNORECASE)
CLOSING_FIN_PATTERN = re.compile(r"^fin\b", re.IGNORECASE)

UNDECLARED_MESSAGE = "L'identifiant '{name}' est utilisé avant d'avoir reçu une valeur."
ARITY_MESSAGE = "La fonction '{name}' attend {expected} argument(s), {given} fourni(s)."
UNBALANCED_MESSAGE = "Parenthèse ouvrante sans parenthèse fermante."
UNCLOSED_MESSAGE = "Bloc ouvert sans 'Fin' correspondant."


class Severity(Enum):
    """Diagnostic severity."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """
    One linter finding.

    Attributes:
        line: 0-based line number
        column: 0-based start column
        end_column: 0-based end column (exclusive)
        message: French description
        severity: ERROR or WARNING
    """
    line: int
    column: int
    end_column: int
    message: str
    severity: Severity = Severity.ERROR

    def format(self, filename: str = "<input>") -> str:
        """Render as ``file:line:col: severity: message`` (1-based)."""
        return (
            f"{filename}:{self.line + 1}:{self.column + 1}: "
            f"{self.severity.value}: {self.message}"
        )


class Linter:
    """
    Diagnostics provider for PSC source.

    Example:
        for diagnostic in Linter().refresh(source):
            print(diagnostic.format("exo.psc"))
    """

    def __init__(self, definitions: Definitions = DEFAULT_DEFINITIONS):
        self.definitions = definitions
        self._known = definitions.known_identifiers()

    def refresh(self, source: str) -> list[Diagnostic]:
        """Analyze ``source`` and return its diagnostics in line order."""
        functions = FunctionRegistry.collect(source)
        composites = CompositeTypeRegistry.collect(source, self.definitions)
        state = _LintState(
            declared_functions=set(functions.names()),
            composite_types=set(composites.names()),
        )

        in_block_comment = False
        for line_number, raw_line in enumerate(source.splitlines()):
            code, _, in_block_comment = split_comments(raw_line, in_block_comment)
            self._lint_line(line_number, code, state)

        if state.depth > 0:
            last_line = max(len(source.splitlines()) - 1, 0)
            state.diagnostics.append(
                Diagnostic(last_line, 0, 0, UNCLOSED_MESSAGE, Severity.WARNING)
            )

        logger.debug(f"Linter found {len(state.diagnostics)} diagnostic(s)")
        return state.diagnostics

    # -------------------------------------------------------------------------
    # Line Analysis
    # -------------------------------------------------------------------------

    def _lint_line(self, line_number: int, code: str, state: "_LintState") -> None:
        masked = mask_field_access(mask_strings(code))
        stripped = masked.strip()
        offset = len(masked) - len(masked.lstrip())
        kind = classify(stripped, self.definitions)

        if state.in_algorithm_header:
            if kind == StatementKind.BLOCK_CLOSE and CLOSING_FIN_PATTERN.match(stripped):
                state.in_algorithm_header = False
            return

        if kind in (StatementKind.BLANK, StatementKind.LEXIQUE, StatementKind.TYPE_DECLARATION):
            return

        if kind == StatementKind.ALGORITHM_HEADER:
            state.in_algorithm_header = True
            return

        if kind == StatementKind.FUNCTION_HEADER:
            scope = set()
            header = parse_function_header(stripped)
            if header is not None:
                scope.update(p.name for p in extract_function_params(header[1]))
            state.push(scope, pending_function=True)
            return

        if kind == StatementKind.SECTION_MARKER:
            if state.pending_function:
                state.pending_function = False
            else:
                state.push(set())
            return

        if kind == StatementKind.BLOCK_CLOSE:
            state.pop()
            return

        if kind == StatementKind.VARIABLE_DECLARATION:
            names = stripped.split(":", 1)[0]
            state.declare(n.strip() for n in names.split(","))
            return

        self._check_arity(line_number, code, masked, state)

        if kind == StatementKind.ARRAY_DECLARATION:
            match = ARRAY_DECLARATION_PATTERN.match(stripped)
            state.declare([match.group(1)])
            self._check_identifiers(line_number, masked, offset + match.start(3), offset + match.end(3), state)
            return

        if kind in (StatementKind.FOR, StatementKind.FOR_EACH):
            match = FOR_VARIABLE_PATTERN.match(stripped)
            state.push({match.group(1)} if match else set())
            start = offset + (match.end(1) if match else 0)
            if kind == StatementKind.FOR_EACH:
                start = offset + FOR_EACH_PATTERN.match(stripped).start(2)
            self._check_identifiers(line_number, masked, start, len(masked), state)
            return

        if OPENING_BLOCK_PATTERN.match(stripped):
            state.push(set())

        arrow = masked.find("←")
        if kind in (StatementKind.ASSIGNMENT, StatementKind.READ) and arrow != NOT_FOUND:
            self._check_identifiers(line_number, masked, arrow + 1, len(masked), state)
            target = WORD_PATTERN.search(masked, 0, arrow)
            if target is not None:
                state.declare([target.group(0)])
                self._check_identifiers(line_number, masked, target.end(), arrow, state)
            return

        self._check_identifiers(line_number, masked, 0, len(masked), state)

    def _check_identifiers(
        self,
        line_number: int,
        masked: str,
        start: int,
        end: int,
        state: "_LintState",
    ) -> None:
        for match in WORD_PATTERN.finditer(masked, start, end):
            name = match.group(0)
            if self._is_known(name, state):
                continue
            state.diagnostics.append(Diagnostic(
                line_number,
                match.start(),
                match.end(),
                UNDECLARED_MESSAGE.format(name=name),
            ))

    def _is_known(self, name: str, state: "_LintState") -> bool:
        lowered = name.lower()
        if lowered in self._known or lowered in state.composite_types:
            return True
        if name in state.declared_functions:
            return True
        return any(name in scope for scope in state.scopes)

    def _check_arity(self, line_number: int, code: str, masked: str, state: "_LintState") -> None:
        # Parentheses are matched on the masked text; arguments are split on
        # the original so string literals still count.
        for match in CALL_PATTERN.finditer(masked):
            name = match.group(1)
            open_index = match.end() - 1
            close_index = find_matching_paren(masked, open_index)
            if close_index == NOT_FOUND:
                state.diagnostics.append(Diagnostic(
                    line_number, open_index, open_index + 1,
                    UNBALANCED_MESSAGE, Severity.WARNING,
                ))
                return

            builtin = self.definitions.function(name)
            if builtin is None or name in state.declared_functions:
                continue
            given = len(smart_split_args(code[open_index + 1:close_index]))
            if given != builtin.arity:
                state.diagnostics.append(Diagnostic(
                    line_number,
                    match.start(1),
                    close_index + 1,
                    ARITY_MESSAGE.format(name=name, expected=builtin.arity, given=given),
                ))


class _LintState:
    """Mutable per-run state: scope stack and collected diagnostics."""

    def __init__(self, declared_functions: set[str], composite_types: set[str]):
        self.declared_functions = declared_functions
        self.composite_types = composite_types
        self.scopes: list[set[str]] = [set()]
        self.diagnostics: list[Diagnostic] = []
        self.pending_function = False
        self.in_algorithm_header = False

    @property
    def depth(self) -> int:
        return len(self.scopes) - 1

    def push(self, scope: set[str], pending_function: bool = False) -> None:
        self.scopes.append(scope)
        self.pending_function = pending_function

    def pop(self) -> Optional[set[str]]:
        self.pending_function = False
        if len(self.scopes) > 1:
            return self.scopes.pop()
        return None

    def declare(self, names) -> None:
        self.scopes[-1].update(n for n in names if n)

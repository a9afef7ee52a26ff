"""
Composite Type Registry
=======================

Record types are declared on a line of their own:

    Point = <x : entier, y : entier>
    Personne <nom : chaîne, age : entier>

and built either with a constructor call or an angle-bracket literal:

    p ← Point(3, 4)          →   p = {x = 3, y = 4}
    q ← <1, 2>               →   q = {x = 1, y = 2}   (matched by field count)
    r ← <"a", 1, 2>          →   r = {"a", 1, 2}      (no 3-field type: positional)

The tables produced here are held as opaque TableSpan nodes in the line's
SpanStore. Their field values are rewritten by the engine when the line is
rendered, and their ``field = value`` glue is never seen by the equality
pass.

Resolution order
----------------
- Nested constructors are resolved innermost-first: the arguments of a call
  are transformed before the call itself is replaced.
- When several types share a field count, the first declared type wins.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from psc_lua.definitions import DEFAULT_DEFINITIONS, Definitions
from psc_lua.transpiler.lexical import (
    IDENTIFIER,
    NOT_FOUND,
    find_matching_paren,
    smart_split_args,
)
from psc_lua.transpiler.spans import SpanStore, TableSpan


logger = logging.getLogger(__name__)

COMPOSITE_TYPE_PATTERN = re.compile(
    rf"^({IDENTIFIER})\s*(?:=\s*)?<\s*(.+?)\s*>$", re.IGNORECASE
)
COMPOSITE_FIELD_PATTERN = re.compile(rf"^({IDENTIFIER})\s*:\s*(.+)$")

# Innermost angle-bracket span (no nested angle brackets inside).
LITERAL_PATTERN = re.compile(r"<([^<>]*)>")
CALL_START_PATTERN = re.compile(r"^\w+\s*\(")


@dataclass(frozen=True)
class CompositeField:
    name: str
    declared_type: str


@dataclass(frozen=True)
class CompositeType:
    """A record type: its declared name (original case) and ordered fields."""
    name: str
    fields: tuple[CompositeField, ...]

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


def parse_composite_type(line: str, definitions: Definitions = DEFAULT_DEFINITIONS) -> Optional[CompositeType]:
    """Parse a record declaration line, or return None if it is not one."""
    match = COMPOSITE_TYPE_PATTERN.match(line.strip())
    if not match:
        return None

    fields = []
    for part in match.group(2).split(","):
        field_match = COMPOSITE_FIELD_PATTERN.match(part.strip())
        if field_match:
            fields.append(CompositeField(
                field_match.group(1),
                definitions.normalize_type(field_match.group(2)),
            ))
    if not fields:
        return None
    return CompositeType(match.group(1), tuple(fields))


@dataclass(frozen=True)
class CompositeTypeRegistry:
    """
    Read-only table of the record types declared in one PSC source.

    Keys are lowercased names: PSC identifiers are case-insensitive for
    type lookup.
    """
    types: dict[str, CompositeType] = field(default_factory=dict)

    @classmethod
    def collect(
        cls,
        source: str,
        definitions: Definitions = DEFAULT_DEFINITIONS,
    ) -> "CompositeTypeRegistry":
        types = {}
        for line in source.splitlines():
            composite = parse_composite_type(line, definitions)
            if composite is not None:
                types[composite.name.lower()] = composite

        logger.debug(f"Collected {len(types)} composite type(s)")
        return cls(types)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, name: str) -> Optional[CompositeType]:
        return self.types.get(name.lower())

    def has(self, name: str) -> bool:
        return name.lower() in self.types

    def names(self) -> set[str]:
        """Lowercased type names."""
        return set(self.types)

    def find_by_field_count(self, count: int) -> Optional[CompositeType]:
        """First declared type with exactly ``count`` fields."""
        for composite in self.types.values():
            if len(composite.fields) == count:
                return composite
        return None

    # -------------------------------------------------------------------------
    # Rewriting
    # -------------------------------------------------------------------------

    def transform(self, expression: str, spans: SpanStore) -> str:
        """Constructors first, then remaining angle-bracket literals."""
        return self.transform_literals(self.transform_constructors(expression, spans), spans)

    def transform_constructors(self, expression: str, spans: SpanStore) -> str:
        """
        Replace ``Type(a, b)`` calls with table tokens.

        Arguments map to fields in declaration order; missing trailing
        arguments become ``nil``. An unmatched parenthesis stops the rewrite
        and leaves the rest of the expression as is.
        """
        if not self.types:
            return expression
        names = sorted((re.escape(c.name) for c in self.types.values()), key=len, reverse=True)
        pattern = re.compile(rf"(?<![\w.])({'|'.join(names)})\s*\(", re.IGNORECASE)
        return self._rewrite_constructors(expression, pattern, spans)

    def _rewrite_constructors(self, text: str, pattern: re.Pattern, spans: SpanStore) -> str:
        out = []
        pos = 0
        while True:
            match = pattern.search(text, pos)
            if match is None:
                break
            open_index = match.end() - 1
            close_index = find_matching_paren(text, open_index)
            if close_index == NOT_FOUND:
                logger.warning(f"Unmatched parenthesis after constructor '{match.group(1)}'")
                break

            inner = self._rewrite_constructors(text[open_index + 1:close_index], pattern, spans)
            args = smart_split_args(inner)
            composite = self.get(match.group(1))
            table = TableSpan([
                (f.name, args[i] if i < len(args) else "nil")
                for i, f in enumerate(composite.fields)
            ])
            out.append(text[pos:match.start()])
            out.append(spans.hold(table))
            pos = close_index + 1

        out.append(text[pos:])
        return "".join(out)

    def transform_literals(self, expression: str, spans: SpanStore) -> str:
        """
        Replace structural ``<...>`` literals with table tokens.

        A ``<`` that follows an operand (identifier, number, closing bracket
        or another literal) is a comparison and is left alone. The content
        must look structural: a comma, a leading string or brace, a leading
        call, or a nested literal.
        """
        text = expression
        while True:
            for match in LITERAL_PATTERN.finditer(text):
                content = match.group(1).strip()
                if not self._is_literal_site(text, match.start()):
                    continue
                if not self._looks_structural(content, spans):
                    continue
                text = text[:match.start()] + spans.hold(self._literal_table(content)) + text[match.end():]
                break
            else:
                return text

    @staticmethod
    def _is_literal_site(text: str, index: int) -> bool:
        before = text[:index].rstrip()
        if not before:
            return True
        prev = before[-1]
        return not (prev.isalnum() or prev in "_)]")

    @staticmethod
    def _looks_structural(content: str, spans: SpanStore) -> bool:
        if not content:
            return False
        return (
            "," in content
            or content[0] in "\"'{"
            or spans.starts_with_string(content)
            or CALL_START_PATTERN.match(content) is not None
            or spans.is_token(content)
        )

    def _literal_table(self, content: str) -> TableSpan:
        args = smart_split_args(content)
        composite = self.find_by_field_count(len(args))
        if composite is None:
            return TableSpan([(None, arg) for arg in args])
        return TableSpan([(f.name, args[i]) for i, f in enumerate(composite.fields)])

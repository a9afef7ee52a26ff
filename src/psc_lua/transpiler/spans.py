"""
Opaque Spans
============

Some sub-expressions must survive later regex passes untouched: string
literals (their content is never PSC code) and the record tables produced by
the composite type pass (their ``field = value`` glue must not be turned
into a comparison).

Instead of textual sentinel markers, such a sub-expression is stored as a
span object in a per-line ``SpanStore`` and replaced in the working text by
an atomic token built from Unicode private-use characters. The token holds
no letter, digit, bracket or operator, so identifier and operator patterns
cannot match inside it, and it cannot collide with user text.

Example
-------
>>> store = SpanStore()
>>> masked = store.mask_strings('écrire("a = b", x)')
>>> "=" in masked
False
>>> store.restore_strings(masked)
'écrire("a = b", x)'
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Union


_OPEN = "\ue000"
_CLOSE = "\ue001"
_DIGIT_BASE = 0xE100
_DIGIT_RADIX = 256

TOKEN_PATTERN = re.compile("\ue000([\ue100-\ue1ff]+)\ue001")
STRING_LITERAL_PATTERN = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\\\'])\'')


@dataclass(frozen=True)
class StringSpan:
    """A string or character literal, kept verbatim."""
    literal: str


@dataclass
class TableSpan:
    """
    A Lua table produced from a record constructor or ``<...>`` literal.

    Attributes:
        fields: (field name, value text) pairs; the name is None for a
                positional table. Value text may itself contain tokens.
    """
    fields: list[tuple[Optional[str], str]] = field(default_factory=list)

    @property
    def is_named(self) -> bool:
        return any(name is not None for name, _ in self.fields)


Span = Union[StringSpan, TableSpan]


def _encode(index: int) -> str:
    digits = []
    while True:
        index, digit = divmod(index, _DIGIT_RADIX)
        digits.append(chr(_DIGIT_BASE + digit))
        if index == 0:
            break
    return "".join(reversed(digits))


def _decode(digits: str) -> int:
    value = 0
    for ch in digits:
        value = value * _DIGIT_RADIX + (ord(ch) - _DIGIT_BASE)
    return value


class SpanStore:
    """
    Per-line registry of opaque spans.

    A new store is created for every line the engine rewrites; tokens are
    only meaningful to the store that issued them.
    """

    def __init__(self):
        self._spans: list[Span] = []

    def hold(self, span: Span) -> str:
        """Store a span and return the token standing for it."""
        self._spans.append(span)
        return f"{_OPEN}{_encode(len(self._spans) - 1)}{_CLOSE}"

    def get(self, token: str) -> Optional[Span]:
        match = TOKEN_PATTERN.fullmatch(token.strip())
        if not match:
            return None
        index = _decode(match.group(1))
        return self._spans[index] if index < len(self._spans) else None

    # -------------------------------------------------------------------------
    # Token predicates
    # -------------------------------------------------------------------------

    @staticmethod
    def is_token(text: str) -> bool:
        return TOKEN_PATTERN.fullmatch(text.strip()) is not None

    @staticmethod
    def contains_token(text: str) -> bool:
        return TOKEN_PATTERN.search(text) is not None

    def starts_with_string(self, text: str) -> bool:
        """True when ``text`` begins with a masked string literal."""
        match = TOKEN_PATTERN.match(text.lstrip())
        return match is not None and isinstance(self.get(match.group(0)), StringSpan)

    # -------------------------------------------------------------------------
    # Masking and expansion
    # -------------------------------------------------------------------------

    def mask_strings(self, text: str) -> str:
        """Replace every string/character literal with a token."""
        return STRING_LITERAL_PATTERN.sub(
            lambda m: self.hold(StringSpan(m.group(0))), text
        )

    def expand(
        self,
        text: str,
        kind: type,
        render: Callable[[Span], str],
    ) -> str:
        """
        Replace tokens of spans of ``kind`` with ``render(span)``.

        Rendered text may contain further tokens (nested tables), so the
        replacement repeats until no token of that kind is left.
        """
        def replace(match: re.Match) -> str:
            span = self._spans[_decode(match.group(1))]
            if isinstance(span, kind):
                return render(span)
            return match.group(0)

        while True:
            expanded = TOKEN_PATTERN.sub(replace, text)
            if expanded == text:
                return expanded
            text = expanded

    def restore_strings(self, text: str) -> str:
        return self.expand(text, StringSpan, lambda span: span.literal)

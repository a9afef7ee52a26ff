"""
Lexical Utilities
=================

Generic string scanning shared by the registries, the transpile engine and
the linter. None of these helpers understands PSC statements; they only
know about brackets, quotes, comments and identifiers.

All functions are total: malformed input (unbalanced brackets, unterminated
strings) yields a sentinel or a best-effort result, never an exception.
"""

import re
from dataclasses import dataclass
from typing import NamedTuple, Optional

from psc_lua.definitions import DEFAULT_DEFINITIONS, Definitions


# Unicode-aware identifier: a letter or underscore, then word characters.
IDENTIFIER = r"[^\W\d]\w*"

IDENTIFIER_PATTERN = re.compile(IDENTIFIER)
SIMPLE_IDENTIFIER_PATTERN = re.compile(rf"^{IDENTIFIER}$")

DOUBLE_QUOTED_PATTERN = re.compile(r'"[^"]*"')
SINGLE_QUOTED_PATTERN = re.compile(r"'(?:\\.|[^\\'])'")

FIELD_ACCESS_PATTERN = re.compile(rf"({IDENTIFIER})\.({IDENTIFIER})")
BRACKET_FIELD_PATTERN = re.compile(rf"(\])\.({IDENTIFIER})")
DOT_FIELD_PATTERN = re.compile(rf"\.{IDENTIFIER}")

INDENTATION_PATTERN = re.compile(r"^\s*")

NOT_FOUND = -1

# Safety valve for mask_field_access; real chains converge in a few rounds.
MAX_MASK_ROUNDS = 64

_OPENERS = "([{"
_CLOSERS = ")]}"


# =============================================================================
# Bracket Scanning
# =============================================================================

def find_matching_paren(text: str, open_index: int) -> int:
    """
    Find the ``)`` matching the ``(`` at ``open_index``.

    Nested parentheses are counted. Parentheses inside string literals are
    NOT skipped: callers mask strings first when that matters.

    Returns:
        Index of the matching parenthesis, or NOT_FOUND (-1)
    """
    return find_matching_bracket(text, open_index, "(", ")")


def find_matching_bracket(text: str, open_index: int, opener: str, closer: str) -> int:
    """Generalization of find_matching_paren for any bracket pair."""
    depth = 1
    for i in range(open_index + 1, len(text)):
        ch = text[i]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
    return NOT_FOUND


def smart_split_args(text: str) -> list[str]:
    """
    Split an argument list on top-level commas.

    ``(``, ``[`` and ``{`` increase the depth, their closers decrease it, and
    the content of ``"..."`` / ``'...'`` literals (with backslash escapes) is
    opaque. Each item is stripped. Blank input gives an empty list.

    Example:
        >>> smart_split_args('a, (b, c), "d,e"')
        ['a', '(b, c)', '"d,e"']
    """
    if not text.strip():
        return []

    args = []
    current = []
    depth = 0
    quote: Optional[str] = None
    escaped = False

    for ch in text:
        if quote:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch in "\"'":
            quote = ch
            current.append(ch)
        elif ch in _OPENERS:
            depth += 1
            current.append(ch)
        elif ch in _CLOSERS:
            depth -= 1
            current.append(ch)
        elif ch == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(ch)

    last = "".join(current).strip()
    if last:
        args.append(last)
    return args


def cut_at_unbalanced_paren(text: str) -> str:
    """
    Return ``text`` up to its first unbalanced ``)``.

    Used on the greedy capture of a function header so that a trailing
    return-type annotation (which may contain parentheses) is dropped:
    ``"a : entier) : tableau(3"`` gives ``"a : entier"``.
    """
    depth = 0
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return text[:i]
    return text


# =============================================================================
# Comments
# =============================================================================

class LineComments(NamedTuple):
    """Result of splitting one physical line into code and comments."""
    code: str
    line_comment: Optional[str]
    in_block_comment: bool


@dataclass(frozen=True)
class CommentScan:
    """Result of clean_line_from_comments."""
    text: str
    in_block_comment: bool


def _closing_quote(line: str, start: int, quote: str) -> int:
    i = start + 1
    while i < len(line):
        if line[i] == "\\":
            i += 2
            continue
        if line[i] == quote:
            return i
        i += 1
    return NOT_FOUND


def split_comments(line: str, in_block_comment: bool = False) -> LineComments:
    """
    Separate code from ``//`` and ``/* */`` comments.

    The block-comment state is carried between lines: a line that opens
    ``/*`` without closing it returns ``in_block_comment=True`` and the next
    line must be scanned with that flag. ``//`` or ``/*`` inside a closed
    string literal does not start a comment.

    Returns:
        LineComments(code, line_comment, in_block_comment) where
        ``line_comment`` is the text after ``//`` (None when absent)
    """
    code = []
    i = 0
    n = len(line)

    while i < n:
        if in_block_comment:
            end = line.find("*/", i)
            if end == NOT_FOUND:
                return LineComments("".join(code), None, True)
            in_block_comment = False
            i = end + 2
            continue

        ch = line[i]
        if ch in "\"'":
            close = _closing_quote(line, i, ch)
            if close != NOT_FOUND:
                code.append(line[i:close + 1])
                i = close + 1
                continue
        if line.startswith("//", i):
            return LineComments("".join(code), line[i + 2:], False)
        if line.startswith("/*", i):
            in_block_comment = True
            i += 2
            continue
        code.append(ch)
        i += 1

    return LineComments("".join(code), None, in_block_comment)


def clean_line_from_comments(line: str, in_block_comment: bool = False) -> CommentScan:
    """
    Remove ``//`` and ``/* */`` comments from a line.

    States: Normal and InBlock. An unterminated ``/*`` moves to InBlock;
    the matching ``*/`` (possibly on a later line) returns to Normal.
    """
    result = split_comments(line, in_block_comment)
    return CommentScan(result.code, result.in_block_comment)


# =============================================================================
# Masking
# =============================================================================

def _blank(match: re.Match) -> str:
    return " " * len(match.group(0))


def mask_strings(text: str) -> str:
    """Replace string and character literals with equal-length blanks."""
    text = DOUBLE_QUOTED_PATTERN.sub(_blank, text)
    return SINGLE_QUOTED_PATTERN.sub(_blank, text)


def mask_field_access(text: str) -> str:
    """
    Blank out field names so only base variables remain visible.

    ``date.jour.mois`` becomes ``date`` followed by blanks and ``t[i].nom``
    keeps ``t[i]``. Offsets are preserved. The result is a fixed point:
    masking it again changes nothing.
    """
    result = text
    for _ in range(MAX_MASK_ROUNDS):
        before = result
        result = FIELD_ACCESS_PATTERN.sub(
            lambda m: m.group(1) + " " * (len(m.group(2)) + 1), result
        )
        result = BRACKET_FIELD_PATTERN.sub(
            lambda m: m.group(1) + " " * (len(m.group(2)) + 1), result
        )
        result = DOT_FIELD_PATTERN.sub(_blank, result)
        if result == before:
            break
    return result


# =============================================================================
# Identifiers and Types
# =============================================================================

def is_simple_identifier(text: str) -> bool:
    """True for a bare identifier (no index, field access or call)."""
    return SIMPLE_IDENTIFIER_PATTERN.match(text) is not None


def normalize_type(raw: str, definitions: Definitions = DEFAULT_DEFINITIONS) -> str:
    """Canonical spelling of a built-in type name (``booleen`` → ``booléen``)."""
    return definitions.normalize_type(raw)


def leading_indentation(line: str) -> str:
    match = INDENTATION_PATTERN.match(line)
    return match.group(0) if match else ""

"""
Transpile Engine
================

Line-oriented rewrite of PSC statements into Lua.

Each physical line goes through the same steps:

1. Smart quotes are normalized and the ``//`` / ``/* */`` comments are split
   off (a trailing ``//`` comment is re-emitted as ``--`` at the end).
2. String literals are masked as opaque spans, so no later rewrite can alter
   their content.
3. The line is classified (see ``statements.classify``) and dispatched to
   the handler for its StatementKind. Handlers that need to know about
   enclosing blocks use the block stack.
4. Expression text goes through the value passes, in this order:
   composite constructors and ``<...>`` literals, parenthesized list
   literals, explicit ADT constructors, string built-ins, built-in helper
   names, keyword/operator substitution, ``=`` vs ``==``, ``lire()``, and
   finally the rendering of generated tables.
5. Brackets are rewritten (``a[i, j]`` → ``a[(i) + 1][(j) + 1]``, bare
   ``[a, b]`` → ``{a, b}``), string literals are restored, indentation and
   comment are re-attached.

Block stack
-----------
``Fonction`` pushes a FUNCTION frame (its ``Début`` only marks it opened),
a ``Début`` with no pending function pushes a MAIN frame, and ``Si``,
``Tant que`` and ``Pour`` push CONTROL frames. ``Fin`` pops the top frame.
A closer that names its block (``fsi``, ``fpour``, ``ftq``, ``Fin Si``...)
pops down to the innermost frame of that kind, closing any unterminated
block above it on the way. FUNCTION and CONTROL frames emit ``end``, a
MAIN frame emits nothing.

Failure policy
--------------
The engine never raises on textual input. An unmatched bracket stops the
rewrite of that construct and the rest of the line is emitted as is.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from psc_lua.config import TranspilerOptions
from psc_lua.definitions import DEFAULT_DEFINITIONS, Definitions
from psc_lua.transpiler.composites import CompositeTypeRegistry
from psc_lua.transpiler.functions import (
    FunctionInfo,
    FunctionRegistry,
    parse_function_header,
)
from psc_lua.transpiler.lexical import (
    IDENTIFIER,
    NOT_FOUND,
    find_matching_bracket,
    find_matching_paren,
    is_simple_identifier,
    leading_indentation,
    smart_split_args,
    split_comments,
)
from psc_lua.transpiler.spans import SpanStore, TableSpan
from psc_lua.transpiler.statements import (
    ARRAY_DECLARATION_PATTERN,
    FOR_EACH_PATTERN,
    READ_PATTERN,
    StatementKind,
    classify,
    closed_block,
)


logger = logging.getLogger(__name__)

SMART_QUOTES_PATTERN = re.compile("[“”]")
CALL_PATTERN = re.compile(rf"(?<![\w.])({IDENTIFIER})\s*\(")
TRAILING_WORD_PATTERN = re.compile(rf"({IDENTIFIER})$")

FUNCTION_NAME_PATTERN = re.compile(rf"^fonction\s+({IDENTIFIER})", re.IGNORECASE)
FOR_LOOP_PATTERN = re.compile(
    rf"^Pour\s+({IDENTIFIER})\s+(?:allant\s+de|de)\s+(.+?)\s+Faire\s*:?$",
    re.IGNORECASE,
)
# "à" separates the bounds; a bare "a" is tried only when no "à" split works.
RANGE_SEPARATORS = (
    re.compile(r"(?<=\s)à(?=\s)", re.IGNORECASE),
    re.compile(r"(?<=\s)a(?=\s)", re.IGNORECASE),
)
OPERATOR_ENDINGS = tuple("+-*/%^(,<>=≤≥≠")
DECREASING_PATTERN = re.compile(r"\s*\bd[ée]croissant\b", re.IGNORECASE)
WHILE_HEADER_PATTERN = re.compile(r"^Tant\s+que\s+(.*?)(?:\s+Faire)?\s*:?\s*$", re.IGNORECASE)
IF_HEADER_PATTERN = re.compile(r"^Si\s+(.*?)(?:\s+Alors)?\s*:?\s*$", re.IGNORECASE)
ELSE_IF_HEADER_PATTERN = re.compile(r"^Sinon\s+si\s+(.*?)(?:\s+Alors)?\s*:?\s*$", re.IGNORECASE)
RETURN_HEADER_PATTERN = re.compile(r"^retourner?\b\s*(.*)$", re.IGNORECASE)
RETURN_LINE_PATTERN = re.compile(r"^return\b")
RANGE_PATTERN = re.compile(r"^(.+?)\s*\.\.\s*(.+)$")

CONSTRUCTOR_PATTERN = re.compile(r"(?<![\w.])(liste|listesym|pile|file|table)\s*\(", re.IGNORECASE)
TABLE_ARROW_PATTERN = re.compile(r"\s*→\s*")
LIRE_CALL_PATTERN = re.compile(r"(?<![\w.])lire\s*\(\s*\)", re.IGNORECASE)
BARE_EQUALS_PATTERN = re.compile(r"(?<![<>=~])=(?!=)")
NUMBER_PATTERN = re.compile(r"^\d+(?:[.,]\d+)?$")
BUILT_LIST_PATTERN = re.compile(r"^__psc_liste_from_table\s*\(")

# Characters after which "(" may open a list literal. After a word (a call,
# or a keyword such as "et"/"non") the parenthesis is never a list.
LIST_OPENING_CHARS = "=,(;:[{←→"

# A "[" right after one of these Lua words opens an array literal.
LUA_WORDS = frozenset({
    "and", "or", "not", "return", "in", "do", "then", "else", "elseif",
    "if", "while", "until",
})

STRING_TYPES = ("chaîne", "caractère")


def split_loop_range(text: str) -> Optional[tuple[str, str]]:
    """
    Split ``start à stop`` at the first separator whose left side is a
    complete operand.

    ``0 à a - 1`` gives ``("0", "a - 1")``; ``n - a a 10`` gives
    ``("n - a", "10")``. Returns None when no separator fits.
    """
    for separator in RANGE_SEPARATORS:
        for match in separator.finditer(text):
            start = text[:match.start()].strip()
            stop = text[match.end():].strip()
            if start and stop and not start.endswith(OPERATOR_ENDINGS):
                return start, stop
    return None


class FrameKind(Enum):
    FUNCTION = auto()
    MAIN = auto()
    CONTROL = auto()


@dataclass
class BlockFrame:
    """
    An open block.

    FUNCTION frames carry their FunctionInfo; CONTROL frames carry the
    keyword (``si``, ``pour``, ``tant que``) that a specific closer matches.
    """
    kind: FrameKind
    function: Optional[FunctionInfo] = None
    opened: bool = False
    keyword: Optional[str] = None


class TranspileEngine:
    """
    Rewrites PSC source into Lua statements (without the runtime prelude).

    The registries are built beforehand by the caller and are read-only
    here; all mutable state lives in the engine instance and is reset at
    the start of every ``run``.

    Example:
        engine = TranspileEngine(
            FunctionRegistry.collect(source),
            CompositeTypeRegistry.collect(source),
            collect_variable_types(source),
        )
        lua = engine.run(source)
    """

    def __init__(
        self,
        functions: FunctionRegistry,
        composites: CompositeTypeRegistry,
        variable_types: dict[str, str],
        definitions: Definitions = DEFAULT_DEFINITIONS,
        options: Optional[TranspilerOptions] = None,
    ):
        self.functions = functions
        self.composites = composites
        self.variable_types = variable_types
        self.definitions = definitions
        self.options = options or TranspilerOptions()

        self._user_functions = {name.lower() for name in functions.names()}
        self._replacements = self._compile_replacements(definitions)
        inline_names = sorted(
            (re.escape(f.name) for f in definitions.functions if f.is_inline),
            key=len,
            reverse=True,
        )
        self._string_builtin_pattern = re.compile(
            rf"(?<![\w.])({'|'.join(inline_names)})\s*\(", re.IGNORECASE
        ) if inline_names else None

        self._handlers: dict[StatementKind, Callable[[str, SpanStore], list[str]]] = {
            StatementKind.ALGORITHM_HEADER: self._algorithm_header,
            StatementKind.LEXIQUE: self._lexique,
            StatementKind.SECTION_MARKER: self._section_marker,
            StatementKind.TYPE_DECLARATION: self._declaration,
            StatementKind.VARIABLE_DECLARATION: self._declaration,
            StatementKind.ARRAY_DECLARATION: self._array_declaration,
            StatementKind.BLOCK_CLOSE: self._block_close,
            StatementKind.READ: self._read,
            StatementKind.FUNCTION_HEADER: self._function_header,
            StatementKind.FOR_EACH: self._for_each,
            StatementKind.FOR: self._for,
            StatementKind.WHILE: self._while,
            StatementKind.ELSE_IF: self._else_if,
            StatementKind.IF: self._if,
            StatementKind.ELSE: self._else,
            StatementKind.RETURN: self._return,
            StatementKind.WRITE: self._write,
            StatementKind.ASSIGNMENT: self._assignment,
            StatementKind.EXPRESSION: self._expression,
        }
        self._reset()

    @staticmethod
    def _compile_replacements(definitions: Definitions) -> list[tuple[re.Pattern, str]]:
        compiled = []
        for replacement in definitions.replacements:
            if replacement.is_word:
                pattern = re.compile(
                    rf"(?<![\w.]){re.escape(replacement.source)}(?!\w)", re.IGNORECASE
                )
            else:
                pattern = re.compile(re.escape(replacement.source))
            compiled.append((pattern, replacement.target))
        return compiled

    def _reset(self):
        self._output: list[str] = []
        self._frames: list[BlockFrame] = []
        self._in_algorithm_header = False
        self._in_lexique = False
        self._in_block_comment = False
        self._last_code = ""

    # =========================================================================
    # Line Loop
    # =========================================================================

    def run(self, source: str) -> str:
        """Rewrite every line of ``source``; returns the Lua statements."""
        self._reset()
        for line_number, line in enumerate(source.splitlines(), 1):
            self._process_line(line, line_number)

        if self._frames:
            logger.debug(f"{len(self._frames)} block(s) still open at end of input")
        return "\n".join(self._output) + "\n" if self._output else ""

    def _process_line(self, raw_line: str, line_number: int):
        line = SMART_QUOTES_PATTERN.sub('"', raw_line)
        code, comment_body, self._in_block_comment = split_comments(
            line, self._in_block_comment
        )
        comment = self._format_comment(comment_body)
        indentation = leading_indentation(line)
        stripped = code.strip()

        if self._in_algorithm_header:
            if classify(stripped, self.definitions) is StatementKind.BLOCK_CLOSE \
                    and stripped.lower().startswith("fin"):
                self._in_algorithm_header = False
            return

        spans = SpanStore()
        masked = spans.mask_strings(stripped)
        kind = classify(masked, self.definitions)
        logger.debug(f"Line {line_number}: {kind.name}")

        if self._in_lexique:
            if kind not in (
                StatementKind.SECTION_MARKER,
                StatementKind.FUNCTION_HEADER,
                StatementKind.ALGORITHM_HEADER,
            ):
                return
            self._in_lexique = False

        if kind is StatementKind.BLANK:
            self._emit(indentation, [], comment)
            return

        self._emit(indentation, self._handlers[kind](masked, spans), comment)

    def _format_comment(self, body: Optional[str]) -> Optional[str]:
        if body is None:
            return None
        # "--[" would open a Lua long comment
        if body.startswith("["):
            return f"{self.options.comment_prefix} {body}"
        return f"{self.options.comment_prefix}{body}"

    def _emit(self, indentation: str, lines: list[str], comment: Optional[str]):
        if not lines:
            if comment:
                self._output.append(indentation + comment)
            return
        for index, code in enumerate(lines):
            text = indentation + code
            if comment and index == len(lines) - 1:
                text += " " + comment
            self._output.append(text)
            self._last_code = code.strip()

    # =========================================================================
    # Block Stack
    # =========================================================================

    def _current_function(self) -> Optional[FunctionInfo]:
        for frame in reversed(self._frames):
            if frame.kind is FrameKind.FUNCTION:
                return frame.function
        return None

    def _algorithm_header(self, masked: str, spans: SpanStore) -> list[str]:
        self._in_algorithm_header = True
        return []

    def _lexique(self, masked: str, spans: SpanStore) -> list[str]:
        self._in_lexique = True
        return []

    def _section_marker(self, masked: str, spans: SpanStore) -> list[str]:
        top = self._frames[-1] if self._frames else None
        if top is not None and top.kind is FrameKind.FUNCTION and not top.opened:
            top.opened = True
        else:
            self._frames.append(BlockFrame(FrameKind.MAIN, opened=True))
        return []

    def _declaration(self, masked: str, spans: SpanStore) -> list[str]:
        return []

    def _block_close(self, masked: str, spans: SpanStore) -> list[str]:
        if not self._frames:
            logger.debug(f"Block closer '{masked}' without an open block")
            return ["end"]

        target = len(self._frames) - 1
        keyword = closed_block(masked)
        if keyword is not None:
            for index in range(len(self._frames) - 1, -1, -1):
                if self._frames[index].keyword == keyword:
                    target = index
                    break
            else:
                logger.debug(f"No open '{keyword}' block for '{masked}', closing the innermost block")

        lines = []
        while len(self._frames) > target:
            frame = self._frames.pop()
            if len(self._frames) > target:
                logger.warning(f"'{masked}' also closes an unterminated inner block")
            lines.extend(self._close_frame(frame))
        return lines

    def _close_frame(self, frame: BlockFrame) -> list[str]:
        if frame.kind is FrameKind.MAIN:
            return []

        lines = []
        if frame.kind is FrameKind.FUNCTION and frame.function is not None:
            names = frame.function.in_out_param_names
            if names and not RETURN_LINE_PATTERN.match(self._last_code):
                if frame.function.has_return_value:
                    names = ["nil"] + names
                lines.append(f"{self.options.indent}return {', '.join(names)}")
        lines.append("end")
        return lines

    def _function_header(self, masked: str, spans: SpanStore) -> list[str]:
        header = parse_function_header(masked)
        if header is not None:
            name = header[0]
        else:
            match = FUNCTION_NAME_PATTERN.match(masked)
            name = match.group(1) if match else None

        info = self.functions.get(name) if name else None
        if info is None and name:
            info = FunctionInfo(name)
        self._frames.append(BlockFrame(FrameKind.FUNCTION, function=info))

        if info is None:
            logger.warning(f"Unrecognized function header: {spans.restore_strings(masked)}")
            return [spans.restore_strings(masked)]
        return [f"function {info.name}({', '.join(info.param_names)})"]

    # =========================================================================
    # Statements
    # =========================================================================

    def _array_declaration(self, masked: str, spans: SpanStore) -> list[str]:
        match = ARRAY_DECLARATION_PATTERN.match(masked)
        name, element_type, dims_text = match.groups()

        ranges = []
        for dim in smart_split_args(dims_text):
            range_match = RANGE_PATTERN.match(dim)
            if range_match:
                low = self._expr(range_match.group(1), spans)
                high = self._expr(range_match.group(2), spans)
            else:
                logger.warning(f"Array dimension '{dim}' is not a lo..hi range, using 0..{dim} - 1")
                low = "0"
                high = f"({self._expr(dim, spans)}) - 1"
            ranges.append((low, high))

        zero = self.definitions.zero_value(element_type)
        indent = self.options.indent
        lines = [f"{name} = {{}}"]
        if not ranges:
            return lines

        # Every dimension but the last holds sub-tables; the last one is
        # filled only when the element type has a zero value.
        loop_count = len(ranges) if zero is not None else len(ranges) - 1
        path = name
        for index in range(loop_count):
            low, high = ranges[index]
            var = f"__i{index + 1}"
            lines.append(f"{indent * index}for {var} = ({low}) + 1, ({high}) + 1, 1 do")
            value = zero if index == len(ranges) - 1 else "{}"
            lines.append(f"{indent * (index + 1)}{path}[{var}] = {value}")
            path += f"[{var}]"
        for depth in range(loop_count - 1, -1, -1):
            lines.append(f"{indent * depth}end")
        return lines

    def _read(self, masked: str, spans: SpanStore) -> list[str]:
        name = READ_PATTERN.match(masked).group(1)
        helper = "__psc_lire_chaine" if self.variable_types.get(name) in STRING_TYPES else "__psc_lire"
        return [f"{name} = {helper}()"]

    def _for_each(self, masked: str, spans: SpanStore) -> list[str]:
        var, collection = FOR_EACH_PATTERN.match(masked).groups()
        self._frames.append(BlockFrame(FrameKind.CONTROL, keyword="pour"))
        return [f"for {var}, _ in pairs({self._expr(collection, spans)}._data) do"]

    def _for(self, masked: str, spans: SpanStore) -> list[str]:
        step = -1 if DECREASING_PATTERN.search(masked) else 1
        header = DECREASING_PATTERN.sub("", masked)
        self._frames.append(BlockFrame(FrameKind.CONTROL, keyword="pour"))

        match = FOR_LOOP_PATTERN.match(header)
        bounds = split_loop_range(match.group(2)) if match else None
        if bounds is None:
            logger.warning(f"Unrecognized loop header: {spans.restore_strings(masked)}")
            return [self._expr(header, spans, comparison=False)]
        var = match.group(1)
        start, stop = bounds
        start = self._expr(start, spans, after_keyword=True)
        stop = self._expr(stop, spans, after_keyword=True)
        return [f"for {var} = {start}, {stop}, {step} do"]

    def _condition(self, pattern: re.Pattern, masked: str, spans: SpanStore) -> str:
        match = pattern.match(masked)
        condition = match.group(1) if match else masked
        return self._expr(condition, spans, after_keyword=True)

    def _while(self, masked: str, spans: SpanStore) -> list[str]:
        self._frames.append(BlockFrame(FrameKind.CONTROL, keyword="tant que"))
        return [f"while {self._condition(WHILE_HEADER_PATTERN, masked, spans)} do"]

    def _if(self, masked: str, spans: SpanStore) -> list[str]:
        self._frames.append(BlockFrame(FrameKind.CONTROL, keyword="si"))
        return [f"if {self._condition(IF_HEADER_PATTERN, masked, spans)} then"]

    def _else_if(self, masked: str, spans: SpanStore) -> list[str]:
        return [f"elseif {self._condition(ELSE_IF_HEADER_PATTERN, masked, spans)} then"]

    def _else(self, masked: str, spans: SpanStore) -> list[str]:
        return ["else"]

    def _return(self, masked: str, spans: SpanStore) -> list[str]:
        value = RETURN_HEADER_PATTERN.match(masked).group(1).strip()

        # retourner(x) is a parenthesized value; retourner(a, b) is a list
        if value.startswith("(") and find_matching_paren(value, 0) == len(value) - 1:
            inner = value[1:-1]
            if len(smart_split_args(inner)) <= 1:
                value = inner.strip()

        values = [self._expr(value, spans)] if value else []
        function = self._current_function()
        if function is not None and function.in_out_param_names:
            if not values and function.has_return_value:
                values.append("nil")
            values.extend(function.in_out_param_names)
        return [f"return {', '.join(values)}" if values else "return"]

    def _write(self, masked: str, spans: SpanStore) -> list[str]:
        open_index = masked.index("(")
        close_index = find_matching_paren(masked, open_index)
        if close_index == NOT_FOUND:
            logger.warning(f"Unmatched parenthesis in: {spans.restore_strings(masked)}")
            inner, rest = masked[open_index + 1:], ""
        else:
            inner, rest = masked[open_index + 1:close_index], masked[close_index + 1:]
        return [f"__psc_write({self._expr(inner, spans)}){spans.restore_strings(rest)}"]

    def _assignment(self, masked: str, spans: SpanStore) -> list[str]:
        lhs, rhs = (part.strip() for part in masked.split("←", 1))
        _, captured = self._in_out_call(rhs)
        targets = [lhs] + [name for name in captured if name != lhs]
        return [self._assign(", ".join(targets), rhs, spans)]

    def _expression(self, masked: str, spans: SpanStore) -> list[str]:
        info, targets = self._in_out_call(masked)
        if targets:
            # the declared return value comes first and is discarded
            if info.has_return_value:
                targets = ["_"] + targets
            return [self._assign(", ".join(targets), masked, spans)]

        mutated = self._mutator_target(masked)
        if mutated is not None:
            return [self._assign(mutated, masked, spans)]

        return [self._finish(self._value(masked, spans, comparison=False), spans)]

    def _assign(self, lhs: str, rhs: str, spans: SpanStore) -> str:
        return f"{self._finish(lhs, spans)} = {self._expr(rhs, spans)}"

    def _in_out_call(self, text: str) -> tuple[Optional[FunctionInfo], list[str]]:
        """The first InOut call in ``text`` and the variables it writes back."""
        for match in CALL_PATTERN.finditer(text):
            info = self.functions.get(match.group(1))
            if info is None or not info.in_out_param_names:
                continue
            close_index = find_matching_paren(text, match.end() - 1)
            if close_index == NOT_FOUND:
                logger.warning(f"Unmatched parenthesis after call to '{info.name}'")
                return None, []
            args = smart_split_args(text[match.end():close_index])
            targets = self.functions.get_in_out_args_to_reassign(info.name, args)
            if targets:
                return info, targets
        return None, []

    def _mutator_target(self, text: str) -> Optional[str]:
        """First argument of a statement that is a single mutator call."""
        match = CALL_PATTERN.match(text)
        if not match or self._is_user_name(match.group(1)):
            return None
        builtin = self.definitions.function(match.group(1))
        if builtin is None or not builtin.is_mutator:
            return None
        if find_matching_paren(text, match.end() - 1) != len(text) - 1:
            return None
        args = smart_split_args(text[match.end():-1])
        return args[0] if args else None

    def _is_user_name(self, name: str) -> bool:
        return name.lower() in self._user_functions or self.composites.has(name)

    # =========================================================================
    # Expression Passes
    # =========================================================================

    def _expr(
        self,
        text: str,
        spans: SpanStore,
        comparison: bool = True,
        after_keyword: bool = False,
    ) -> str:
        return self._finish(self._value(text, spans, comparison, after_keyword), spans)

    def _value(
        self,
        text: str,
        spans: SpanStore,
        comparison: bool = True,
        after_keyword: bool = False,
    ) -> str:
        """
        Rewrite one expression, brackets and string literals excepted.

        Args:
            text: Masked expression text
            spans: The line's span store
            comparison: Every bare ``=`` is a comparison; otherwise a
                        whitespace-surrounded ``=`` is kept as assignment
            after_keyword: The text follows a control keyword, so a leading
                           parenthesis is a grouping, not a list literal
        """
        text = self.composites.transform(text, spans)
        text = self._list_literals(text, spans, after_keyword)
        text = self._rewrite_calls(text, CONSTRUCTOR_PATTERN, self._build_constructor)
        if self._string_builtin_pattern is not None:
            text = self._rewrite_calls(text, self._string_builtin_pattern, self._build_string_builtin)
        text = self._rewrite_calls(text, CALL_PATTERN, self._build_builtin)
        text = self._replace_keywords(text)
        text = self._equality(text, comparison)
        text = LIRE_CALL_PATTERN.sub("__psc_lire()", text)
        return spans.expand(text, TableSpan, lambda span: self._render_table(span, spans))

    def _finish(self, text: str, spans: SpanStore) -> str:
        return spans.restore_strings(self._rewrite_brackets(text, spans))

    def _render_table(self, table: TableSpan, spans: SpanStore) -> str:
        fields = []
        for name, value in table.fields:
            rendered = self._value(value, spans)
            fields.append(rendered if name is None else f"{name} = {rendered}")
        return "{" + ", ".join(fields) + "}"

    # -------------------------------------------------------------------------
    # List literals
    # -------------------------------------------------------------------------

    def _list_literals(self, text: str, spans: SpanStore, after_keyword: bool = False) -> str:
        """``(a, b)`` → ``__psc_liste_from_table({a, b})`` where it is not a call."""
        out = []
        i = 0
        while i < len(text):
            ch = text[i]
            if ch != "(":
                out.append(ch)
                i += 1
                continue

            close_index = find_matching_paren(text, i)
            if close_index == NOT_FOUND:
                out.append(text[i:])
                break

            inside = self._list_literals(text[i + 1:close_index], spans)
            if self._may_open_list(text[:i], after_keyword) and self._is_list_content(inside, spans):
                items = ", ".join(smart_split_args(inside))
                out.append(f"__psc_liste_from_table({{{items}}})")
            else:
                out.append(f"({inside})")
            i = close_index + 1
        return "".join(out)

    @staticmethod
    def _may_open_list(prefix: str, after_keyword: bool) -> bool:
        stripped = prefix.rstrip()
        if not stripped:
            return not after_keyword
        prev = stripped[-1]
        return prev in LIST_OPENING_CHARS

    @staticmethod
    def _is_list_content(inside: str, spans: SpanStore) -> bool:
        items = smart_split_args(inside)
        if len(items) > 1:
            return True
        if len(items) != 1:
            return False
        atom = items[0]
        return (
            is_simple_identifier(atom)
            or NUMBER_PATTERN.match(atom) is not None
            or spans.is_token(atom)
            or BUILT_LIST_PATTERN.match(atom) is not None
            or (atom.startswith("{") and atom.endswith("}"))
        )

    # -------------------------------------------------------------------------
    # Calls
    # -------------------------------------------------------------------------

    def _rewrite_calls(
        self,
        text: str,
        pattern: re.Pattern,
        build: Callable[[str, str], Optional[str]],
    ) -> str:
        """
        Rewrite every call matched by ``pattern`` (which ends with ``\\(``).

        Arguments are rewritten first (innermost calls first). ``build``
        receives the callee name and the rewritten argument text and returns
        the replacement, or None to keep the call.
        """
        out = []
        pos = 0
        while True:
            match = pattern.search(text, pos)
            if match is None:
                break
            open_index = match.end() - 1
            close_index = find_matching_paren(text, open_index)
            if close_index == NOT_FOUND:
                logger.warning(f"Unmatched parenthesis after '{match.group(1)}'")
                break

            inner = self._rewrite_calls(text[open_index + 1:close_index], pattern, build)
            replacement = build(match.group(1), inner)
            out.append(text[pos:match.start()])
            out.append(replacement if replacement is not None else f"{match.group(0)}{inner})")
            pos = close_index + 1

        out.append(text[pos:])
        return "".join(out)

    def _build_constructor(self, name: str, inner: str) -> Optional[str]:
        if self._is_user_name(name):
            return None
        kind = name.lower()
        empty = not inner.strip()
        if kind == "liste":
            return f"__psc_liste_from_table({{{inner}}})"
        if kind == "listesym":
            return f"__psc_listesym_from_table({{{inner}}})"
        if kind == "table":
            if empty:
                return "__psc_table_vide()"
            return f"__psc_table_from_pairs({TABLE_ARROW_PATTERN.sub(', ', inner)})"
        # pile / file
        if empty:
            return f"__psc_{kind}_vide()"
        return f"__psc_{kind}_from_values({{{inner}}})"

    def _build_string_builtin(self, name: str, inner: str) -> Optional[str]:
        builtin = self.definitions.function(name)
        args = smart_split_args(inner)
        if self._is_user_name(name) or len(args) != builtin.arity:
            return None
        if builtin.lua_helper == "#":
            arg = args[0]
            if is_simple_identifier(arg) or SpanStore.is_token(arg):
                return f"#{arg}"
            return f"#({arg})"
        if builtin.lua_helper == "..":
            return f"{args[0]} .. {args[1]}"
        if builtin.arity == 2:
            # ième(s, i): one character
            return f"{builtin.lua_helper}({args[0]}, {args[1]}, {args[1]})"
        return f"{builtin.lua_helper}({', '.join(args)})"

    def _build_builtin(self, name: str, inner: str) -> Optional[str]:
        builtin = self.definitions.function(name)
        if builtin is None or builtin.is_inline or self._is_user_name(name):
            return None
        return f"{builtin.lua_helper}({inner})"

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def _replace_keywords(self, text: str) -> str:
        for pattern, target in self._replacements:
            text = pattern.sub(lambda _match, target=target: target, text)
        return text

    @staticmethod
    def _equality(text: str, comparison: bool) -> str:
        if comparison:
            return BARE_EQUALS_PATTERN.sub("==", text)

        def replace(match: re.Match) -> str:
            before = text[match.start() - 1] if match.start() > 0 else ""
            after = text[match.end()] if match.end() < len(text) else ""
            if before.isspace() and after.isspace():
                return "="
            return "=="

        return BARE_EQUALS_PATTERN.sub(replace, text)

    # -------------------------------------------------------------------------
    # Brackets
    # -------------------------------------------------------------------------

    def _rewrite_brackets(self, text: str, spans: SpanStore) -> str:
        """
        Index and array-literal brackets.

        ``[`` after an identifier, ``)`` or ``]`` is an index: each
        comma-separated index becomes its own 1-based bracket. Any other
        ``[...]`` is an array literal and becomes ``{...}``.
        """
        out = []
        i = 0
        while i < len(text):
            ch = text[i]
            if ch != "[":
                out.append(ch)
                i += 1
                continue

            close_index = find_matching_bracket(text, i, "[", "]")
            if close_index == NOT_FOUND:
                logger.warning("Unmatched '[' in expression")
                out.append(text[i:])
                break

            inner = self._rewrite_brackets(text[i + 1:close_index], spans)
            if self._is_index_position("".join(out)):
                indices = smart_split_args(inner)
                if not indices:
                    out.append("[]")
                for index in indices:
                    if spans.is_token(index) and spans.starts_with_string(index):
                        out.append(f"[{index}]")
                    else:
                        out.append(f"[({index}) + 1]")
            else:
                out.append("{" + inner + "}")
            i = close_index + 1
        return "".join(out)

    @staticmethod
    def _is_index_position(prefix: str) -> bool:
        stripped = prefix.rstrip()
        if not stripped:
            return False
        prev = stripped[-1]
        if prev in ")]":
            return True
        if prev.isalnum() or prev == "_":
            word = TRAILING_WORD_PATTERN.search(stripped)
            return word is None or word.group(1) not in LUA_WORDS
        return False

"""
Function Registry
=================

Collects user function declarations so the engine can emulate InOut
(call-by-reference) parameters.

Lua has no reference parameters. An InOut parameter is therefore emulated by
having the callee return its InOut parameters as additional return values,
and by rewriting each call site so those extra values are assigned back into
the corresponding argument variables:

    Fonction f(InOut x : entier)      function f(x)
    Début                               x = x + 1
        x ← x + 1               →       return x
    Fin                               end

    f(n)                              n = f(n)

A function that also declares a return type returns its value first, so a
bare call discards it: ``g(n)`` becomes ``_, n = g(n)``.

By-reference emulation only works for plain variable arguments; an indexed
or computed argument is passed by value and silently not written back.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from psc_lua.transpiler.lexical import (
    IDENTIFIER,
    NOT_FOUND,
    cut_at_unbalanced_paren,
    find_matching_paren,
    is_simple_identifier,
    smart_split_args,
)


logger = logging.getLogger(__name__)

FUNCTION_DECLARATION_PATTERN = re.compile(
    rf"^\s*Fonction\s+({IDENTIFIER})\s*\((.*)\)", re.IGNORECASE
)
IN_OUT_PATTERN = re.compile(r"\bInOut\b", re.IGNORECASE)
RETURN_ANNOTATION_PATTERN = re.compile(r"^\s*:\s*(\S.*?)\s*$")


@dataclass(frozen=True)
class ParamInfo:
    """A formal parameter: its bare name and whether it is InOut."""
    name: str
    is_in_out: bool = False


@dataclass(frozen=True)
class FunctionInfo:
    """
    A declared PSC function.

    Attributes:
        name: Function name as declared
        params: Formal parameters in declaration order
        in_out_param_names: Names of the InOut parameters, same relative order
        has_return_value: Whether the header declares a return type; the
                          InOut values then follow the returned value
    """
    name: str
    params: tuple[ParamInfo, ...] = ()
    has_return_value: bool = False

    @property
    def in_out_param_names(self) -> list[str]:
        return [p.name for p in self.params if p.is_in_out]

    @property
    def param_names(self) -> list[str]:
        return [p.name for p in self.params]


def parse_function_header(line: str) -> Optional[tuple[str, str]]:
    """
    Match a ``Fonction name(params) [: type]`` header.

    Returns:
        (name, raw parameter text without the return annotation), or None
    """
    match = FUNCTION_DECLARATION_PATTERN.match(line)
    if not match:
        return None
    return match.group(1), cut_at_unbalanced_paren(match.group(2))


def has_return_annotation(line: str) -> bool:
    """True when a ``Fonction`` header ends with ``: type`` after its parameters."""
    match = FUNCTION_DECLARATION_PATTERN.match(line)
    if not match:
        return False
    close_index = find_matching_paren(line, match.start(2) - 1)
    if close_index == NOT_FOUND:
        return False
    return RETURN_ANNOTATION_PATTERN.match(line[close_index + 1:]) is not None


def extract_function_params(params_text: str) -> list[ParamInfo]:
    """
    Parse ``InOut a : entier, b : chaîne`` into ParamInfo records.

    Each top-level item is split on its first colon; a leading InOut
    modifier is stripped from the name and recorded.
    """
    params = []
    for part in smart_split_args(cut_at_unbalanced_paren(params_text)):
        name_part = part.split(":", 1)[0].strip()
        is_in_out = IN_OUT_PATTERN.search(name_part) is not None
        name = IN_OUT_PATTERN.sub("", name_part).strip()
        if name:
            params.append(ParamInfo(name, is_in_out))
    return params


@dataclass(frozen=True)
class FunctionRegistry:
    """
    Read-only table of the functions declared in one PSC source.

    Build it with ``FunctionRegistry.collect(source)``; a registry is never
    mutated afterwards and is discarded at the end of the transpilation.

    Example:
        registry = FunctionRegistry.collect(source)
        registry.get_in_out_args_to_reassign("f", ["n", "t[0]"])  # ['n']
    """
    functions: dict[str, FunctionInfo] = field(default_factory=dict)

    @classmethod
    def collect(cls, source: str) -> "FunctionRegistry":
        """Scan every line of ``source`` for function declarations."""
        functions = {}
        for line in source.splitlines():
            header = parse_function_header(line)
            if header is None:
                continue
            name, params_text = header
            functions[name] = FunctionInfo(
                name=name,
                params=tuple(extract_function_params(params_text)),
                has_return_value=has_return_annotation(line),
            )

        logger.debug(
            f"Collected {len(functions)} function(s): {', '.join(functions) or '-'}"
        )
        return cls(functions)

    def get(self, name: str) -> Optional[FunctionInfo]:
        return self.functions.get(name)

    def has(self, name: str) -> bool:
        return name in self.functions

    def names(self) -> set[str]:
        return set(self.functions)

    def get_in_out_args_to_reassign(self, name: str, call_args: list[str]) -> list[str]:
        """
        Call-site arguments that must receive the callee's extra return values.

        For each InOut formal parameter, the argument at the same position is
        included when it is a simple identifier. Missing or non-simple
        arguments are skipped.
        """
        info = self.get(name)
        if info is None:
            return []

        to_reassign = []
        for index, param in enumerate(info.params):
            if not param.is_in_out or index >= len(call_args):
                continue
            arg = call_args[index].strip()
            if is_simple_identifier(arg):
                to_reassign.append(arg)
        return to_reassign

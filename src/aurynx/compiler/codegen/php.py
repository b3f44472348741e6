"""PHP syntax fragments.

Pure helpers for assembling PHP source text. Nothing here knows about
template nodes.
"""

import re
from typing import Iterable, List, Sequence, Tuple

from aurynx.compiler.parser import find_closing_paren
from aurynx.compiler.preprocessor import IDENTIFIER, STRING_LITERAL

ESCAPE_FUNCTION = "htmlspecialchars"
CLOSURE_CLASS = "\\Closure"

_VARIABLE = rf"\${IDENTIFIER}(?:->{IDENTIFIER})*"
_SIMPLE_PATTERN = re.compile(
    rf"^(?:{_VARIABLE}|{STRING_LITERAL}|-?\d+(?:\.\d+)?|[A-Za-z_][A-Za-z0-9_]*)$",
    flags=re.DOTALL,
)
_CALLABLE_PATTERN = re.compile(
    rf"^(?:\\?[A-Za-z_][A-Za-z0-9_\\]*(?:::{IDENTIFIER})?|{_VARIABLE})\("
)


def string_literal(text: str) -> str:
    """Single-quoted PHP string; only ``\\`` and ``'`` need escaping."""
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def is_atomic(expression: str) -> bool:
    """True if ``expression`` can be used as an operand without parentheses.

    Covers variables with property chains, literals, constants and a single
    call whose argument list spans the rest of the expression.
    """
    if _SIMPLE_PATTERN.match(expression):
        return True

    match = _CALLABLE_PATTERN.match(expression)
    if match is None:
        return False

    return find_closing_paren(expression, match.end() - 1) == len(expression) - 1


def operand(expression: str) -> str:
    return expression if is_atomic(expression) else f"({expression})"


def as_string(expression: str) -> str:
    return f"(string) {operand(expression)}"


def escape_call(expression: str) -> str:
    return f"{ESCAPE_FUNCTION}({as_string(expression)}, ENT_QUOTES, 'UTF-8')"


def slot_value(variable: str = "$slot") -> str:
    """Invoke a slot closure, or use the slot as-is when it is a plain string."""
    return f"{variable} instanceof {CLOSURE_CLASS} ? {variable}() : {variable}"


def slot_string(variable: str = "$slot") -> str:
    return f"({variable} instanceof {CLOSURE_CLASS} ? {variable}() : (string) {variable})"


def concat(parts: Sequence[str]) -> str:
    if not parts:
        return "''"
    return " . ".join(parts)


def php_tag(code: str) -> str:
    return f"<?php {code} ?>"


def echo_tag(expression: str) -> str:
    return f"<?= {expression} ?>"


def comment(text: str) -> str:
    return "/* " + text.replace("*/", "*\\/") + " */"


def variable(name: str) -> str:
    return f"${name}"


def use_clause(names: Iterable[str]) -> str:
    names = list(names)
    if not names:
        return ""
    return " use (" + ", ".join(variable(name) for name in names) + ")"


def parameters(names: Iterable[str], type_hint: str = "mixed") -> str:
    return ", ".join(f"{type_hint} {variable(name)}" for name in names)


def arrow_function(body: str, params: str = "") -> str:
    return f"static fn({params}): string => {body}"


def function_header(params: str = "", uses: Iterable[str] = ()) -> str:
    return f"static function ({params}){use_clause(uses)}: string {{"


def array_literal(items: Sequence[Tuple[str, str]]) -> str:
    return "[" + ", ".join(f"{string_literal(key)} => {value}" for key, value in items) + "]"


def assignment(name: str, expression: str) -> str:
    return f"{variable(name)} = {expression};"


def data_binding(name: str, container: str = "$__data") -> str:
    return assignment(name, f"{container}[{string_literal(name)}] ?? null")


def statement(code: str) -> str:
    """Terminate embedded code so it can stand on its own line."""
    code = code.rstrip()
    if not code or code[-1] in ";{}:":
        return code
    return code + ";"


def named_call(function: str, arguments: List[Tuple[str, str]]) -> str:
    return f"{function}(" + ", ".join(f"{name}: {value}" for name, value in arguments) + ")"

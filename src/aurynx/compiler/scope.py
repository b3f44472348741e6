"""Free-variable analysis over template node trees."""

import re
from typing import AbstractSet, Iterable, List, Sequence, Set

from aurynx.compiler.ast_nodes import (
    BooleanAttr,
    Component,
    Conditional,
    Echo,
    Existence,
    HostCode,
    Loop,
    Node,
)
from aurynx.compiler.attributes import is_bound
from aurynx.compiler.parser import parse_template
from aurynx.compiler.preprocessor import IDENTIFIER

DATA_PARAMETER = "__data"
SLOT_VARIABLE = "slot"
INTERNAL_PREFIX = "__"

# PHP refuses to capture these in a closure `use` clause.
SUPERGLOBALS = frozenset(
    {
        "GLOBALS",
        "_SERVER",
        "_GET",
        "_POST",
        "_COOKIE",
        "_FILES",
        "_ENV",
        "_REQUEST",
        "_SESSION",
    }
)
UNCAPTURABLE = SUPERGLOBALS | {"this"}

_VARIABLE_PATTERN = re.compile(
    r"'(?:\\.|[^\\'])*'"  # single quoted, never interpolated
    r"|\"((?:\\.|[^\\\"])*)\""  # double quoted, scanned for interpolation
    rf"|(?<!::)\$({IDENTIFIER})",
    flags=re.DOTALL,
)

_INTERPOLATION_PATTERN = re.compile(rf"\\.|\$({IDENTIFIER})", flags=re.DOTALL)


def expression_variables(expression: str) -> Set[str]:
    """Names (without ``$``) of the variables referenced by a PHP expression."""
    names: Set[str] = set()
    for match in _VARIABLE_PATTERN.finditer(expression):
        interpolated, variable = match.groups()
        if variable:
            names.add(variable)
        elif interpolated:
            names.update(
                m.group(1) for m in _INTERPOLATION_PATTERN.finditer(interpolated) if m.group(1)
            )
    return names


def free_variables(nodes: Sequence[Node], bound: Iterable[str] = ()) -> Set[str]:
    """Variables referenced by ``nodes`` that are not bound inside them.

    Loop item/key variables (and per-iteration bindings) are bound only within
    the loop body. Component props and slot bodies are included, since slot
    closures capture from the enclosing scope.
    """
    found: Set[str] = set()
    _collect(nodes, frozenset(bound), found)
    return found


def _collect(nodes: Sequence[Node], bound: AbstractSet[str], found: Set[str]) -> None:
    def add(expression: str) -> None:
        found.update(name for name in expression_variables(expression) if name not in bound)

    for node in nodes:
        if isinstance(node, Echo):
            add(node.expression)
        elif isinstance(node, HostCode):
            add(node.code)
        elif isinstance(node, Conditional):
            for branch in node.branches:
                if branch.condition is not None:
                    add(branch.condition)
                _collect(branch.body, bound, found)
        elif isinstance(node, Loop):
            add(node.collection)
            inner = bound | set(node.bound_names)
            for _, expression in node.bindings:
                found.update(n for n in expression_variables(expression) if n not in inner)
            inner = inner | {name for name, _ in node.bindings}
            _collect(node.body, inner, found)
        elif isinstance(node, Existence):
            add(node.expression)
            _collect(node.body, bound, found)
        elif isinstance(node, BooleanAttr):
            add(node.expression)
        elif isinstance(node, Component):
            for name, value in node.attributes.items():
                if is_bound(name) and isinstance(value, str):
                    add(value)
            _collect(node.slots.default, bound, found)
            for body in node.slots.named.values():
                _collect(body, bound, found)


def used_variables(fragment: str) -> Set[str]:
    """Free variables of a raw template fragment."""
    return free_variables(parse_template(fragment))


def declarable(names: Iterable[str]) -> List[str]:
    """Filter free variables down to the ones a unit binds from its data array."""
    return sorted(
        name
        for name in names
        if name != SLOT_VARIABLE
        and name != DATA_PARAMETER
        and not name.startswith(INTERNAL_PREFIX)
        and name not in UNCAPTURABLE
    )


def declared_variables(template: str) -> List[str]:
    """Sorted variables a whole template expects from its caller."""
    return declarable(used_variables(template))


def capture_variables(nodes: Sequence[Node], bound: Iterable[str] = ()) -> List[str]:
    """Sorted variables a closure over ``nodes`` must list in its ``use`` clause."""
    return sorted(name for name in free_variables(nodes, bound) if name not in UNCAPTURABLE)

"""Directive compilation.

Every expression in a parsed tree goes through the dot-path rewriter here,
including expressions nested in component slot bodies. This module also
defines the PHP control structure each directive maps to; the codegen picks
the alternative-syntax tag form or the brace form around these headers.
"""

import dataclasses
from typing import Optional, Sequence, Tuple

from aurynx.compiler.ast_nodes import (
    BooleanAttr,
    Branch,
    Component,
    Conditional,
    Echo,
    Existence,
    Loop,
    Node,
    SlotSet,
)
from aurynx.compiler.attributes import is_bound
from aurynx.compiler.preprocessor import rewrite_expression


def compile_directives(nodes: Sequence[Node]) -> Tuple[Node, ...]:
    """Return a copy of ``nodes`` with every expression rewritten."""
    return tuple(_compile_node(node) for node in nodes)


def _compile_node(node: Node) -> Node:
    if isinstance(node, Echo):
        return dataclasses.replace(node, expression=rewrite_expression(node.expression))

    if isinstance(node, Conditional):
        return Conditional(
            tuple(
                Branch(
                    None if branch.condition is None else rewrite_expression(branch.condition),
                    compile_directives(branch.body),
                )
                for branch in node.branches
            )
        )

    if isinstance(node, Loop):
        return dataclasses.replace(
            node,
            collection=rewrite_expression(node.collection),
            body=compile_directives(node.body),
        )

    if isinstance(node, Existence):
        return Existence(rewrite_expression(node.expression), compile_directives(node.body))

    if isinstance(node, BooleanAttr):
        return BooleanAttr(node.kind, rewrite_expression(node.expression))

    if isinstance(node, Component):
        attributes = {
            name: rewrite_expression(value) if is_bound(name) and isinstance(value, str) else value
            for name, value in node.attributes.items()
        }
        slots = SlotSet(
            default=compile_directives(node.slots.default),
            named={name: compile_directives(body) for name, body in node.slots.named.items()},
        )
        return Component(node.tag, attributes, slots)

    # Text, Comment and embedded host code pass through untouched
    return node


def branch_header(index: int, condition: Optional[str]) -> str:
    if condition is None:
        return "else"
    keyword = "if" if index == 0 else "elseif"
    return f"{keyword} ({condition})"


def loop_header(loop: Loop) -> str:
    target = f"${loop.item}"
    if loop.key:
        target = f"${loop.key} => {target}"
    return f"foreach ({loop.collection} as {target})"


def existence_test(expression: str) -> str:
    return f"!empty({expression})"


def existence_header(expression: str) -> str:
    return f"if ({existence_test(expression)})"


def boolean_fragment(kind: str) -> str:
    """The literal attribute text a boolean directive emits, e.g. `` checked``."""
    return f" {kind}"

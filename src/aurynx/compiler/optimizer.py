"""Codegen optimizer: accessor deduplication and output strategy selection."""

import dataclasses
import enum
import re
from collections import Counter
from typing import AbstractSet, Callable, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple, cast

from aurynx.compiler.ast_nodes import (
    BooleanAttr,
    Branch,
    Comment,
    Component,
    Conditional,
    Echo,
    Existence,
    HostCode,
    Loop,
    Node,
    Text,
    is_interpolation,
)
from aurynx.compiler.attributes import is_bound
from aurynx.compiler.context import CompilerContext
from aurynx.compiler.preprocessor import ACCESSOR_FUNCTION, IDENTIFIER, STRING_LITERAL

Hoist = Tuple[str, str]

_ACCESSOR_PATTERN = re.compile(
    rf"({STRING_LITERAL})|{ACCESSOR_FUNCTION}\(\$({IDENTIFIER}), '([A-Za-z0-9_.]+)'\)",
    flags=re.DOTALL,
)


class OptimizationDecision(enum.Enum):
    DIRECT_EXPRESSION = "direct_expression"
    LOOP_TO_MAP = "loop_to_map"
    STRING_CONCAT = "string_concat"
    BUFFERED = "buffered"


# --- Visible normalization ---------------------------------------------------


def _strip_newline(text: str) -> str:
    if text.startswith("\r\n"):
        return text[2:]
    if text.startswith("\n"):
        return text[1:]
    return text


def visible_nodes(nodes: Sequence[Node], after_tag: bool = False) -> Tuple[Node, ...]:
    """Apply PHP's newline-after-``?>`` rule to a tree.

    Every non-text node renders as a PHP tag, so one newline directly after it
    is swallowed, as is one at the start of every directive body. Returns the
    tree as the buffered form would actually print it, so expression-based
    strategies can produce identical output.
    """
    visible: List[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            text = _strip_newline(node.text) if after_tag else node.text
            if text:
                visible.append(Text(text))
            after_tag = False
            continue

        if isinstance(node, Conditional):
            node = Conditional(
                tuple(Branch(b.condition, visible_nodes(b.body, True)) for b in node.branches)
            )
        elif isinstance(node, (Loop, Existence)):
            node = dataclasses.replace(node, body=visible_nodes(node.body, True))

        visible.append(node)
        after_tag = True

    return tuple(visible)


def has_text(nodes: Sequence[Node]) -> bool:
    """True if any literal text is printed by ``nodes`` outside slot bodies."""
    for node in nodes:
        if isinstance(node, Text):
            return True
        if isinstance(node, Conditional):
            if any(has_text(branch.body) for branch in node.branches):
                return True
        elif isinstance(node, (Loop, Existence)) and has_text(node.body):
            return True
    return False


def has_host_statements(nodes: Sequence[Node]) -> bool:
    for node in nodes:
        if isinstance(node, HostCode) and not node.echo:
            return True
        if isinstance(node, Conditional):
            if any(has_host_statements(branch.body) for branch in node.branches):
                return True
        elif isinstance(node, (Loop, Existence)) and has_host_statements(node.body):
            return True
    return False


def content_nodes(nodes: Sequence[Node]) -> List[Node]:
    """Nodes that contribute output; comments print nothing."""
    return [node for node in nodes if not isinstance(node, Comment)]


def is_flat(nodes: Sequence[Node]) -> bool:
    """Only text, interpolations and comments."""
    return all(
        isinstance(node, (Text, Comment)) or is_interpolation(node) for node in nodes
    )


# --- Deduplication -----------------------------------------------------------

Visitor = Callable[[str, FrozenSet[str]], str]


def rebound_names(nodes: Sequence[Node]) -> FrozenSet[str]:
    """Variables assigned by any loop in ``nodes``, outside slot bodies.

    A foreach leaves its variables bound after the loop ends.
    """
    names: Set[str] = set()
    for node in nodes:
        if isinstance(node, Loop):
            names.update(node.bound_names)
            names.update(rebound_names(node.body))
        elif isinstance(node, Conditional):
            for branch in node.branches:
                names.update(rebound_names(branch.body))
        elif isinstance(node, Existence):
            names.update(rebound_names(node.body))
    return frozenset(names)


def _walk(nodes: Sequence[Node], visit: Visitor, shadowed: FrozenSet[str]) -> Tuple[Node, ...]:
    """Map ``visit`` over every expression, tracking loop-bound names.

    Names rebound by a loop stay shadowed for the rest of the sequence, so
    an accessor after the loop never shares a binding with one before it.
    Slot bodies are not entered and embedded host code is left verbatim.
    """
    result: List[Node] = []
    for node in nodes:
        if isinstance(node, Echo):
            node = dataclasses.replace(node, expression=visit(node.expression, shadowed))
        elif isinstance(node, Conditional):
            node = Conditional(
                tuple(
                    Branch(
                        None if b.condition is None else visit(b.condition, shadowed),
                        _walk(b.body, visit, shadowed),
                    )
                    for b in node.branches
                )
            )
        elif isinstance(node, Loop):
            # A nested loop rebinds its names for every later iteration too
            inner = shadowed | frozenset(node.bound_names) | rebound_names(node.body)
            node = dataclasses.replace(
                node,
                collection=visit(node.collection, shadowed),
                bindings=tuple((name, visit(expr, inner)) for name, expr in node.bindings),
                body=_walk(node.body, visit, inner),
            )
        elif isinstance(node, Existence):
            node = Existence(visit(node.expression, shadowed), _walk(node.body, visit, shadowed))
        elif isinstance(node, BooleanAttr):
            node = BooleanAttr(node.kind, visit(node.expression, shadowed))
        elif isinstance(node, Component):
            attributes = {
                name: visit(value, shadowed) if is_bound(name) and isinstance(value, str) else value
                for name, value in node.attributes.items()
            }
            node = dataclasses.replace(node, attributes=attributes)
        result.append(node)
        if isinstance(node, (Loop, Conditional, Existence)):
            shadowed = shadowed | rebound_names((node,))
    return tuple(result)


def _accessor_counts(
    nodes: Sequence[Node], wanted: Callable[[str, FrozenSet[str]], bool]
) -> "Counter[Tuple[str, str]]":
    counts: "Counter[Tuple[str, str]]" = Counter()

    def visit(expression: str, shadowed: FrozenSet[str]) -> str:
        for match in _ACCESSOR_PATTERN.finditer(expression):
            if match.group(1) is None and wanted(match.group(2), shadowed):
                counts[(match.group(2), match.group(3))] += 1
        return expression

    _walk(nodes, visit, frozenset())
    return counts


def _replace_accessors(
    nodes: Sequence[Node],
    names: Dict[Tuple[str, str], str],
    wanted: Callable[[str, FrozenSet[str]], bool],
) -> Tuple[Node, ...]:
    def visit(expression: str, shadowed: FrozenSet[str]) -> str:
        def replacer(match: re.Match) -> str:
            if match.group(1) is not None or not wanted(match.group(2), shadowed):
                return match.group(0)
            name = names.get((match.group(2), match.group(3)))
            return match.group(0) if name is None else f"${name}"

        return _ACCESSOR_PATTERN.sub(replacer, expression)

    return _walk(nodes, visit, frozenset())


def _hoist_repeated(
    nodes: Sequence[Node],
    wanted: Callable[[str, FrozenSet[str]], bool],
    context: CompilerContext,
) -> Tuple[Tuple[Node, ...], List[Hoist]]:
    counts = _accessor_counts(nodes, wanted)
    repeated = [key for key, count in counts.items() if count > 1]
    if not repeated:
        return tuple(nodes), []

    names: Dict[Tuple[str, str], str] = {}
    hoists: List[Hoist] = []
    for variable, path in repeated:
        name = context.reserve(f"__{variable}_{path.replace('.', '_')}")
        names[(variable, path)] = name
        hoists.append((name, f"{ACCESSOR_FUNCTION}(${variable}, '{path}')"))

    return _replace_accessors(nodes, names, wanted), hoists


def deduplicate_loops(nodes: Sequence[Node], context: CompilerContext) -> Tuple[Node, ...]:
    """Bind repeated accessors on a loop's own variables once per iteration."""
    result: List[Node] = []
    for node in nodes:
        if isinstance(node, Conditional):
            node = Conditional(
                tuple(
                    Branch(b.condition, deduplicate_loops(b.body, context))
                    for b in node.branches
                )
            )
        elif isinstance(node, Existence):
            node = Existence(node.expression, deduplicate_loops(node.body, context))
        elif isinstance(node, Loop):
            body = deduplicate_loops(node.body, context)
            if not has_host_statements(body):
                own = frozenset(node.bound_names)

                def wanted(variable: str, shadowed: AbstractSet[str], own=own) -> bool:
                    return variable in own and variable not in shadowed

                body, hoists = _hoist_repeated(body, wanted, context)
                node = dataclasses.replace(node, body=body, bindings=node.bindings + tuple(hoists))
            else:
                node = dataclasses.replace(node, body=body)
        result.append(node)
    return tuple(result)


def deduplicate_top_level(
    nodes: Sequence[Node], context: CompilerContext
) -> Tuple[Tuple[Node, ...], List[Hoist]]:
    """Bind repeated accessors on free variables once, ahead of the body.

    Returns the rewritten tree and the ``(name, expression)`` pairs for the
    prologue. Accessors on loop-bound variables are never hoisted.
    """
    if has_host_statements(nodes):
        return tuple(nodes), []

    def wanted(variable: str, shadowed: AbstractSet[str]) -> bool:
        return variable not in shadowed

    return _hoist_repeated(nodes, wanted, context)


def deduplicate(
    nodes: Sequence[Node], context: CompilerContext
) -> Tuple[Tuple[Node, ...], List[Hoist]]:
    return deduplicate_top_level(deduplicate_loops(nodes, context), context)


# --- Strategy ----------------------------------------------------------------


def map_candidate(nodes: Sequence[Node]) -> Optional[Tuple[Optional[Text], Loop, Optional[Text]]]:
    """Split an already visible body shaped ``[Text?] Loop [Text?]`` into its parts."""
    content = content_nodes(nodes)
    loops = [index for index, node in enumerate(content) if isinstance(node, Loop)]
    if len(loops) != 1:
        return None

    index = loops[0]
    before, after = content[:index], content[index + 1 :]
    if len(before) > 1 or len(after) > 1:
        return None
    if not all(isinstance(node, Text) for node in before + after):
        return None

    loop = cast(Loop, content[index])
    body = content_nodes(loop.body)
    if not is_flat(body) or not any(is_interpolation(node) for node in body):
        return None

    pre = before[0] if before else None
    post = after[0] if after else None
    return cast(Optional[Text], pre), loop, cast(Optional[Text], post)


def choose_strategy(
    nodes: Sequence[Node], free: AbstractSet[str], hoists: Sequence[Hoist] = ()
) -> OptimizationDecision:
    """Pick the cheapest output form that prints exactly what buffering would."""
    visible = visible_nodes(nodes)
    content = content_nodes(visible)

    if not free and not hoists and len(content) == 1 and is_interpolation(content[0]):
        return OptimizationDecision.DIRECT_EXPRESSION

    if map_candidate(visible) is not None:
        return OptimizationDecision.LOOP_TO_MAP

    if is_flat(visible):
        return OptimizationDecision.STRING_CONCAT

    return OptimizationDecision.BUFFERED

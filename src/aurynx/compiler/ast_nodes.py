"""Template AST nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

# Attribute values are raw strings; valueless attributes carry ``True``.
AttributeValue = Union[str, bool]
AttributeMap = Dict[str, AttributeValue]


@dataclass(frozen=True)
class Node:
    """Base class for template nodes.

    Nodes are immutable; passes return new trees instead of mutating.
    """


@dataclass(frozen=True)
class Text(Node):
    """Literal template text, emitted as-is."""

    text: str


@dataclass(frozen=True)
class Comment(Node):
    """{{-- text --}}"""

    text: str


@dataclass(frozen=True)
class Echo(Node):
    """{{ expr }} (escaped) or {{{ expr }}} (raw)."""

    expression: str
    escaped: bool = True

    @property
    def is_slot(self) -> bool:
        return self.expression.strip() == "$slot"


@dataclass(frozen=True)
class HostCode(Node):
    """Embedded <?php ... ?> or <?= ... ?> block, passed through verbatim."""

    code: str
    echo: bool = False


@dataclass(frozen=True)
class Branch:
    """One arm of a conditional. ``condition`` is None for @else."""

    condition: Optional[str]
    body: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Conditional(Node):
    """@if / @elseif / @else / @endif"""

    branches: Tuple[Branch, ...]


@dataclass(frozen=True)
class Loop(Node):
    """@each(collection as $key => $item) ... @endeach

    ``item`` and ``key`` are stored without the ``$`` sigil. ``bindings`` are
    per-iteration locals (name, expression) added by deduplication.
    """

    collection: str
    item: str
    key: Optional[str] = None
    body: Tuple[Node, ...] = ()
    bindings: Tuple[Tuple[str, str], ...] = ()

    @property
    def bound_names(self) -> Tuple[str, ...]:
        if self.key:
            return (self.key, self.item)
        return (self.item,)


@dataclass(frozen=True)
class Existence(Node):
    """@has(expr) ... @endhas"""

    expression: str
    body: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class BooleanAttr(Node):
    """@checked(expr), @selected(expr), @disabled(expr)"""

    kind: str
    expression: str


@dataclass(frozen=True)
class SlotSet:
    """Slot content passed to a component.

    ``named`` keeps insertion order; a repeated slot name keeps its last body.
    """

    default: Tuple[Node, ...] = ()
    named: Dict[str, Tuple[Node, ...]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.default) or bool(self.named)


@dataclass(frozen=True)
class Component(Node):
    """<x-tag attrs /> or <x-tag attrs>...</x-tag>"""

    tag: str
    attributes: AttributeMap = field(default_factory=dict)
    slots: SlotSet = field(default_factory=SlotSet)


# Nodes that produce a single output value with no control flow.
INTERPOLATION_TYPES = (Echo, Component)


def is_interpolation(node: Node) -> bool:
    if isinstance(node, HostCode):
        return node.echo
    return isinstance(node, INTERPOLATION_TYPES)


def is_control_flow(node: Node) -> bool:
    if isinstance(node, HostCode):
        return not node.echo
    return isinstance(node, (Conditional, Loop, Existence, BooleanAttr))

"""Component tag resolution and slot compilation."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, List, Sequence, Tuple

from aurynx.compiler.ast_nodes import Component, Node, Text, is_interpolation
from aurynx.compiler.attributes import is_bound, prop_name
from aurynx.compiler.codegen import php
from aurynx.compiler.context import CompilerContext
from aurynx.compiler.optimizer import (
    content_nodes,
    deduplicate,
    has_text,
    visible_nodes,
)
from aurynx.compiler.scope import capture_variables, free_variables

if TYPE_CHECKING:
    from aurynx.compiler.codegen.template import TemplateCodegen

RENDER_FUNCTION = "component"


class SlotForm(enum.Enum):
    LITERAL = "literal"
    EXPRESSION = "expression"
    STATEMENTS = "statements"
    BUFFERED = "buffered"


def normalize_namespace(namespace: str) -> str:
    stripped = namespace.rstrip("\\")
    return stripped + "\\" if stripped else ""


def tag_to_class_name(tag: str, namespace: str = "") -> str:
    """Map a component tag to its fully-qualified class name.

    Example:
        forms.text-input  ->  App\\View\\Components\\Forms\\TextInput
    """
    segments = []
    for segment in tag.split("."):
        words = [word for word in segment.split("-") if word]
        if words:
            segments.append("".join(word[0].upper() + word[1:] for word in words))
    return normalize_namespace(namespace) + "\\".join(segments)


def trim_slot(nodes: Sequence[Node]) -> Tuple[Node, ...]:
    """Strip leading and trailing whitespace from a slot body."""
    body = list(nodes)
    if body and isinstance(body[0], Text):
        body[0] = Text(body[0].text.lstrip())
    if body and isinstance(body[-1], Text):
        body[-1] = Text(body[-1].text.rstrip())
    return tuple(node for node in body if not (isinstance(node, Text) and not node.text))


class ComponentCompiler:
    """Emits ``component(...)`` render calls, compiling slot bodies into values."""

    def __init__(self, codegen: TemplateCodegen) -> None:
        self.codegen = codegen

    def render(self, component: Component, context: CompilerContext) -> str:
        arguments: List[Tuple[str, str]] = [
            ("componentClass", tag_to_class_name(component.tag, context.namespace) + "::class")
        ]
        props = self.props(component)
        if props:
            arguments.append(("props", php.array_literal(props)))

        slot_arguments: List[Tuple[str, str]] = []
        if component.slots.named:
            entries = context.nested().nested()
            lines = ["["]
            for name, body in component.slots.named.items():
                _, value = self.compile_slot(body, entries)
                lines.append(f"{entries.pad()}{php.string_literal(name)} => {value},")
            lines.append(context.pad(1) + "]")
            slot_arguments.append(("slots", "\n".join(lines)))

        default = trim_slot(component.slots.default)
        if default:
            _, value = self.compile_slot(default, context.nested())
            slot_arguments.append(("slot", value))

        if not slot_arguments:
            return php.named_call(RENDER_FUNCTION, arguments)

        lines = [f"{RENDER_FUNCTION}("]
        for name, value in arguments + slot_arguments:
            lines.append(f"{context.pad(1)}{name}: {value},")
        lines.append(context.pad() + ")")
        return "\n".join(lines)

    def props(self, component: Component) -> List[Tuple[str, str]]:
        props = []
        for name, value in component.attributes.items():
            if value is True:
                expression = "true"
            elif is_bound(name):
                expression = value.strip() or "null"
            else:
                expression = php.string_literal(value)
            props.append((prop_name(name), expression))
        return props

    def classify(self, body: Sequence[Node]) -> SlotForm:
        """Pick the cheapest form for an already trimmed slot body."""
        if all(isinstance(node, Text) for node in body):
            return SlotForm.LITERAL

        visible = visible_nodes(body)
        content = content_nodes(visible)
        if len(content) == 1 and is_interpolation(content[0]) and not free_variables(body):
            return SlotForm.EXPRESSION

        if not has_text(visible):
            return SlotForm.STATEMENTS

        return SlotForm.BUFFERED

    def compile_slot(
        self, nodes: Sequence[Node], context: CompilerContext
    ) -> Tuple[SlotForm, str]:
        """Compile a slot body into a PHP value starting at ``context`` depth.

        Closures capture the body's free variables by value; loop variables
        bound inside the body are never captured.
        """
        body = trim_slot(nodes)
        form = self.classify(body)

        if form is SlotForm.LITERAL:
            text = "".join(node.text for node in body if isinstance(node, Text))
            return form, php.string_literal(text)

        if form is SlotForm.EXPRESSION:
            return form, php.arrow_function(self.codegen.expression(visible_nodes(body), context))

        uses = capture_variables(body)
        body, hoists = deduplicate(body, context)
        inner = context.nested()

        lines = [php.function_header(uses=uses)]
        lines.extend(inner.pad() + php.assignment(name, expr) for name, expr in hoists)

        if form is SlotForm.STATEMENTS:
            lines.append(f"{inner.pad()}$__out = '';")
            lines.extend(self.codegen.statements(visible_nodes(body), inner))
            lines.append(f"{inner.pad()}return $__out;")
        else:
            rendered = self.codegen.tags(body, inner)
            if rendered.startswith(("\n", "\r\n")):
                # PHP eats the first newline after ?>
                rendered = "\n" + rendered
            lines.append(f"{inner.pad()}ob_start(); ?>{rendered}<?php")
            lines.append(f"{inner.pad()}return ob_get_clean();")

        lines.append(context.pad() + "}")
        return form, "\n".join(lines)

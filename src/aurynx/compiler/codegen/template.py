"""Template body code generation."""

from typing import List, Optional, Sequence, Tuple

from aurynx.compiler.ast_nodes import (
    BooleanAttr,
    Comment,
    Component,
    Conditional,
    Echo,
    Existence,
    HostCode,
    Loop,
    Node,
    Text,
)
from aurynx.compiler.codegen import php
from aurynx.compiler.components import ComponentCompiler
from aurynx.compiler.context import CompilerContext
from aurynx.compiler.directives import (
    boolean_fragment,
    branch_header,
    existence_header,
    loop_header,
)
from aurynx.compiler.optimizer import content_nodes
from aurynx.compiler.scope import capture_variables

OUTPUT_VARIABLE = "$__out"
ITEMS_VARIABLE = "$__items"


class TemplateCodegen:
    """Renders template nodes as PHP.

    Three emission modes are supported:

    * ``tags``: alternative-syntax PHP tags interleaved with literal text.
      The text is written verbatim; PHP itself swallows the newline after
      each ``?>``.
    * ``statements``: brace-syntax statements appending to ``$__out``.
    * ``expression``: a single concatenation expression.

    The statement and expression modes expect nodes that already went
    through ``visible_nodes`` so they print exactly what ``tags`` prints.
    """

    def __init__(self) -> None:
        self.components = ComponentCompiler(self)

    # --- Interpolations -----------------------------------------------------

    def interpolation(self, node: Node, context: CompilerContext) -> Tuple[str, bool]:
        """Return ``(expression, is_string)`` for an interpolation node.

        Expressions that are not known to be strings come back as operands,
        parenthesized when needed.
        """
        if isinstance(node, Text):
            return php.string_literal(node.text), True

        if isinstance(node, Echo):
            if node.is_slot:
                return php.slot_string(), True
            if node.escaped:
                return php.escape_call(node.expression), True
            return php.operand(node.expression), False

        if isinstance(node, Component):
            return self.components.render(node, context), True

        if isinstance(node, HostCode) and node.echo:
            return php.operand(node.code.rstrip().rstrip(";").rstrip()), False

        raise TypeError(f"Not an interpolation: {type(node).__name__}")

    def expression(self, nodes: Sequence[Node], context: CompilerContext) -> str:
        """One string-typed expression printing ``nodes``."""
        parts = [self.interpolation(node, context) for node in content_nodes(nodes)]
        if len(parts) == 1:
            expression, is_string = parts[0]
            # Non-string parts are already operands
            return expression if is_string else f"(string) {expression}"
        return php.concat([expression for expression, _ in parts])

    # --- Tags ---------------------------------------------------------------

    def tags(self, nodes: Sequence[Node], context: CompilerContext) -> str:
        return "".join(self._tag(node, context) for node in nodes)

    def _tag(self, node: Node, context: CompilerContext) -> str:
        if isinstance(node, Text):
            return node.text

        if isinstance(node, Comment):
            return php.php_tag(php.comment(node.text))

        if isinstance(node, Echo):
            if node.is_slot:
                return php.echo_tag(php.slot_value())
            if node.escaped:
                return php.echo_tag(php.escape_call(node.expression))
            return php.echo_tag(node.expression)

        if isinstance(node, HostCode):
            if node.echo:
                return php.echo_tag(node.code)
            return php.php_tag(node.code)

        if isinstance(node, Component):
            return php.echo_tag(self.components.render(node, context.at(0)))

        if isinstance(node, Conditional):
            out = []
            for index, branch in enumerate(node.branches):
                out.append(php.php_tag(branch_header(index, branch.condition) + ":"))
                out.append(self.tags(branch.body, context))
            out.append(php.php_tag("endif;"))
            return "".join(out)

        if isinstance(node, Loop):
            header = loop_header(node) + ":"
            for name, expression in node.bindings:
                header += " " + php.assignment(name, expression)
            return (
                php.php_tag(header)
                + self.tags(node.body, context)
                + php.php_tag("endforeach;")
            )

        if isinstance(node, Existence):
            return (
                php.php_tag(existence_header(node.expression) + ":")
                + self.tags(node.body, context)
                + php.php_tag("endif;")
            )

        if isinstance(node, BooleanAttr):
            fragment = php.string_literal(boolean_fragment(node.kind))
            return php.php_tag(f"if ({node.expression}) {{ echo {fragment}; }}")

        raise TypeError(f"Unknown node: {type(node).__name__}")

    # --- Statements ---------------------------------------------------------

    def statements(self, nodes: Sequence[Node], context: CompilerContext) -> List[str]:
        lines: List[str] = []
        for node in nodes:
            lines.extend(self._statement(node, context))
        return lines

    def _append(self, expression: str, context: CompilerContext) -> List[str]:
        return [f"{context.pad()}{OUTPUT_VARIABLE} .= {expression};"]

    def _statement(self, node: Node, context: CompilerContext) -> List[str]:
        pad = context.pad()
        inner = context.nested()

        if isinstance(node, Comment):
            return [pad + php.comment(node.text)]

        if isinstance(node, HostCode) and not node.echo:
            code = php.statement(node.code)
            return [pad + code] if code else []

        if isinstance(node, (Text, Echo, Component, HostCode)):
            expression, _ = self.interpolation(node, context)
            return self._append(expression, context)

        if isinstance(node, Conditional):
            lines = []
            for index, branch in enumerate(node.branches):
                prefix = "" if index == 0 else "} "
                lines.append(f"{pad}{prefix}{branch_header(index, branch.condition)} {{")
                lines.extend(self.statements(branch.body, inner))
            lines.append(pad + "}")
            return lines

        if isinstance(node, Loop):
            lines = [f"{pad}{loop_header(node)} {{"]
            lines.extend(inner.pad() + php.assignment(n, e) for n, e in node.bindings)
            lines.extend(self.statements(node.body, inner))
            lines.append(pad + "}")
            return lines

        if isinstance(node, Existence):
            lines = [f"{pad}{existence_header(node.expression)} {{"]
            lines.extend(self.statements(node.body, inner))
            lines.append(pad + "}")
            return lines

        if isinstance(node, BooleanAttr):
            fragment = php.string_literal(boolean_fragment(node.kind))
            return [
                f"{pad}if ({node.expression}) {{",
                *self._append(fragment, inner),
                pad + "}",
            ]

        raise TypeError(f"Unknown node: {type(node).__name__}")

    # --- Loop mapping -------------------------------------------------------

    def loop_map(
        self,
        pre: Optional[Text],
        loop: Loop,
        post: Optional[Text],
        context: CompilerContext,
    ) -> Tuple[str, str]:
        """Render a flat loop as ``array_map`` over the collection.

        Returns ``(setup_statement, expression)``. The collection is evaluated
        once; a falsy collection yields an empty list.
        """
        collection = f"{php.operand(loop.collection)} ?: []"
        if loop.key:
            setup = f"{ITEMS_VARIABLE} = iterator_to_array({collection});"
            params = php.parameters([loop.key, loop.item])
            arrays = f"array_keys({ITEMS_VARIABLE}), {ITEMS_VARIABLE}"
        else:
            setup = f"{ITEMS_VARIABLE} = iterator_to_array({collection}, false);"
            params = php.parameters([loop.item])
            arrays = ITEMS_VARIABLE

        inner = context.nested()
        item = self.expression(loop.body, inner)
        if loop.bindings:
            uses = capture_variables(
                loop.body, bound=set(loop.bound_names) | {name for name, _ in loop.bindings}
            )
            lines = [php.function_header(params, uses)]
            lines.extend(inner.pad() + php.assignment(n, e) for n, e in loop.bindings)
            lines.append(f"{inner.pad()}return {item};")
            lines.append(context.pad() + "}")
            mapper = "\n".join(lines)
        else:
            mapper = php.arrow_function(item, params)

        parts = []
        if pre is not None:
            parts.append(php.string_literal(pre.text))
        parts.append(f"implode('', array_map({mapper}, {arrays}))")
        if post is not None:
            parts.append(php.string_literal(post.text))

        return setup, php.concat(parts)

"""Main code generator for Aurynx templates."""

from __future__ import annotations

import logging
from typing import List, Sequence

from aurynx.compiler.ast_nodes import Node
from aurynx.compiler.codegen import php
from aurynx.compiler.codegen.template import TemplateCodegen
from aurynx.compiler.context import CompilerContext
from aurynx.compiler.optimizer import (
    OptimizationDecision,
    choose_strategy,
    deduplicate,
    map_candidate,
    visible_nodes,
)
from aurynx.compiler.scope import DATA_PARAMETER, SLOT_VARIABLE, declarable, free_variables

logger = logging.getLogger(__name__)

UNIT_HEADER = "<?php\n\ndeclare(strict_types=1);\n\n"


class CodeGenerator:
    """Wraps a compiled body in the returned render closure."""

    def __init__(self, context: CompilerContext) -> None:
        self.context = context
        self.template_codegen = TemplateCodegen()

    def generate(self, nodes: Sequence[Node]) -> str:
        """Emit the complete PHP file for a directive-compiled tree."""
        free = free_variables(nodes)
        names = declarable(free)
        if SLOT_VARIABLE in free:
            names = sorted(names + [SLOT_VARIABLE])

        nodes, hoists = deduplicate(nodes, self.context)
        decision = choose_strategy(nodes, free, hoists)
        logger.debug(f"Compiling template with {decision.value} strategy")

        takes_data = bool(names or hoists or DATA_PARAMETER in free)
        params = f"array ${DATA_PARAMETER}" if takes_data else ""

        prologue = [php.data_binding(name) for name in names]
        prologue.extend(php.assignment(name, expression) for name, expression in hoists)

        if decision is OptimizationDecision.DIRECT_EXPRESSION or (
            decision is OptimizationDecision.STRING_CONCAT and not prologue
        ):
            body = self.template_codegen.expression(visible_nodes(nodes), self.context.at(0))
            return f"{UNIT_HEADER}return {php.arrow_function(body, params)};\n"

        return UNIT_HEADER + self._function(nodes, decision, params, prologue)

    def _function(
        self,
        nodes: Sequence[Node],
        decision: OptimizationDecision,
        params: str,
        prologue: List[str],
    ) -> str:
        body = self.context.at(1)
        pad = body.pad()
        lines = [f"return {php.function_header(params)}"]
        lines.extend(pad + line for line in prologue)
        if prologue:
            lines.append("")

        if decision is OptimizationDecision.LOOP_TO_MAP:
            candidate = map_candidate(visible_nodes(nodes))
            if candidate is None:
                raise TypeError("Body is not a single flat loop")
            setup, expression = self.template_codegen.loop_map(*candidate, body)
            lines.append(pad + setup)
            lines.append("")
            lines.append(f"{pad}return {expression};")
        elif decision is OptimizationDecision.STRING_CONCAT:
            expression = self.template_codegen.expression(visible_nodes(nodes), body)
            lines.append(f"{pad}return {expression};")
        else:
            lines.append(f"{pad}ob_start();")
            # The newline after ?> is swallowed, so the body starts verbatim
            lines.append("?>")
            lines.append(self.template_codegen.tags(nodes, body) + "<?php")
            lines.append(f"{pad}return ob_get_clean();")

        lines.append("};")
        return "\n".join(lines) + "\n"

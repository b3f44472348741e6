"""Template compilation entry point."""

from __future__ import annotations

from typing import Optional

from aurynx.compiler.codegen.generator import CodeGenerator
from aurynx.compiler.context import DEFAULT_NAMESPACE, CompileOptions, CompilerContext
from aurynx.compiler.directives import compile_directives
from aurynx.compiler.parser import AurynxParser


def compile(
    template: str,
    namespace: str = DEFAULT_NAMESPACE,
    options: Optional[CompileOptions] = None,
) -> str:
    """Compile an Aurynx template into a PHP file returning a render closure.

    The result is deterministic for a given input and never raises for
    malformed templates; anything that cannot be recognised is kept as
    literal output text.
    """
    if options is None:
        options = CompileOptions()

    context = CompilerContext(namespace=namespace, indent=options.indent)
    nodes = compile_directives(AurynxParser().parse(template))
    return CodeGenerator(context).generate(nodes)

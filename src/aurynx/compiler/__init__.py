from aurynx.compiler.context import CompileOptions
from aurynx.compiler.core import compile

__all__ = ["CompileOptions", "compile"]

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("aurynx")
except PackageNotFoundError:
    __version__ = "unknown"

from aurynx.compiler.context import CompileOptions
from aurynx.compiler.core import compile

__all__ = [
    "CompileOptions",
    "compile",
    "__version__",
]

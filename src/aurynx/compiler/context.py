"""Per-compilation settings and state."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Set

DEFAULT_NAMESPACE = "App\\View\\Components\\"
DEFAULT_INDENT = "  "


@dataclass(frozen=True)
class CompileOptions:
    indent: str = DEFAULT_INDENT


@dataclass(frozen=True)
class CompilerContext:
    """Settings threaded through one ``compile()`` call.

    ``depth`` only affects indentation of the emitted source. ``taken`` is
    shared by every nested copy so names hoisted anywhere in the unit stay
    unique.
    """

    namespace: str = DEFAULT_NAMESPACE
    indent: str = DEFAULT_INDENT
    depth: int = 0
    taken: Set[str] = field(default_factory=set, compare=False, repr=False)

    def nested(self) -> CompilerContext:
        return dataclasses.replace(self, depth=self.depth + 1)

    def at(self, depth: int) -> CompilerContext:
        return dataclasses.replace(self, depth=depth)

    def pad(self, extra: int = 0) -> str:
        return self.indent * (self.depth + extra)

    def reserve(self, base: str) -> str:
        """Claim a unique local variable name derived from ``base``."""
        name = base
        counter = 2
        while name in self.taken:
            name = f"{base}_{counter}"
            counter += 1
        self.taken.add(name)
        return name

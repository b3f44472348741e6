"""Project configuration."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from aurynx.compiler.context import DEFAULT_INDENT, DEFAULT_NAMESPACE, CompileOptions


@dataclass(frozen=True)
class AurynxConfig:
    """Where templates live, where compiled PHP goes, and how tags resolve.

    Relative paths are resolved against ``root`` (the working directory by
    default) once, so later path comparisons stay stable.
    """

    component_namespace: str = DEFAULT_NAMESPACE
    views_path: Path = Path("resources/views")
    cache_path: Path = Path("cache/views")
    view_extension: str = ".anx.php"
    build_on_start: bool = True
    indent: str = DEFAULT_INDENT

    def resolve(self, root: Path | None = None) -> AurynxConfig:
        base = (root or Path.cwd()).resolve()
        return dataclasses.replace(
            self,
            views_path=(base / self.views_path).resolve(),
            cache_path=(base / self.cache_path).resolve(),
        )

    def with_overrides(self, **overrides: Any) -> AurynxConfig:
        """Copy with every override that is not None applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        for key in ("views_path", "cache_path"):
            if key in values:
                values[key] = Path(values[key])
        return dataclasses.replace(self, **values)

    @property
    def compile_options(self) -> CompileOptions:
        return CompileOptions(indent=self.indent)

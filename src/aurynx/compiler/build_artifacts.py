"""Build system for compiled Aurynx views."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from aurynx.compiler.core import compile
from aurynx.compiler.paths import compiled_path, ensure_cache_dir, is_view
from aurynx.config import AurynxConfig
from aurynx.exceptions import UnsafeCleanError, ViewsPathNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    compiled: int
    failed: int
    out_dir: Path
    errors: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


class ViewBuilder:
    """Compiles every view under ``views_path`` into ``cache_path``.

    A file that cannot be read, compiled or written is logged and counted as
    a failure; the remaining files are still processed.
    """

    def __init__(self, config: AurynxConfig) -> None:
        self.config = config
        self.views_dir = config.views_path.resolve()
        self.out_dir = config.cache_path.resolve()

    def discover(self) -> List[Path]:
        if not self.views_dir.is_dir():
            raise ViewsPathNotFoundError(self.views_dir)

        return sorted(
            path
            for path in self.views_dir.rglob(f"*{self.config.view_extension}")
            if path.is_file() and is_view(path, self.config.view_extension)
        )

    def owns(self, path: Path) -> bool:
        """True if ``path`` is a view inside the views directory."""
        path = path.resolve()
        return self.views_dir in path.parents and is_view(path, self.config.view_extension)

    def output_path(self, view: Path) -> Path:
        return compiled_path(
            view.resolve(), self.views_dir, self.out_dir, self.config.view_extension
        )

    def compile_view(self, view: Path) -> Optional[Path]:
        """Compile one view and write it to the cache. Returns None on failure."""
        view = view.resolve()
        relative = view.relative_to(self.views_dir)
        try:
            template = view.read_text(encoding="utf-8")
            compiled = compile(
                template,
                self.config.component_namespace,
                self.config.compile_options,
            )

            output = self.output_path(view)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(compiled, encoding="utf-8")
        except (OSError, UnicodeDecodeError, RecursionError) as e:
            logger.error(f"[bold red]Error[/] compiling view {relative}: {e}")
            return None

        logger.info(f"Compiled [cyan]{relative}[/]")
        return output

    def remove_view(self, view: Path) -> bool:
        """Delete the compiled output of a view that no longer exists."""
        output = self.output_path(view)
        try:
            output.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Removed [cyan]{output.relative_to(self.out_dir)}[/]")
        return True

    def build(self, clean: bool = False) -> BuildSummary:
        views = self.discover()

        if clean and self.out_dir.exists():
            if self.out_dir == self.views_dir or self.out_dir in self.views_dir.parents:
                raise UnsafeCleanError(self.out_dir, self.views_dir)
            shutil.rmtree(self.out_dir)
        ensure_cache_dir(self.out_dir)

        if not views:
            logger.info("No templates found, nothing to compile.")

        summary = BuildSummary(compiled=0, failed=0, out_dir=self.out_dir)
        for view in views:
            if self.compile_view(view) is None:
                summary.failed += 1
                summary.errors.append(view)
            else:
                summary.compiled += 1

        return summary


def build_views(config: AurynxConfig, clean: bool = False) -> BuildSummary:
    return ViewBuilder(config).build(clean=clean)

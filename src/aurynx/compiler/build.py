"""Build system for production."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from aurynx.config import AurynxConfig

if TYPE_CHECKING:
    from aurynx.compiler.build_artifacts import BuildSummary


def build_project(
    config: Optional[AurynxConfig] = None,
    root: Optional[Path] = None,
    clean: bool = False,
) -> BuildSummary:
    """Compile all views of the project rooted at ``root``."""
    if config is None:
        config = AurynxConfig()

    from aurynx.compiler.build_artifacts import build_views

    return build_views(config.resolve(root), clean=clean)

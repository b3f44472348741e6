"""Helpers for Aurynx filesystem paths."""

from __future__ import annotations

from pathlib import Path


def ensure_cache_dir(cache_dir: Path) -> Path:
    """Ensure the cache directory exists and has a local .gitignore."""
    cache_dir.mkdir(parents=True, exist_ok=True)

    gitignore_path = cache_dir / ".gitignore"
    if not gitignore_path.exists():
        gitignore_path.write_text("*")

    return cache_dir


def is_view(path: Path, extension: str) -> bool:
    return path.name.endswith(extension) and len(path.name) > len(extension)


def compiled_path(view: Path, views_dir: Path, cache_dir: Path, extension: str) -> Path:
    """Mirror ``view`` into the cache, swapping the template extension for ``.php``."""
    relative = view.relative_to(views_dir)
    name = relative.name[: -len(extension)] + ".php"
    return cache_dir / relative.parent / name

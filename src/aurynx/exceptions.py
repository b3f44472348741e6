"""Errors raised by the Aurynx build wrapper.

The template compiler itself never raises for malformed templates.
"""

from pathlib import Path


class AurynxError(Exception):
    """Base class for Aurynx errors."""


class ViewsPathNotFoundError(AurynxError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Views directory '{path}' does not exist")


class UnsafeCleanError(AurynxError):
    def __init__(self, cache_path: Path, views_path: Path) -> None:
        self.cache_path = cache_path
        self.views_path = views_path
        super().__init__(
            f"Refusing to clean '{cache_path}': it contains the views directory '{views_path}'"
        )

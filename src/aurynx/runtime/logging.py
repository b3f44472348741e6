"""Console logging setup for the CLI."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def configure_logging(verbose: bool = False, target: Optional[Console] = None) -> None:
    """Route all log records through a RichHandler.

    ``verbose`` lowers the level to DEBUG, which also shows the output strategy
    the compiler picked for each template.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=target or console, show_path=False, markup=True)],
        force=True,
    )

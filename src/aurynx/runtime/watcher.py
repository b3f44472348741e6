"""Recompile views when they change on disk."""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

from watchfiles import Change, awatch

from aurynx.compiler.build_artifacts import ViewBuilder
from aurynx.runtime.logging import console

logger = logging.getLogger(__name__)


class ViewWatcher:
    """Watches the views directory and keeps the cache in sync."""

    def __init__(self, builder: ViewBuilder) -> None:
        self.builder = builder

    def watch_filter(self, change: Change, path: str) -> bool:
        return self.builder.owns(Path(path))

    def apply(self, changes: set) -> int:
        """Handle one batch of filesystem changes. Returns files processed."""
        processed = 0
        for change_type, file_path in sorted(changes, key=lambda c: c[1]):
            path = Path(file_path)
            if not self.builder.owns(path):
                continue

            if change_type == Change.deleted:
                self.builder.remove_view(path)
            else:
                self.builder.compile_view(path)
            processed += 1
        return processed

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        if stop_event is None:
            stop_event = asyncio.Event()

        async def _handle_signal() -> None:
            console.print("\n[bold]Aurynx: Shutting down...[/]")
            stop_event.set()

        # Register signal handlers
        try:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, lambda: asyncio.create_task(_handle_signal()))
        except NotImplementedError:
            pass

        console.print(
            f"[bold cyan]Aurynx[/]: Watching [bold]{self.builder.views_dir}[/] for changes..."
        )

        async for changes in awatch(
            self.builder.views_dir,
            watch_filter=self.watch_filter,
            stop_event=stop_event,
        ):
            self.apply(changes)


async def watch_views(builder: ViewBuilder, stop_event: Optional[asyncio.Event] = None) -> None:
    await ViewWatcher(builder).run(stop_event)

"""Top-level event loop of the dashboard."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from rich.console import RenderableType

from gh_dashboard.panels.run_list import RunListPanel
from gh_dashboard.render import build_frame

log = logging.getLogger(__name__)

FRAMES_PER_SECOND = 60.0
QUIT_KEY = "q"


class AppState(StrEnum):
    """Lifecycle of the dashboard."""

    RUNNING = "running"
    QUITTING = "quitting"


@dataclass(kw_only=True)
class Dashboard:
    """Merges the render tick with key presses.

    Every frame the run list is rendered and handed to ``draw``. Key presses
    other than ``q`` are forwarded to the run list's background task, so a
    slow fetch never holds up drawing. If that task dies the loop ends and
    its error is raised from ``run``.
    """

    runs: RunListPanel
    events: asyncio.Queue[str]
    draw: Callable[[RenderableType], object]
    height: Callable[[], int]
    frame_rate: float = FRAMES_PER_SECOND
    state: AppState = AppState.RUNNING

    async def run(self) -> None:
        """Run until the quit key is pressed."""
        forward = self.runs.start()
        loop = asyncio.get_running_loop()
        period = 1 / self.frame_rate
        next_frame = loop.time()

        try:
            while self.state is AppState.RUNNING:
                if not self.runs.is_running():
                    log.error("Run list task stopped unexpectedly")
                    break
                try:
                    async with asyncio.timeout_at(next_frame):
                        key = await self.events.get()
                except TimeoutError:
                    self.draw(self.render())
                    # Skip frames we fell behind on instead of bursting.
                    next_frame = max(next_frame + period, loop.time())
                    continue
                self.handle_key(key, forward)
        finally:
            await self.runs.stop()
        log.info("Dashboard stopped")

    def handle_key(self, key: str, forward: asyncio.Queue[str]) -> None:
        """Quit on ``q``, forward anything else to the run list."""
        if key == QUIT_KEY:
            log.info("Quit requested")
            self.state = AppState.QUITTING
            return
        forward.put_nowait(key)

    def render(self) -> RenderableType:
        """Render the current frame."""
        height = self.height()
        return build_frame(self.runs.render(height - 1), height)

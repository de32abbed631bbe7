"""Panel listing the latest workflow runs of the configured repositories."""

import asyncio
import logging
import webbrowser
from collections.abc import Callable, Sequence
from dataclasses import replace

from gh_dashboard.errors import ServiceError
from gh_dashboard.models.workflow import Repository, WorkflowRun, format_local_time
from gh_dashboard.panels.base import DEFAULT_POLL_INTERVAL, Panel
from gh_dashboard.panels.job_details import JobDetailsPanel
from gh_dashboard.panels.table import OVERLAY_RATIO, Column, TableSnapshot
from gh_dashboard.providers.base import WorkflowService
from gh_dashboard.terminal import Key

log = logging.getLogger(__name__)


class RunListPanel(Panel[WorkflowRun]):
    """Run list panel.

    A background task started by ``start`` refreshes the runs every
    ``interval`` seconds and dispatches the keys forwarded through the queue
    it returns. Only one fetch is in flight at a time; refreshes requested
    while one is running are dropped.
    """

    title = "Workflow Runs"
    footer = "j/k to scroll, d for jobs, enter to open, r to refresh, q to quit"
    columns = (
        Column(header="Project", max_width=50),
        Column(header="Branch", max_width=32),
        Column(header="Workflow Name", max_width=32),
        Column(header="Commit Title", max_width=128),
        Column(header="Start Time", max_width=32),
        Column(header="Status", max_width=16),
        Column(header="Completion", max_width=16),
    )

    def __init__(
        self,
        service: WorkflowService,
        repos: Sequence[Repository],
        *,
        details: JobDetailsPanel | None = None,
        interval: float = DEFAULT_POLL_INTERVAL,
        open_url: Callable[[str], object] = webbrowser.open,
    ) -> None:
        super().__init__(service, interval=interval)
        self.repos = tuple(repos)
        if details is None:
            details = JobDetailsPanel(service, interval=interval)
        self.details = details
        self._open_url = open_url
        self._task: asyncio.Task[None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None

    def format_row(self, row: WorkflowRun) -> Sequence[str]:
        """Format a run as table cells."""
        return (
            f"{row.owner}/{row.repo}",
            row.branch,
            row.name,
            row.commit_title,
            format_local_time(row.start_time),
            row.status.label,
            row.conclusion.label,
        )

    def start(self) -> asyncio.Queue[str]:
        """Start the background task and return the queue it reads keys from.

        Call once per panel; every call starts another task.
        """
        keys: asyncio.Queue[str] = asyncio.Queue()
        self._task = asyncio.create_task(self._sync(keys), name="run-list-sync")
        return keys

    def is_running(self) -> bool:
        """Whether the background task started by ``start`` is still alive."""
        return self._task is not None and not self._task.done()

    async def stop(self) -> None:
        """Cancel the background tasks of this panel and its detail panel.

        Raises:
            Exception: The error that ended a background task, if any

        """
        tasks = [task for task in (self._task, self._refresh_task) if task is not None]
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        await self.details.close()
        for result in results:
            if isinstance(result, Exception):
                raise result

    def handle_input(self, key: str) -> None:
        """Dispatch a key press."""
        if key == Key.ENTER:
            self.open_selected()
        elif key == "d":
            self.show_details()
        elif key in ("j", Key.DOWN):
            self.scroll_down()
        elif key in ("k", Key.UP):
            self.scroll_up()
        elif key == "r":
            self.request_refresh()
        elif key == Key.ESCAPE:
            self.details.hide()
        else:
            log.debug("Ignoring key %r", key)

    def request_refresh(self) -> None:
        """Start a fetch in the background unless one is already running."""
        if self._refresh_task is not None and not self._refresh_task.done():
            log.debug("Refresh already in flight, skipping")
            return
        self._refresh_task = asyncio.create_task(
            self.refresh(), name="run-list-refresh"
        )

    async def refresh(self) -> None:
        """Fetch the runs now and store the result."""
        self._begin_fetch()

        try:
            runs = await self.service.list_runs(self.repos)
        except ServiceError as e:
            log.error("Failed to refresh workflow runs: %s", e)
            self._on_error(str(e))
            return

        log.info("Loaded %d workflow runs", len(runs))
        self._on_load(runs, select_first=True)

    def show_details(self) -> None:
        """Open the job detail panel for the selected run."""
        run = self.selected_row()
        if run is None:
            return
        self.details.show(run)

    def open_selected(self) -> None:
        """Open the selected run in the browser."""
        run = self.selected_row()
        if run is None:
            return
        log.info("Opening %s", run.html_url)
        self._open_url(run.html_url)

    def render(self, height: int) -> TableSnapshot:
        """Snapshot the run list, with the job details overlaid when shown."""
        snapshot = super().render(height)
        if not self.details.is_visible():
            return snapshot
        overlay = self.details.render(int(height * OVERLAY_RATIO))
        return replace(snapshot, overlay=overlay)

    async def _sync(self, keys: asyncio.Queue[str]) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while True:
            try:
                async with asyncio.timeout_at(next_tick):
                    key = await keys.get()
            except TimeoutError:
                next_tick = loop.time() + self.interval
                self.request_refresh()
                continue
            self.handle_input(key)

"""Panel listing the jobs of one workflow run."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from gh_dashboard.errors import ServiceError
from gh_dashboard.models.workflow import WorkflowJob, WorkflowRun, format_local_time
from gh_dashboard.panels.base import Panel
from gh_dashboard.panels.state import FetchFailed, FetchStarted, Idle
from gh_dashboard.panels.table import Column

log = logging.getLogger(__name__)


@dataclass(eq=False, kw_only=True)
class PollSession:
    """One show of the panel: the run it tracks and its polling task."""

    run: WorkflowRun
    closed: asyncio.Event = field(default_factory=asyncio.Event)
    task: "asyncio.Task[None] | None" = None


class JobDetailsPanel(Panel[WorkflowJob]):
    """Job detail panel, polling the jobs of a run while it is visible.

    Every ``show`` starts a new polling task bound to that show. ``hide``
    clears the rows at once and signals the task, which exits at its next
    wake. Results of a fetch that completes after its show ended are
    discarded.
    """

    title = "Workflow Jobs"
    footer = "esc to close"
    columns = (
        Column(header="Job Name", max_width=120),
        Column(header="Started At", max_width=32),
        Column(header="Completed At", max_width=32),
        Column(header="Status", max_width=16),
        Column(header="Conclusion", max_width=16),
    )

    _session: PollSession | None = None

    def format_row(self, row: WorkflowJob) -> Sequence[str]:
        """Format a job as table cells."""
        completed_at = (
            format_local_time(row.completed_at) if row.completed_at is not None else ""
        )
        return (
            row.name,
            format_local_time(row.started_at),
            completed_at,
            row.status.label,
            row.conclusion.label,
        )

    @property
    def run(self) -> WorkflowRun | None:
        """The run tracked by the current show, if visible."""
        with self._lock:
            return self._session.run if self._session is not None else None

    def is_visible(self) -> bool:
        """Whether the panel is currently shown."""
        with self._lock:
            return self._session is not None

    def show(self, run: WorkflowRun) -> None:
        """Show the panel for ``run`` and start polling its jobs.

        Any previous show is hidden first so two pollers never write into the
        same view-state.
        """
        self.hide()

        session = PollSession(run=run)
        with self._lock:
            self._session = session
        session.task = asyncio.create_task(
            self._sync(session), name=f"job-details-sync-{run.id}"
        )
        log.info("Showing jobs for %s", run)

    def hide(self) -> None:
        """Hide the panel and stop its polling task.

        Rows, selection and loading state are reset at once.
        """
        with self._lock:
            session = self._session
            self._session = None
            self._state.rows = []
            self._state.loading_state = Idle()
            self._state.table.select(None)

        if session is not None:
            session.closed.set()
            log.info("Hiding jobs for %s", session.run)

    async def close(self) -> None:
        """Hide the panel and wait for its polling task to finish."""
        with self._lock:
            session = self._session
        self.hide()
        if session is not None and session.task is not None:
            session.task.cancel()
            await asyncio.gather(session.task, return_exceptions=True)

    async def refresh(self) -> None:
        """Fetch the jobs of the tracked run now, if the panel is visible."""
        with self._lock:
            session = self._session
        if session is not None:
            await self._fetch(session)

    def _is_current(self, session: PollSession) -> bool:
        with self._lock:
            return self._session is session

    async def _sync(self, session: PollSession) -> None:
        while self._is_current(session):
            await self._fetch(session)
            try:
                async with asyncio.timeout(self.interval):
                    await session.closed.wait()
            except TimeoutError:
                continue
        log.debug("Job polling for run %s stopped", session.run.id)

    async def _fetch(self, session: PollSession) -> None:
        with self._lock:
            if self._session is not session:
                return
            self._state.loading_state = self._state.loading_state.transition(
                FetchStarted()
            )

        try:
            jobs = await self.service.list_jobs(session.run)
        except ServiceError as e:
            log.error("Failed to refresh jobs for run %s: %s", session.run.id, e)
            with self._lock:
                if self._session is session:
                    self._state.loading_state = self._state.loading_state.transition(
                        FetchFailed(str(e))
                    )
            return

        with self._lock:
            if self._session is not session:
                log.debug("Discarding jobs of hidden run %s", session.run.id)
                return
            self._replace_rows(jobs, select_first=False)

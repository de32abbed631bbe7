"""Base class for panels that poll a workflow service."""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from gh_dashboard.panels.state import (
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    Idle,
    LoadingEvent,
    LoadingState,
)
from gh_dashboard.panels.table import CHROME_LINES, Column, TableSnapshot, TableState
from gh_dashboard.providers.base import WorkflowService

log = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 60.0

T = TypeVar("T")


@dataclass
class ViewState(Generic[T]):
    """Mutable state of one panel. Only touched while holding the panel lock."""

    rows: list[T] = field(default_factory=list)
    loading_state: LoadingState = field(default_factory=Idle)
    table: TableState = field(default_factory=TableState)


class Panel(ABC, Generic[T]):
    """A table panel backed by a workflow service.

    The view-state is owned by the panel and guarded by a lock. Every accessor
    takes the lock for the shortest possible scope and never across an
    ``await``, so renders always see a consistent state and fetch results are
    written in one step.
    """

    title: str
    footer: str
    columns: Sequence[Column]

    def __init__(
        self,
        service: WorkflowService,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.service = service
        self.interval = interval
        self._lock = threading.Lock()
        self._state: ViewState[T] = ViewState()

    @abstractmethod
    def format_row(self, row: T) -> Sequence[str]:
        """Format one row as table cells."""

    @property
    def rows(self) -> Sequence[T]:
        """Copy of the current rows."""
        with self._lock:
            return tuple(self._state.rows)

    @property
    def selected(self) -> int | None:
        """Index of the selected row, if any."""
        with self._lock:
            return self._state.table.selected

    @property
    def loading_state(self) -> LoadingState:
        """Outcome of the most recent fetch."""
        with self._lock:
            return self._state.loading_state

    def selected_row(self) -> T | None:
        """The selected row, if any."""
        with self._lock:
            index = self._state.table.selected
            if index is None or index >= len(self._state.rows):
                return None
            return self._state.rows[index]

    def select(self, index: int | None) -> None:
        """Select a row by index, or clear the selection."""
        with self._lock:
            if index is not None and not 0 <= index < len(self._state.rows):
                raise IndexError(f"Row {index} out of range")
            self._state.table.select(index)

    def scroll_down(self) -> None:
        """Move the selection one row forward."""
        with self._lock:
            self._state.table.move(1, len(self._state.rows))

    def scroll_up(self) -> None:
        """Move the selection one row backward."""
        with self._lock:
            self._state.table.move(-1, len(self._state.rows))

    def render(self, height: int) -> TableSnapshot:
        """Copy the view-state into a snapshot for a panel ``height`` lines tall.

        Rendering moves the scroll offset to keep the selection in view, so
        it takes the lock like any other write.
        """
        with self._lock:
            table = self._state.table
            table.follow(height - CHROME_LINES)
            return TableSnapshot(
                title=self.title,
                status=str(self._state.loading_state),
                footer=self.footer,
                columns=self.columns,
                rows=[self.format_row(row) for row in self._state.rows],
                selected=table.selected,
                offset=table.offset,
            )

    def _transition(self, event: LoadingEvent) -> None:
        with self._lock:
            self._state.loading_state = self._state.loading_state.transition(event)

    def _begin_fetch(self) -> None:
        self._transition(FetchStarted())

    def _on_error(self, message: str) -> None:
        self._transition(FetchFailed(message))

    def _on_load(self, rows: Sequence[T], *, select_first: bool) -> None:
        with self._lock:
            self._replace_rows(rows, select_first=select_first)

    def _replace_rows(self, rows: Sequence[T], *, select_first: bool) -> None:
        # Caller holds the lock.
        state = self._state
        state.rows = list(rows)
        state.table.clamp(len(state.rows))
        if select_first and state.rows and state.table.selected is None:
            state.table.select(0)
        state.loading_state = state.loading_state.transition(FetchSucceeded())

"""Table selection bookkeeping and the snapshot handed to the renderer."""

from collections.abc import Sequence
from dataclasses import dataclass

# Share of the run list area covered by the job detail panel.
OVERLAY_RATIO = 0.75

# Lines a panel needs besides its data rows: two borders, the loading state
# line and the column header.
CHROME_LINES = 4


@dataclass(frozen=True, kw_only=True)
class Column:
    """A table column with an optional maximum width."""

    header: str
    max_width: int | None = None


@dataclass(frozen=True, kw_only=True)
class TableSnapshot:
    """Everything needed to draw one panel, copied out of its view-state."""

    title: str
    status: str
    footer: str
    columns: Sequence[Column]
    rows: Sequence[Sequence[str]]
    selected: int | None
    offset: int = 0
    overlay: "TableSnapshot | None" = None

    @property
    def visible_rows(self) -> Sequence[Sequence[str]]:
        """Rows from the scroll offset onwards."""
        return self.rows[self.offset :]


@dataclass
class TableState:
    """Selected row and scroll offset of a table.

    Movement saturates at both ends of the table.
    """

    selected: int | None = None
    offset: int = 0

    def select(self, index: int | None) -> None:
        """Select a row by index, or clear the selection."""
        self.selected = index
        if index is None:
            self.offset = 0

    def move(self, delta: int, row_count: int) -> None:
        """Move the selection by ``delta`` rows, staying within the table."""
        if row_count == 0:
            return
        if self.selected is None:
            self.selected = 0
            return
        self.selected = min(max(self.selected + delta, 0), row_count - 1)

    def clamp(self, row_count: int) -> None:
        """Keep the selection valid after the rows were replaced."""
        if row_count == 0:
            self.select(None)
        elif self.selected is not None and self.selected >= row_count:
            self.selected = row_count - 1

    def follow(self, viewport: int) -> None:
        """Adjust the scroll offset so the selected row is inside the viewport."""
        viewport = max(viewport, 1)
        if self.selected is None:
            return
        if self.selected < self.offset:
            self.offset = self.selected
        elif self.selected >= self.offset + viewport:
            self.offset = self.selected - viewport + 1

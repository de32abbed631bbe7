"""Drawing of panel snapshots with rich."""

from rich.align import Align
from rich.console import Console, ConsoleOptions, Group, RenderableType, RenderResult
from rich.panel import Panel
from rich.segment import Segment
from rich.table import Table
from rich.text import Text

from gh_dashboard.panels.table import CHROME_LINES, OVERLAY_RATIO, TableSnapshot

TITLE = "GitHub Workflow Dashboard"
HIGHLIGHT_SYMBOL = ">>"
HIGHLIGHT_STYLE = "on blue"


def build_table(snapshot: TableSnapshot, height: int) -> Panel:
    """Build a bordered table showing the rows that fit in ``height`` lines."""
    table = Table(
        box=None,
        expand=True,
        show_edge=False,
        pad_edge=False,
        header_style="bold",
    )
    table.add_column("", width=len(HIGHLIGHT_SYMBOL), no_wrap=True)
    for column in snapshot.columns:
        table.add_column(
            column.header,
            max_width=column.max_width,
            no_wrap=True,
            overflow="ellipsis",
        )

    viewport = max(height - CHROME_LINES, 0)
    for index, row in enumerate(
        snapshot.visible_rows[:viewport], start=snapshot.offset
    ):
        selected = index == snapshot.selected
        table.add_row(
            HIGHLIGHT_SYMBOL if selected else "",
            *row,
            style=HIGHLIGHT_STYLE if selected else None,
        )

    status = Align.right(Text(snapshot.status, style="dim"))
    return Panel(
        Group(status, table),
        title=Text(snapshot.title, style="bold"),
        title_align="left",
        subtitle=snapshot.footer,
        subtitle_align="left",
        height=height,
    )


class Overlay:
    """Draws ``top`` centered over ``base``, clearing the area it covers."""

    def __init__(
        self,
        base: RenderableType,
        top: RenderableType,
        *,
        height: int,
        ratio: float = OVERLAY_RATIO,
    ) -> None:
        self.base = base
        self.top = top
        self.height = height
        self.ratio = ratio

    def __rich_console__(
        self, console: Console, options: ConsoleOptions
    ) -> RenderResult:
        width = options.max_width
        base_lines = console.render_lines(
            self.base, options.update_dimensions(width, self.height)
        )

        top_width = int(width * self.ratio)
        top_height = int(self.height * self.ratio)
        top_lines = console.render_lines(
            self.top, options.update_dimensions(top_width, top_height)
        )

        x = (width - top_width) // 2
        y = (self.height - top_height) // 2
        for number, line in enumerate(base_lines):
            if y <= number < y + top_height:
                parts = list(Segment.divide(line, [x, x + top_width, width]))
                left = parts[0] if parts else []
                right = parts[2] if len(parts) > 2 else []
                line = [*left, *top_lines[number - y], *right]
            yield from line
            yield Segment.line()


def build_frame(snapshot: TableSnapshot, height: int) -> RenderableType:
    """Build the whole screen: the title line above the run list.

    The job detail snapshot, when present, is drawn centered over the run
    list.
    """
    body_height = max(height - 1, 0)
    body: RenderableType = build_table(snapshot, body_height)
    if snapshot.overlay is not None:
        top = build_table(snapshot.overlay, int(body_height * OVERLAY_RATIO))
        body = Overlay(body, top, height=body_height)

    return Group(Align.center(Text(TITLE, style="bold")), body)

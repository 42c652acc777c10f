"""
Turns price snapshots into styled table rows and draws them on a surface.
"""

from typing import List, Optional, Tuple

from .models import DisplayRow, DisplayState, Style
from .terminal import DisplaySurface
from ..config.models import DisplayConfig
from ..price_store.models import Snapshot, SnapshotEntry

_STYLES = {
    DisplayState.FLAT: Style.DEFAULT,
    DisplayState.UP: Style.POSITIVE,
    DisplayState.DOWN: Style.NEGATIVE,
}


def classify(previous: float, current: float) -> Tuple[DisplayState, Optional[float]]:
    """
    Decide the display state of a price pair.

    The figure shown next to a moving price is the plain ratio
    ``current / previous`` rather than a percent change.

    Returns:
        The display state and the ratio, which is None for FLAT rows
    """
    if previous == 0.0 or previous == current:
        return DisplayState.FLAT, None
    ratio = current / previous
    if current > previous:
        return DisplayState.UP, ratio
    return DisplayState.DOWN, ratio


def format_row(entry: SnapshotEntry, display: DisplayConfig) -> DisplayRow:
    """Format one snapshot entry as a table row."""
    state, ratio = classify(entry.previous, entry.current)
    price = f"{entry.current:.2f}"

    if state is DisplayState.FLAT:
        text = f"{entry.symbol:<6} {price:<7} {'%':>11} {display.flat_glyph:<4}"
    elif state is DisplayState.UP:
        text = f"{entry.symbol:<6} {price:<7} +{ratio:.6f} % {display.up_glyph:<4}"
    else:
        text = f"{entry.symbol:<6} {price:<7} -{ratio:.6f} % {display.down_glyph:<4}"

    return DisplayRow(
        symbol=entry.symbol,
        state=state,
        style=_STYLES[state],
        text=text,
        ratio=ratio,
    )


class Renderer:
    """Draws snapshots on a display surface, one row per symbol."""

    FIRST_ROW = 1
    FIRST_COLUMN = 1

    def __init__(self, surface: Optional[DisplaySurface] = None, display: Optional[DisplayConfig] = None):
        self.surface = surface
        self.display = display or DisplayConfig()

    def format_rows(self, snapshot: Snapshot) -> List[DisplayRow]:
        return [format_row(entry, self.display) for entry in snapshot.entries]

    def render_text(self, snapshot: Snapshot) -> str:
        """Plain-text table for non-interactive output."""
        return "\n".join(row.text.rstrip() for row in self.format_rows(snapshot))

    def draw(self, snapshot: Snapshot) -> None:
        """Redraw the whole table and commit it to the surface."""
        if self.surface is None:
            raise RuntimeError("Renderer has no display surface to draw on")

        self.surface.clear()
        for offset, row in enumerate(self.format_rows(snapshot)):
            self.surface.write(self.FIRST_COLUMN, self.FIRST_ROW + offset, row.text, row.style)
        self.surface.flush()

    def close(self) -> None:
        """Release the display surface."""
        if self.surface is not None:
            self.surface.close()

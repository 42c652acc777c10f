"""
Display module for the stock watcher.

Classifies each snapshot row as flat, up or down, formats it, and draws the
table on a curses-backed terminal surface.
"""

from .renderer import Renderer, classify, format_row
from .terminal import DisplaySurface, CursesSurface, KeyListener
from .models import DisplayRow, DisplayState, Style

__all__ = [
    "Renderer",
    "classify",
    "format_row",
    "DisplaySurface",
    "CursesSurface",
    "KeyListener",
    "DisplayRow",
    "DisplayState",
    "Style",
]

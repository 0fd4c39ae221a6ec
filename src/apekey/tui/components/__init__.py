"""TUI components."""

from apekey.tui.components.input import Input
from apekey.tui.components.keymap_view import (
    NO_MATCH_TEXT,
    KeymapView,
    KeymapViewTheme,
    highlight_positions,
)

__all__ = [
    "Input",
    "KeymapView",
    "KeymapViewTheme",
    "NO_MATCH_TEXT",
    "highlight_positions",
]

"""Terminal UI for the keymap viewer, with differential rendering."""

# Components (re-exported from components package)
from apekey.tui.components import Input, KeymapView, KeymapViewTheme

# Keybindings
from apekey.tui.keybindings import (
    DEFAULT_VIEWER_KEYBINDINGS,
    KeybindingsManager,
    ViewerAction,
    get_keybindings,
    set_keybindings,
)

# Keyboard input handling
from apekey.tui.keys import Key, KeyId, matches_key, parse_key, split_input

# Terminal
from apekey.tui.terminal import ProcessTerminal, Terminal

# Core TUI
from apekey.tui.tui import CURSOR_MARKER, TUI, Component, Container, Focusable

# Utilities
from apekey.tui.utils import truncate_to_width, visible_width

__all__ = [
    # Components
    "Input",
    "KeymapView",
    "KeymapViewTheme",
    # Keybindings
    "DEFAULT_VIEWER_KEYBINDINGS",
    "KeybindingsManager",
    "ViewerAction",
    "get_keybindings",
    "set_keybindings",
    # Keys
    "Key",
    "KeyId",
    "matches_key",
    "parse_key",
    "split_input",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Core
    "CURSOR_MARKER",
    "TUI",
    "Component",
    "Container",
    "Focusable",
    # Utilities
    "truncate_to_width",
    "visible_width",
]

"""Component tree and the differential renderer that draws it.

A component turns a width into a list of lines. ``TUI`` renders its children
on every requested frame, compares the result with the previous frame, and
rewrites only the rows that changed. A focused component may place
``CURSOR_MARKER`` in its output to say where the terminal cursor goes.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from apekey.tui.utils import visible_width

if TYPE_CHECKING:
    from apekey.tui.terminal import Terminal

__all__ = [
    "Component",
    "Focusable",
    "is_focusable",
    "CURSOR_MARKER",
    "Container",
    "TUI",
]


class Component(Protocol):
    """Anything that renders to lines.

    A component that wants key input also defines ``handle_input(data)``;
    the TUI looks it up with ``getattr``.
    """

    def render(self, width: int) -> list[str]: ...

    def invalidate(self) -> None: ...


@runtime_checkable
class Focusable(Protocol):
    focused: bool


def is_focusable(component: object | None) -> bool:
    return component is not None and hasattr(component, "focused")


# Zero-width APC sequence; removed from the frame before it is written
CURSOR_MARKER = "\x1b_apekey:c\x07"

_HIDE_CURSOR = "\x1b[?25l"
_ERASE_LINE_END = "\x1b[K"
_ERASE_BELOW = "\x1b[J"


def _cursor_vertical(delta: int) -> str:
    if delta > 0:
        return f"\x1b[{delta}B"
    if delta < 0:
        return f"\x1b[{-delta}A"
    return ""


def _take_cursor(lines: list[str]) -> tuple[list[str], int | None, int]:
    """Strip ``CURSOR_MARKER`` from *lines*; return ``(lines, row, col)``."""
    for row, line in enumerate(lines):
        index = line.find(CURSOR_MARKER)
        if index != -1:
            cleaned = list(lines)
            cleaned[row] = line[:index] + line[index + len(CURSOR_MARKER) :]
            return cleaned, row, visible_width(line[:index])
    return lines, None, 0


class Container:
    """Renders its children one after another."""

    def __init__(self) -> None:
        self.children: list[Component] = []

    def add_child(self, component: Component) -> None:
        self.children.append(component)

    def invalidate(self) -> None:
        for child in self.children:
            child.invalidate()

    def render(self, width: int) -> list[str]:
        lines: list[str] = []
        for child in self.children:
            lines.extend(child.render(width))
        return lines


class TUI(Container):
    """Root of the component tree, bound to one terminal.

    Input goes to ``on_input`` first; when that returns False (or is unset)
    it goes to the focused component. Frames are clamped to the terminal
    height, and a change of width redraws everything.
    """

    def __init__(self, terminal: Terminal) -> None:
        super().__init__()
        self.terminal: Terminal = terminal
        self.on_input: Callable[[str], bool] | None = None

        self._focused: Component | None = None
        self._stopped = True
        self._render_pending = False

        self._last_frame: list[str] = []
        self._last_width = 0
        # row of the frame the terminal cursor was left on
        self._cursor_row = 0
        self._full_redraws = 0

    @property
    def full_redraws(self) -> int:
        return self._full_redraws

    @property
    def stopped(self) -> bool:
        return self._stopped

    def set_focus(self, component: Component | None) -> None:
        if component is self._focused:
            return
        if is_focusable(self._focused):
            self._focused.focused = False  # type: ignore[union-attr]
        self._focused = component
        if is_focusable(component):
            component.focused = True  # type: ignore[union-attr]

    # -- lifecycle --------------------------------------------------------

    def start(self) -> None:
        self._stopped = False
        self.terminal.start(self.handle_input, self._on_resize)
        self.terminal.hide_cursor()
        self.request_render()

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self.terminal.show_cursor()
        self.terminal.stop()

    def invalidate(self) -> None:
        super().invalidate()
        if not self._stopped:
            self.request_render()

    def _on_resize(self) -> None:
        self._last_width = 0
        self.request_render()

    # -- scheduling -------------------------------------------------------

    def request_render(self) -> None:
        """Render on the next loop iteration; repeated requests coalesce.

        Without a running event loop the frame is drawn immediately.
        """
        if self._render_pending:
            return
        self._render_pending = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._render_now()
            return
        loop.call_soon(self._render_now)

    def _render_now(self) -> None:
        self._render_pending = False
        self.do_render()

    def handle_input(self, data: str) -> None:
        if self._stopped:
            return
        consumed = self.on_input is not None and self.on_input(data)
        if not consumed and self._focused is not None:
            handler = getattr(self._focused, "handle_input", None)
            if callable(handler):
                handler(data)
        self.request_render()

    # -- drawing ----------------------------------------------------------

    def do_render(self) -> None:
        if self._stopped:
            return
        width, height = self.terminal.columns, self.terminal.rows
        if width <= 0 or height <= 0:
            return

        frame, cursor_row, cursor_col = _take_cursor(self.render(width)[:height])

        out = [_HIDE_CURSOR, _cursor_vertical(-self._cursor_row), "\r"]
        if width != self._last_width:
            self._full_redraws += 1
            out.append(_ERASE_BELOW)
            out.append("\n".join(line + _ERASE_LINE_END for line in frame))
            bottom = max(0, len(frame) - 1)
        else:
            rows = max(len(frame), len(self._last_frame))
            for row in range(rows):
                if row > 0:
                    out.append("\n")
                if row >= len(frame):
                    out.append("\r" + _ERASE_LINE_END)
                elif row >= len(self._last_frame) or frame[row] != self._last_frame[row]:
                    out.append("\r" + frame[row] + _ERASE_LINE_END)
            bottom = max(0, rows - 1)

        self._last_frame = frame
        self._last_width = width

        target = cursor_row if cursor_row is not None else max(0, len(frame) - 1)
        out.append(_cursor_vertical(target - bottom))
        out.append("\r")
        if cursor_col > 0:
            out.append(f"\x1b[{cursor_col}C")
        self._cursor_row = target

        self.terminal.write("".join(out))

"""In-memory ``Terminal`` for viewer tests.

Every write is recorded, and key input or a resize can be pushed into the
handlers the TUI registered on ``start``.
"""

from __future__ import annotations

from typing import Callable


class VirtualTerminal:
    def __init__(self, rows: int = 24, columns: int = 80) -> None:
        self._rows = rows
        self._columns = columns
        self._writes: list[str] = []
        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None
        self.cursor_visible = True

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        self._on_input = on_input
        self._on_resize = on_resize

    def stop(self) -> None:
        self._on_input = None
        self._on_resize = None

    def write(self, data: str) -> None:
        self._writes.append(data)

    def hide_cursor(self) -> None:
        self.cursor_visible = False
        self.write("\x1b[?25l")

    def show_cursor(self) -> None:
        self.cursor_visible = True
        self.write("\x1b[?25h")

    # -- inspection -------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._on_input is not None

    @property
    def output(self) -> str:
        return "".join(self._writes)

    @property
    def write_count(self) -> int:
        return len(self._writes)

    def clear_buffer(self) -> None:
        self._writes.clear()

    # -- driving ----------------------------------------------------------

    def simulate_input(self, data: str) -> None:
        if self._on_input is None:
            raise RuntimeError("terminal not started")
        self._on_input(data)

    def simulate_resize(self, rows: int | None = None, columns: int | None = None) -> None:
        self._rows = rows if rows is not None else self._rows
        self._columns = columns if columns is not None else self._columns
        if self._on_resize is not None:
            self._on_resize()

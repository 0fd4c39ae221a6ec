"""Interactive keymap viewer.

Screen layout, top to bottom: title, query input, keybinds (grouped by
section, or ranked while a query is typed), status line.
"""

from __future__ import annotations

import asyncio
import logging

from apekey.errors import ApekeyError
from apekey.fuzzy import search
from apekey.loader import KeymapStore
from apekey.model import Keymap
from apekey.theme import Theme
from apekey.tui.components import Input, KeymapView
from apekey.tui.keybindings import get_keybindings
from apekey.tui.terminal import Terminal
from apekey.tui.tui import TUI
from apekey.tui.utils import pad_to_width, truncate_to_width

logger = logging.getLogger(__name__)

# title, blank, input, blank
_HEADER_LINES = 4
# scroll indicator, status
_FOOTER_LINES = 2


class KeymapApp:
    def __init__(self, store: KeymapStore, terminal: Terminal, theme: Theme) -> None:
        self.store = store
        self.theme = theme

        self.tui = TUI(terminal)
        self.input = Input(prompt="> ", prompt_style=theme.prompt)
        self.view = KeymapView(theme)

        self.status = ""
        self.status_is_error = False

        self._done: asyncio.Event | None = None
        self._reload_task: asyncio.Task[None] | None = None

        self.input.on_change = self._on_query_change
        self.tui.on_input = self._on_input
        self.tui.add_child(self)
        self.tui.set_focus(self.input)
        self._apply_keymap(store.keymap)

    # -- state ----------------------------------------------------------------

    @property
    def query(self) -> str:
        return self.input.get_value()

    @property
    def keymap(self) -> Keymap:
        return self.store.keymap

    def _refresh_results(self) -> None:
        query = self.query.strip()
        if not query:
            self.view.set_results(None)
        else:
            self.view.set_results(search(query, self.store.keybinds))

    def _apply_keymap(self, keymap: Keymap) -> None:
        self.view.set_keymap(keymap)
        self._refresh_results()

    def _on_query_change(self, value: str) -> None:
        self._refresh_results()

    def set_status(self, text: str, error: bool = False) -> None:
        self.status = text
        self.status_is_error = error
        self.tui.request_render()

    # -- input ----------------------------------------------------------------

    def _on_input(self, data: str) -> bool:
        kb = get_keybindings()
        if kb.matches(data, "quit"):
            self.quit()
            return True
        if kb.matches(data, "reload"):
            self.request_reload()
            return True
        return self.view.handle_input(data)

    # -- reload ---------------------------------------------------------------

    def request_reload(self) -> asyncio.Task[None]:
        """Re-read the source in the background; a running reload is reused."""
        if self._reload_task is None or self._reload_task.done():
            self._reload_task = asyncio.get_running_loop().create_task(self._reload())
        return self._reload_task

    async def _reload(self) -> None:
        self.set_status(f"Reloading {self.store.path}")
        try:
            keymap = await self.store.reload()
        except ApekeyError as e:
            logger.error("reload failed: %s", e)
            self.set_status(str(e), error=True)
            return
        self._apply_keymap(keymap)
        self.set_status(
            f"Reloaded: {keymap.keybind_count()} keybinds "
            f"in {keymap.section_count()} sections"
        )

    # -- lifecycle ------------------------------------------------------------

    def quit(self) -> None:
        if self._done is not None:
            self._done.set()

    async def run(self) -> None:
        """Run until the user quits; the terminal is always restored."""
        self._done = asyncio.Event()
        self.tui.start()
        try:
            await self._done.wait()
        finally:
            if self._reload_task is not None and not self._reload_task.done():
                self._reload_task.cancel()
            self.tui.stop()

    # -- Component ------------------------------------------------------------

    def invalidate(self) -> None:
        pass

    def _body(self, width: int) -> list[str]:
        if not self.keymap.has_region:
            message = f"  No annotated keymap found in {self.store.path}"
            return [self.theme.no_match(truncate_to_width(message, width))]
        return self.view.render(width)

    def render(self, width: int) -> list[str]:
        height = self.tui.terminal.rows
        self.view.max_visible = max(1, height - _HEADER_LINES - _FOOTER_LINES)

        title = self.theme.title(truncate_to_width(self.keymap.display_title, width))
        lines = [title, "", *self.input.render(width), ""]
        lines.extend(self._body(width))

        # status line sits on the last row
        while len(lines) < height - 1:
            lines.append("")
        lines = lines[: max(0, height - 1)]
        status_style = self.theme.error if self.status_is_error else self.theme.status
        lines.append(status_style(truncate_to_width(self.status, width)))

        return [self.theme.background(pad_to_width(line, width)) for line in lines]

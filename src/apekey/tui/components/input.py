"""Single-line query editor."""

from __future__ import annotations

from typing import Callable

import grapheme

from apekey.tui.keybindings import ViewerAction, get_keybindings
from apekey.tui.keys import BRACKETED_PASTE_END, BRACKETED_PASTE_START
from apekey.tui.tui import CURSOR_MARKER
from apekey.tui.utils import is_punctuation_char, is_whitespace_char, visible_width


def _identity(text: str) -> str:
    return text


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code < 0x20 or code == 0x7F or 0x80 <= code <= 0x9F


def _word_class(cluster: str) -> int:
    """0 for whitespace, 1 for punctuation, 2 for anything else."""
    if is_whitespace_char(cluster):
        return 0
    if is_punctuation_char(cluster):
        return 1
    return 2


def _word_span(clusters: list[str]) -> int:
    """Length in code points of the leading word of *clusters*.

    Leading whitespace is included; a word is then a run of punctuation or a
    run of other characters, so ``M-S-x`` is crossed one piece at a time.
    """
    length = 0
    i = 0
    while i < len(clusters) and _word_class(clusters[i]) == 0:
        length += len(clusters[i])
        i += 1
    if i < len(clusters):
        kind = _word_class(clusters[i])
        while i < len(clusters) and _word_class(clusters[i]) == kind:
            length += len(clusters[i])
            i += 1
    return length


class Input:
    """Editable query line with a prompt.

    ``on_change`` is called with the new value after every key that changed
    it; pure cursor movement does not call it.
    """

    def __init__(
        self,
        prompt: str = "> ",
        prompt_style: Callable[[str], str] = _identity,
    ) -> None:
        self.prompt = prompt
        self.prompt_style = prompt_style
        self.on_change: Callable[[str], None] | None = None
        self.focused: bool = False

        self._value = ""
        self._cursor = 0
        # text of a bracketed paste still waiting for its end marker
        self._paste: str | None = None

        self._actions: list[tuple[ViewerAction, Callable[[], None]]] = [
            ("deleteCharBackward", self._delete_back),
            ("deleteCharForward", self._delete_forward),
            ("deleteWordBackward", self._delete_word_back),
            ("deleteToLineStart", self._delete_to_start),
            ("deleteToLineEnd", self._delete_to_end),
            ("cursorLeft", self._left),
            ("cursorRight", self._right),
            ("cursorLineStart", self._home),
            ("cursorLineEnd", self._end),
            ("cursorWordLeft", self._word_left),
            ("cursorWordRight", self._word_right),
        ]

    @property
    def cursor(self) -> int:
        return self._cursor

    def get_value(self) -> str:
        return self._value

    def set_value(self, value: str) -> None:
        self._value = value
        self._cursor = min(self._cursor, len(value))

    # -- input ------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        before = self._value
        self._handle(data)
        if self.on_change is not None and self._value != before:
            self.on_change(self._value)

    def _handle(self, data: str) -> None:
        if BRACKETED_PASTE_START in data:
            head, _, data = data.partition(BRACKETED_PASTE_START)
            if head:
                self._handle(head)
            self._paste = ""

        if self._paste is not None:
            self._paste += data
            pasted, found, rest = self._paste.partition(BRACKETED_PASTE_END)
            if found:
                self._paste = None
                self._insert("".join(pasted.splitlines()))
                if rest:
                    self._handle(rest)
            return

        kb = get_keybindings()
        for action, run in self._actions:
            if kb.matches(data, action):
                run()
                return

        if not any(_is_control(ch) for ch in data):
            self._insert(data)

    # -- editing ----------------------------------------------------------

    def _before(self) -> list[str]:
        return list(grapheme.graphemes(self._value[: self._cursor]))

    def _after(self) -> list[str]:
        return list(grapheme.graphemes(self._value[self._cursor :]))

    def _insert(self, text: str) -> None:
        self._value = self._value[: self._cursor] + text + self._value[self._cursor :]
        self._cursor += len(text)

    def _cut(self, start: int, end: int) -> None:
        self._value = self._value[:start] + self._value[end:]
        self._cursor = start

    def _delete_back(self) -> None:
        before = self._before()
        if before:
            self._cut(self._cursor - len(before[-1]), self._cursor)

    def _delete_forward(self) -> None:
        after = self._after()
        if after:
            self._cut(self._cursor, self._cursor + len(after[0]))

    def _delete_word_back(self) -> None:
        span = _word_span(self._before()[::-1])
        self._cut(self._cursor - span, self._cursor)

    def _delete_to_start(self) -> None:
        self._cut(0, self._cursor)

    def _delete_to_end(self) -> None:
        self._value = self._value[: self._cursor]

    def _left(self) -> None:
        before = self._before()
        if before:
            self._cursor -= len(before[-1])

    def _right(self) -> None:
        after = self._after()
        if after:
            self._cursor += len(after[0])

    def _home(self) -> None:
        self._cursor = 0

    def _end(self) -> None:
        self._cursor = len(self._value)

    def _word_left(self) -> None:
        self._cursor -= _word_span(self._before()[::-1])

    def _word_right(self) -> None:
        self._cursor += _word_span(self._after())

    # -- rendering --------------------------------------------------------

    def invalidate(self) -> None:
        pass

    def _window(self, room: int) -> tuple[str, int]:
        """Slice of the value that fits in *room* cells, and the cursor in it."""
        value, cursor = self._value, self._cursor
        if len(value) < room:
            return value, cursor
        # keep one cell free for the cursor block when it sits past the end
        span = room - 1 if cursor == len(value) else room
        half = span // 2
        if cursor < half:
            return value[:span], cursor
        if cursor > len(value) - half:
            start = len(value) - span
        else:
            start = cursor - half
        return value[start : start + span], cursor - start

    def render(self, width: int) -> list[str]:
        prompt = self.prompt_style(self.prompt)
        room = width - visible_width(self.prompt)
        if room <= 0:
            return [prompt]

        text, cursor = self._window(room)
        under = next(grapheme.graphemes(text[cursor:]), " ")
        marker = CURSOR_MARKER if self.focused else ""
        body = (
            text[:cursor]
            + marker
            + f"\x1b[7m{under}\x1b[27m"
            + text[cursor + len(under) :]
        )
        return [prompt + body + " " * max(0, room - visible_width(body))]

"""KeymapView component: the keymap grouped by section, or ranked results."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from apekey.model import Keymap, MatchResult
from apekey.tui.keybindings import get_keybindings
from apekey.tui.utils import truncate_to_width, visible_width

NO_MATCH_TEXT = "No matching keybinds"

_INDENT = "  "
_GAP = "  "
_MIN_KEYS_WIDTH = 8


def _normalize_to_single_line(text: str) -> str:
    return re.sub(r"[\r\n]+", " ", text).strip()


class KeymapViewTheme(Protocol):
    section: Callable[[str], str]
    keybind: Callable[[str], str]
    description: Callable[[str], str]
    comment: Callable[[str], str]
    highlight: Callable[[str], str]
    scroll_info: Callable[[str], str]
    no_match: Callable[[str], str]


@dataclass(frozen=True)
class _Row:
    section: str | None = None
    result: MatchResult | None = None


_BLANK = _Row()


def highlight_positions(
    text: str,
    positions: Sequence[int] | None,
    base: Callable[[str], str],
    highlight: Callable[[str], str],
) -> str:
    """Style *text* with *base*, wrapping runs at *positions* in *highlight*."""
    if not positions:
        return base(text)
    marked = set(positions)
    parts: list[str] = []
    run: list[str] = []
    run_marked = False
    for i, ch in enumerate(text):
        is_marked = i in marked
        if run and is_marked != run_marked:
            chunk = "".join(run)
            parts.append(highlight(chunk) if run_marked else chunk)
            run = []
        run.append(ch)
        run_marked = is_marked
    if run:
        chunk = "".join(run)
        parts.append(highlight(chunk) if run_marked else chunk)
    return base("".join(parts))


class KeymapView:
    """Scrollable list of keybinds.

    With no results set the whole keymap is shown, grouped under its section
    headers. ``set_results`` switches to a flat, ranked list where matched
    characters are highlighted and each row names its section.
    """

    def __init__(self, theme: KeymapViewTheme, max_visible: int = 20) -> None:
        self._theme = theme
        self.max_visible = max_visible
        self._keymap = Keymap()
        self._results: list[MatchResult] | None = None
        self._rows: list[_Row] = []
        self._scroll = 0

    # -- content ------------------------------------------------------------

    @property
    def results(self) -> list[MatchResult] | None:
        return self._results

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def scroll_offset(self) -> int:
        return self._scroll

    def set_keymap(self, keymap: Keymap) -> None:
        self._keymap = keymap
        self._rebuild()

    def set_results(self, results: list[MatchResult] | None) -> None:
        """Show ranked *results*, or the grouped keymap when ``None``."""
        self._results = results
        self._scroll = 0
        self._rebuild()

    def _rebuild(self) -> None:
        if self._results is not None:
            self._rows = [_Row(result=r) for r in self._results]
        else:
            rows: list[_Row] = []
            for section in self._keymap.sections:
                if not section.keybinds and section.name is None:
                    continue
                if rows:
                    rows.append(_BLANK)
                if section.name is not None:
                    rows.append(_Row(section=section.name))
                rows.extend(_Row(result=MatchResult(keybind=k)) for k in section.keybinds)
            self._rows = rows
        self._clamp_scroll()

    # -- scrolling ------------------------------------------------------------

    def _max_scroll(self) -> int:
        return max(0, len(self._rows) - self.max_visible)

    def _clamp_scroll(self) -> None:
        self._scroll = max(0, min(self._scroll, self._max_scroll()))

    def scroll_by(self, delta: int) -> None:
        self._scroll += delta
        self._clamp_scroll()

    def handle_input(self, key_data: str) -> bool:
        """Apply a scroll key; returns ``True`` if the key was consumed."""
        kb = get_keybindings()
        page = max(1, self.max_visible - 1)

        if kb.matches(key_data, "scrollUp"):
            self.scroll_by(-1)
        elif kb.matches(key_data, "scrollDown"):
            self.scroll_by(1)
        elif kb.matches(key_data, "pageUp"):
            self.scroll_by(-page)
        elif kb.matches(key_data, "pageDown"):
            self.scroll_by(page)
        elif kb.matches(key_data, "scrollTop"):
            self._scroll = 0
        elif kb.matches(key_data, "scrollBottom"):
            self._scroll = self._max_scroll()
        else:
            return False
        return True

    # -- rendering ----------------------------------------------------------

    def invalidate(self) -> None:
        pass

    def _keys_width(self, width: int) -> int:
        widest = max(
            (visible_width(r.result.keybind.keys) for r in self._rows if r.result),
            default=0,
        )
        return max(1, min(widest, max(_MIN_KEYS_WIDTH, width // 3)))

    def _render_keybind(self, result: MatchResult, keys_width: int, width: int) -> str:
        theme = self._theme
        keybind = result.keybind

        keys = truncate_to_width(keybind.keys, keys_width, "")
        positions = result.key_positions if keys == keybind.keys else None
        keys_text = highlight_positions(keys, positions, theme.keybind, theme.highlight)
        keys_text += " " * (keys_width - visible_width(keys))

        remaining = width - len(_INDENT) - keys_width - len(_GAP)
        if remaining <= 0:
            return _INDENT + keys_text

        label = _normalize_to_single_line(keybind.label)
        if keybind.description:
            label_text = highlight_positions(
                label, result.description_positions, theme.description, theme.highlight
            )
        else:
            label_text = theme.comment(label)

        if self._results is not None and keybind.section:
            label_text += " " + theme.comment(f"[{keybind.section}]")

        return _INDENT + keys_text + _GAP + truncate_to_width(label_text, remaining)

    def render(self, width: int) -> list[str]:
        if not self._rows:
            if self._results is None:
                return []
            return [self._theme.no_match(truncate_to_width(_INDENT + NO_MATCH_TEXT, width))]

        self._clamp_scroll()
        start = self._scroll
        end = min(start + self.max_visible, len(self._rows))
        keys_width = self._keys_width(width)

        lines: list[str] = []
        for row in self._rows[start:end]:
            if row.result is not None:
                lines.append(self._render_keybind(row.result, keys_width, width))
            elif row.section is not None:
                lines.append(self._theme.section(truncate_to_width(row.section, width)))
            else:
                lines.append("")

        if start > 0 or end < len(self._rows):
            scroll_text = f"{_INDENT}({start + 1}-{end}/{len(self._rows)})"
            lines.append(self._theme.scroll_info(truncate_to_width(scroll_text, width)))

        return lines

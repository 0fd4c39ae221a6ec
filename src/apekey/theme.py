"""ANSI styling for the viewer, built from the configured colours."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from apekey.config import Colors, Rgb

Style = Callable[[str], str]

# light palette, used for colours the user did not set when theme = "light"
LIGHT_COLORS: dict[str, Rgb] = {
    "fg": (0x3B, 0x2F, 0x27),
    "bg": (0xF5, 0xEF, 0xE6),
    "keybind": (0xA2, 0x3B, 0x43),
    "scrollbar": (0xB0, 0x7A, 0x4F),
    "error": (0xC6, 0x28, 0x28),
}


def _fg(rgb: Rgb | None, bold: bool = False) -> Style:
    if rgb is None and not bold:
        return _plain
    start = "\x1b[1m" if bold else ""
    end = "\x1b[22m" if bold else ""
    if rgb is not None:
        r, g, b = rgb
        start += f"\x1b[38;2;{r};{g};{b}m"
        end = "\x1b[39m" + end

    def style(text: str) -> str:
        return f"{start}{text}{end}"

    return style


def _bg(rgb: Rgb | None) -> Style:
    if rgb is None:
        return _plain
    r, g, b = rgb
    start = f"\x1b[48;2;{r};{g};{b}m"

    def style(text: str) -> str:
        return f"{start}{text}\x1b[49m"

    return style


def _plain(text: str) -> str:
    return text


def _highlight(text: str) -> str:
    return f"\x1b[1;4m{text}\x1b[22;24m"


@dataclass(frozen=True)
class Theme:
    title: Style = _plain
    section: Style = _plain
    keybind: Style = _plain
    description: Style = _plain
    comment: Style = _plain
    highlight: Style = _plain
    scroll_info: Style = _plain
    no_match: Style = _plain
    status: Style = _plain
    error: Style = _plain
    prompt: Style = _plain
    background: Style = _plain

    @classmethod
    def plain(cls) -> Theme:
        """A theme that leaves text unstyled (pipes and tests)."""
        return cls()

    @classmethod
    def from_colors(cls, colors: Colors, name: str = "dark") -> Theme:
        if name == "light":
            overrides = {
                key: value
                for key, value in LIGHT_COLORS.items()
                if key not in colors.model_fields_set
            }
            colors = colors.model_copy(update=overrides)

        fg = colors.fg
        accent = colors.scrollbar
        return cls(
            title=_fg(colors.title or colors.keybind, bold=True),
            section=_fg(colors.section or fg, bold=True),
            keybind=_fg(colors.keybind),
            description=_fg(fg),
            comment=_fg(colors.comment or accent),
            highlight=_highlight,
            scroll_info=_fg(accent),
            no_match=_fg(colors.comment or accent),
            status=_fg(accent),
            error=_fg(colors.error, bold=True),
            prompt=_fg(colors.keybind, bold=True),
            background=_bg(colors.bg),
        )

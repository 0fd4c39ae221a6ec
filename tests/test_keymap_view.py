"""Tests for the KeymapView component."""

from __future__ import annotations

from apekey.model import Keybind, Keymap, MatchResult, Section
from apekey.theme import Theme
from apekey.tui.components.keymap_view import NO_MATCH_TEXT, KeymapView, highlight_positions

MARKED = Theme(highlight=lambda s: f"[{s}]", section=lambda s: f"#{s}")

KILL = Keybind(keys="M-x", description="Kill")
SINK = Keybind(keys="M-t", description="Sink", section="Windows")
QUIT = Keybind(keys="M-S-q", action="io exitSuccess", section="Windows")

KEYMAP = Keymap(
    title="Test",
    sections=(
        Section(keybinds=(KILL,)),
        Section(name="Windows", keybinds=(SINK, QUIT)),
    ),
    has_region=True,
)


def _long_keymap(count: int) -> Keymap:
    keybinds = tuple(Keybind(keys=f"M-{i}", description=f"Workspace {i}") for i in range(count))
    return Keymap(sections=(Section(keybinds=keybinds),), has_region=True)


# ---------------------------------------------------------------------------
# highlight_positions
# ---------------------------------------------------------------------------


class TestHighlightPositions:
    def test_no_positions(self) -> None:
        assert highlight_positions("abc", None, str.upper, lambda s: f"[{s}]") == "ABC"

    def test_runs_are_grouped(self) -> None:
        result = highlight_positions("kill", [0, 1, 3], lambda s: s, lambda s: f"[{s}]")
        assert result == "[ki]l[l]"

    def test_base_wraps_everything(self) -> None:
        result = highlight_positions("ab", [1], lambda s: f"<{s}>", lambda s: f"[{s}]")
        assert result == "<a[b]>"


# ---------------------------------------------------------------------------
# Grouped mode
# ---------------------------------------------------------------------------


class TestGroupedMode:
    def test_layout(self) -> None:
        view = KeymapView(MARKED)
        view.set_keymap(KEYMAP)
        assert view.render(40) == [
            "  M-x    Kill",
            "",
            "#Windows",
            "  M-t    Sink",
            "  M-S-q  io exitSuccess",
        ]

    def test_results_is_none(self) -> None:
        view = KeymapView(MARKED)
        view.set_keymap(KEYMAP)
        assert view.results is None
        assert view.row_count == 5

    def test_empty_named_section_keeps_header(self) -> None:
        keymap = Keymap(
            sections=(Section(name="Empty"), Section(name="Full", keybinds=(KILL,))),
            has_region=True,
        )
        view = KeymapView(MARKED)
        view.set_keymap(keymap)
        assert view.render(40) == ["#Empty", "", "#Full", "  M-x  Kill"]

    def test_empty_unnamed_section_is_skipped(self) -> None:
        keymap = Keymap(
            sections=(Section(), Section(name="Full", keybinds=(KILL,))),
            has_region=True,
        )
        view = KeymapView(MARKED)
        view.set_keymap(keymap)
        assert view.render(40) == ["#Full", "  M-x  Kill"]

    def test_empty_keymap_renders_nothing(self) -> None:
        view = KeymapView(MARKED)
        view.set_keymap(Keymap(has_region=True))
        assert view.render(40) == []

    def test_narrow_width_drops_label(self) -> None:
        view = KeymapView(MARKED)
        view.set_keymap(KEYMAP)
        assert view.render(9)[0] == "  M-x  "


# ---------------------------------------------------------------------------
# Ranked mode
# ---------------------------------------------------------------------------


class TestRankedMode:
    def test_highlights_and_section_suffix(self) -> None:
        view = KeymapView(MARKED)
        view.set_keymap(KEYMAP)
        view.set_results([MatchResult(keybind=SINK, score=10, key_positions=(0, 2))])
        assert view.render(40) == ["  [M]-[t]  Sink [Windows]"]

    def test_description_highlight(self) -> None:
        view = KeymapView(MARKED)
        view.set_results([MatchResult(keybind=KILL, description_positions=(0,))])
        assert view.render(40) == ["  M-x  [K]ill"]

    def test_no_match_placeholder(self) -> None:
        view = KeymapView(MARKED)
        view.set_keymap(KEYMAP)
        view.set_results([])
        assert view.render(40) == ["  " + NO_MATCH_TEXT]

    def test_clearing_results_restores_grouping(self) -> None:
        view = KeymapView(MARKED)
        view.set_keymap(KEYMAP)
        view.set_results([])
        view.set_results(None)
        assert view.row_count == 5


# ---------------------------------------------------------------------------
# Scrolling
# ---------------------------------------------------------------------------


class TestScrolling:
    def test_scroll_indicator(self) -> None:
        view = KeymapView(MARKED, max_visible=10)
        view.set_keymap(_long_keymap(30))
        lines = view.render(40)
        assert len(lines) == 11
        assert lines[-1] == "  (1-10/30)"

    def test_no_indicator_when_everything_fits(self) -> None:
        view = KeymapView(MARKED, max_visible=10)
        view.set_keymap(_long_keymap(5))
        assert len(view.render(40)) == 5

    def test_scroll_keys(self) -> None:
        view = KeymapView(MARKED, max_visible=10)
        view.set_keymap(_long_keymap(30))

        assert view.handle_input("\x1b[B")
        assert view.scroll_offset == 1
        assert view.handle_input("\x1b[6~")
        assert view.scroll_offset == 10
        assert view.handle_input("\x1b[A")
        assert view.scroll_offset == 9
        assert view.handle_input("\x1b[5~")
        assert view.scroll_offset == 0

    def test_top_and_bottom(self) -> None:
        view = KeymapView(MARKED, max_visible=10)
        view.set_keymap(_long_keymap(30))
        assert view.handle_input("\x1b[1;5F")
        assert view.scroll_offset == 20
        assert view.render(40)[-1] == "  (21-30/30)"
        assert view.handle_input("\x1b[1;5H")
        assert view.scroll_offset == 0

    def test_scroll_is_clamped(self) -> None:
        view = KeymapView(MARKED, max_visible=10)
        view.set_keymap(_long_keymap(12))
        view.scroll_by(-5)
        assert view.scroll_offset == 0
        view.scroll_by(100)
        assert view.scroll_offset == 2

    def test_other_keys_are_not_consumed(self) -> None:
        view = KeymapView(MARKED)
        assert not view.handle_input("a")

    def test_new_results_reset_scroll(self) -> None:
        view = KeymapView(MARKED, max_visible=10)
        view.set_keymap(_long_keymap(30))
        view.scroll_by(5)
        view.set_results([MatchResult(keybind=KILL)])
        assert view.scroll_offset == 0

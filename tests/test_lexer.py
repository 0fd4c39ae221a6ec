"""Tests for apekey.lexer -- per-line classification."""

from __future__ import annotations

import pytest

from apekey.lexer import (
    Begin,
    Blank,
    Code,
    Description,
    End,
    FakeKeybind,
    IgnoreMarker,
    Other,
    SectionHeader,
    classify,
    comment_text,
    lex,
)


# ---------------------------------------------------------------------------
# Boundary markers
# ---------------------------------------------------------------------------


class TestBoundaryMarkers:
    def test_begin_with_title(self) -> None:
        assert classify("-- # My keys") == Begin("My keys")

    def test_title_is_trimmed(self) -> None:
        assert classify("--   #    Spaced title   ") == Begin("Spaced title")

    def test_bare_marker_is_end(self) -> None:
        assert classify("-- #") == End()

    def test_bare_marker_with_trailing_whitespace(self) -> None:
        assert classify("-- #   ") == End()

    def test_indented_marker(self) -> None:
        assert classify("    -- # Indented") == Begin("Indented")

    def test_no_space_after_prefix(self) -> None:
        assert classify("--# Tight") == Begin("Tight")


# ---------------------------------------------------------------------------
# Sigil priority
# ---------------------------------------------------------------------------


class TestSectionHeaders:
    def test_section_header(self) -> None:
        assert classify("-- ## Launchers") == SectionHeader("Launchers")

    def test_section_is_never_a_boundary(self) -> None:
        event = classify("-- ## Windows")
        assert not isinstance(event, (Begin, End))

    def test_bare_section_marker(self) -> None:
        assert classify("-- ##") == SectionHeader(None)

    def test_triple_hash_is_section_named_from_remainder(self) -> None:
        assert classify("-- ### Deep") == SectionHeader("# Deep")


class TestAnnotations:
    def test_ignore_marker(self) -> None:
        assert classify("-- ! Hidden") == IgnoreMarker("Hidden")

    def test_bare_ignore_marker(self) -> None:
        assert classify("-- !") == IgnoreMarker("")

    def test_fake_keybind(self) -> None:
        event = classify('-- "M-<n>" Switch to workspace n')
        assert event == FakeKeybind("M-<n>", "Switch to workspace n")

    def test_fake_keybind_without_text(self) -> None:
        assert classify('-- "M-q"') == FakeKeybind("M-q", "")

    def test_empty_quotes_fall_back_to_description(self) -> None:
        assert classify('-- "" nothing') == Description('"" nothing')

    def test_unterminated_quote_is_description(self) -> None:
        assert classify('-- "M-q restart') == Description('"M-q restart')

    def test_description(self) -> None:
        assert classify("-- Kill window") == Description("Kill window")

    def test_description_keeps_inner_hash(self) -> None:
        assert classify("-- Toggle #2") == Description("Toggle #2")

    def test_empty_comment_is_other(self) -> None:
        assert isinstance(classify("--"), Other)


# ---------------------------------------------------------------------------
# Non-comment lines
# ---------------------------------------------------------------------------


class TestNonComments:
    def test_blank(self) -> None:
        assert classify("") == Blank()

    def test_whitespace_only_is_blank(self) -> None:
        assert classify("   \t ") == Blank()

    def test_code(self) -> None:
        line = '  , ("M-x", kill)'
        assert classify(line) == Code(line)

    def test_arrow_operator_is_not_a_comment(self) -> None:
        line = "foo --> bar"
        assert classify(line) == Code(line)

    def test_line_starting_with_arrow_operator(self) -> None:
        assert classify("-->") == Code("-->")

    def test_block_comment_is_other(self) -> None:
        assert isinstance(classify("{- block comment -}"), Other)

    def test_trailing_comment_makes_line_code(self) -> None:
        line = '("M-x", kill) -- not an annotation'
        assert classify(line) == Code(line)


class TestHelpers:
    def test_comment_text(self) -> None:
        assert comment_text("  --   hello  ") == "hello"

    def test_comment_text_none_for_code(self) -> None:
        assert comment_text("main = xmonad def") is None

    def test_lex_classifies_every_line(self) -> None:
        events = lex("-- # T\n\n(\"M-a\", a)\n-- #\n")
        assert events == [Begin("T"), Blank(), Code('("M-a", a)'), End()]

    @pytest.mark.parametrize("line", ["", "x", "--", "-- #", '-- "', "\x00", "-- ! !"])
    def test_classify_is_total(self, line: str) -> None:
        classify(line)

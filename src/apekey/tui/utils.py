"""Terminal text measurement: ANSI-aware widths and truncation."""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# CSI sequences, plus APC sequences (used for the cursor marker)
_ANSI_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJ]"  # CSI
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"  # APC
)

_RESET = "\x1b[0m"

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control characters and lone combining marks take no columns, emoji
    sequences (VS16, ZWJ, skin tones, flags) take two, and everything else is
    measured by ``wcwidth`` on its first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first) in ("Mn", "Me", "Cf"):
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    ANSI escape sequences are ignored and tabs count as 3 columns.
    """
    if not text:
        return 0

    stripped = strip_ansi(text).replace("\t", "   ")
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def _take_columns(text: str, max_cols: int) -> tuple[str, bool]:
    """Prefix of *text* fitting *max_cols* columns, cut at grapheme boundaries.

    Also reports whether an ANSI code was kept, so the caller can reset.
    """
    parts: list[str] = []
    cols = 0
    styled = False
    pos = 0

    for m in [*_ANSI_RE.finditer(text), None]:
        chunk_end = m.start() if m else len(text)
        for g in grapheme.graphemes(text[pos:chunk_end]):
            w = _grapheme_width(g)
            if cols + w > max_cols:
                return "".join(parts), styled
            parts.append(g)
            cols += w
        if m is None:
            break
        parts.append(m.group(0))
        styled = True
        pos = m.end()

    return "".join(parts), styled


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    If the text is wider than *max_width*, it is cut and *ellipsis* is
    appended (the ellipsis counts towards the width).  If *pad* is ``True``,
    the result is right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    ellipsis_width = visible_width(ellipsis)
    target_width = max_width - ellipsis_width
    if target_width <= 0:
        return _take_columns(ellipsis, max_width)[0]

    result, styled = _take_columns(text, target_width)
    if styled:
        result += _RESET
    result += ellipsis

    if pad:
        result_width = visible_width(result)
        if result_width < max_width:
            result += " " * (max_width - result_width)

    return result


def pad_to_width(text: str, width: int) -> str:
    return truncate_to_width(text, width, pad=True)


def is_whitespace_char(char: str) -> bool:
    return char in (" ", "\t", "\n", "\r", "\f", "\v")


_PUNCTUATION_RE = re.compile(r"[(){}\[\]<>.,;:'\"!?\+\-=*/\\|&%\^$#@~`]")


def is_punctuation_char(char: str) -> bool:
    return bool(_PUNCTUATION_RE.match(char))

"""Line classifier for keymap annotations.

Each line of an annotated ``xmonad.hs`` is classified on its own, without
looking at its neighbours. Annotations live in ``--`` line comments::

    -- # Title          begin marker (a bare "-- #" ends the region)
    -- ## Section       section header (a bare "-- ##" closes the section)
    -- Description     applies to the next binding line
    -- "M-<n>" Text    fake keybind, not backed by a binding line
    -- ! Text          ignore the next binding line

After the comment prefix the sigils are tried in the order ``##``, ``#``,
``!``, ``"``, so a section header is never read as a boundary marker.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

COMMENT_PREFIX = "--"
BOUNDARY_TOKEN = "#"
SECTION_TOKEN = "##"
IGNORE_TOKEN = "!"
QUOTE = '"'

# "--" not followed by ">" ("-->" is an operator, not a comment)
_COMMENT_RE = re.compile(r"^\s*--(?!>)[ \t]*(?P<rest>.*)$")
_FAKE_KEYBIND_RE = re.compile(r'^"(?P<keys>[^"]+)"(?P<text>.*)$')


# ---------------------------------------------------------------------------
# Line events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Begin:
    title: str = ""


@dataclass(frozen=True)
class End:
    """A bare boundary marker.

    Closes an open region; the builder reads it as an untitled begin marker
    when no region is open yet.
    """


@dataclass(frozen=True)
class SectionHeader:
    name: str | None = None


@dataclass(frozen=True)
class Description:
    text: str


@dataclass(frozen=True)
class FakeKeybind:
    keys: str
    text: str = ""


@dataclass(frozen=True)
class IgnoreMarker:
    text: str = ""


@dataclass(frozen=True)
class Code:
    line: str


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class Other:
    line: str = ""


LineEvent = (
    Begin
    | End
    | SectionHeader
    | Description
    | FakeKeybind
    | IgnoreMarker
    | Code
    | Blank
    | Other
)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def comment_text(line: str) -> str | None:
    """Return what follows the ``--`` prefix, or None if *line* is not a comment."""
    m = _COMMENT_RE.match(line)
    if m is None:
        return None
    return m.group("rest").rstrip()


def classify(line: str) -> LineEvent:
    rest = comment_text(line)
    if rest is None:
        stripped = line.strip()
        if not stripped:
            return Blank()
        if stripped.startswith("{-"):
            return Other(line)
        return Code(line)

    if rest.startswith(SECTION_TOKEN):
        name = rest[len(SECTION_TOKEN):].strip()
        return SectionHeader(name or None)

    if rest.startswith(BOUNDARY_TOKEN):
        title = rest[len(BOUNDARY_TOKEN):].strip()
        return Begin(title) if title else End()

    if rest.startswith(IGNORE_TOKEN):
        return IgnoreMarker(rest[len(IGNORE_TOKEN):].strip())

    if rest.startswith(QUOTE):
        m = _FAKE_KEYBIND_RE.match(rest)
        if m is not None and m.group("keys").strip():
            return FakeKeybind(m.group("keys").strip(), m.group("text").strip())

    if not rest:
        return Other(line)

    return Description(rest)


def lex(text: str) -> list[LineEvent]:
    """Classify every line of *text*."""
    return [classify(line) for line in text.splitlines()]

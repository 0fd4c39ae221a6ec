"""Keymap builder: a state machine over classified lines.

The builder walks the line events of :mod:`apekey.lexer` in order and
assembles a :class:`~apekey.model.Keymap`. Annotations are buffered as
*pending* state and resolved by the next binding line:

* a description attaches to the next extractable binding line, or is
  dropped when that line is not a binding;
* a fake keybind consumes the next binding line, and is flushed on its own
  as soon as anything else ends its wait;
* an ignore marker suppresses whatever the next binding line produces.

Malformed input never raises. A source without a begin marker yields an
empty keymap with ``has_region`` unset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from apekey.extract import extract
from apekey.lexer import (
    Begin,
    Blank,
    Code,
    Description,
    End,
    FakeKeybind,
    IgnoreMarker,
    LineEvent,
    Other,
    SectionHeader,
    lex,
)
from apekey.model import Keybind, Keymap, Section

logger = logging.getLogger(__name__)


class State(Enum):
    OUTSIDE = "outside"
    INSIDE_NO_SECTION = "inside-no-section"
    INSIDE_SECTION = "inside-section"
    DONE = "done"


@dataclass
class _OpenSection:
    name: str | None
    explicit: bool
    keybinds: list[Keybind] = field(default_factory=list)


class KeymapBuilder:
    """Consumes line events one at a time; :meth:`finish` returns the keymap."""

    def __init__(self) -> None:
        self.state = State.OUTSIDE
        self._title = ""
        self._has_region = False
        self._closed = False
        self._sections: list[_OpenSection] = []
        self._current: _OpenSection | None = None

        # Pending annotations, resolved by the next binding line
        self._pending_description: str | None = None
        self._pending_fake: FakeKeybind | None = None
        self._pending_ignore = False

    @property
    def inside(self) -> bool:
        return self.state in (State.INSIDE_NO_SECTION, State.INSIDE_SECTION)

    # -- event dispatch -------------------------------------------------------

    def feed(self, event: LineEvent) -> None:
        if self.state is State.DONE:
            return

        if self.state is State.OUTSIDE:
            match event:
                case Begin(title=title):
                    self._begin(title)
                case End():
                    self._begin("")
            return

        match event:
            case Begin():
                logger.debug("nested begin marker ignored")
            case End():
                self._end()
            case SectionHeader(name=name):
                self._flush_fake()
                self._clear_pending()
                self._open_section(name)
            case Description(text=text):
                self._flush_fake()
                self._pending_description = text
            case FakeKeybind():
                self._flush_fake()
                self._pending_description = None
                self._pending_fake = event
            case IgnoreMarker():
                self._flush_fake()
                self._pending_ignore = True
            case Code(line=line):
                self._on_code(line)
            case Blank() | Other():
                pass

    def feed_all(self, events: Iterable[LineEvent]) -> KeymapBuilder:
        for event in events:
            self.feed(event)
        return self

    # -- transitions -----------------------------------------------------------

    def _begin(self, title: str) -> None:
        logger.debug("start token found, title %r", title)
        self._title = title
        self._has_region = True
        self.state = State.INSIDE_NO_SECTION

    def _end(self) -> None:
        logger.debug("end token found")
        self._flush_fake()
        self._clear_pending()
        self._closed = True
        self._current = None
        self.state = State.DONE

    def _open_section(self, name: str | None) -> None:
        if name is None:
            # A bare "##" closes the current section.
            self._current = None
            self.state = State.INSIDE_NO_SECTION
            return
        logger.debug("section token found [%s]", name)
        self._current = _OpenSection(name=name, explicit=True)
        self._sections.append(self._current)
        self.state = State.INSIDE_SECTION

    def _on_code(self, line: str) -> None:
        fake = self._pending_fake
        ignore = self._pending_ignore
        description = self._pending_description
        self._clear_pending()

        if fake is not None:
            self._append(fake.keys, fake.text, is_fake=True, is_ignored=ignore)
            return

        extracted = extract(line)
        if extracted is None:
            if description is not None:
                logger.debug("description %r not followed by a binding", description)
            return

        keys, action = extracted
        self._append(keys, description or "", action=action, is_ignored=ignore)

    # -- helpers ---------------------------------------------------------------

    def _flush_fake(self) -> None:
        if self._pending_fake is None:
            return
        fake = self._pending_fake
        self._pending_fake = None
        self._append(fake.keys, fake.text, is_fake=True)

    def _clear_pending(self) -> None:
        self._pending_description = None
        self._pending_fake = None
        self._pending_ignore = False

    def _append(
        self,
        keys: str,
        description: str,
        *,
        action: str = "",
        is_fake: bool = False,
        is_ignored: bool = False,
    ) -> None:
        if self._current is None:
            # Implicit default section, opened lazily
            self._current = _OpenSection(name=None, explicit=False)
            self._sections.append(self._current)
        keybind = Keybind(
            keys=keys,
            description=description,
            is_fake=is_fake,
            is_ignored=is_ignored,
            action=action,
            section=self._current.name,
        )
        logger.debug("keybind token found %r", keybind)
        self._current.keybinds.append(keybind)

    # -- result ----------------------------------------------------------------

    def finish(self) -> Keymap:
        """Close the pass and return the filtered, immutable keymap."""
        if self.inside:
            self._flush_fake()
            self._clear_pending()
            logger.warning("The parsing ended without the end token")

        sections: list[Section] = []
        for open_section in self._sections:
            keybinds = tuple(k for k in open_section.keybinds if not k.is_ignored)
            if not keybinds and not open_section.explicit:
                continue
            sections.append(Section(name=open_section.name, keybinds=keybinds))

        return Keymap(
            title=self._title,
            sections=tuple(sections),
            has_region=self._has_region,
            closed=self._closed,
        )


def build(events: Iterable[LineEvent]) -> Keymap:
    return KeymapBuilder().feed_all(events).finish()


def parse_keymap(text: str) -> Keymap:
    """Parse an annotated source buffer into a keymap."""
    return build(lex(text))

"""Keymap data model: Keymap -> Section -> Keybind.

Every type here is frozen. A keymap is built once by
:mod:`apekey.builder` and replaced wholesale on the next parse.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TITLE = "Key bindings"


@dataclass(frozen=True)
class Keybind:
    keys: str
    description: str = ""
    is_fake: bool = False
    is_ignored: bool = False
    # Tail of the binding line, shown when there is no description.
    action: str = ""
    # Name of the owning section (None for the implicit default section).
    section: str | None = None

    @property
    def label(self) -> str:
        return self.description or self.action

    def __str__(self) -> str:
        return f"{self.keys} {self.label}".rstrip()


@dataclass(frozen=True)
class Section:
    name: str | None = None
    keybinds: tuple[Keybind, ...] = ()


@dataclass(frozen=True)
class Keymap:
    """Root of a parsed keymap.

    ``has_region`` is False when the source carries no begin marker at all,
    which callers should present as "nothing annotated yet" rather than as a
    failure. ``closed`` tells whether the matching end marker was seen.
    """

    title: str = ""
    sections: tuple[Section, ...] = ()
    has_region: bool = False
    closed: bool = False

    @property
    def display_title(self) -> str:
        return self.title or DEFAULT_TITLE

    @property
    def is_empty(self) -> bool:
        return not any(s.keybinds for s in self.sections)

    def section_count(self) -> int:
        return len(self.sections)

    def keybind_count(self) -> int:
        return sum(len(s.keybinds) for s in self.sections)

    def keybinds(self) -> list[Keybind]:
        """Flatten every section's keybinds, in source order."""
        result: list[Keybind] = []
        for section in self.sections:
            result.extend(section.keybinds)
        return result

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "sections": [
                {
                    "name": s.name,
                    "keybinds": [
                        {
                            "keys": k.keys,
                            "description": k.description,
                            "action": k.action,
                            "is_fake": k.is_fake,
                        }
                        for k in s.keybinds
                    ],
                }
                for s in self.sections
            ],
        }


@dataclass(frozen=True)
class MatchResult:
    """A keybind that survived a search, with its score and highlights.

    The position lists index into ``keybind.keys`` and
    ``keybind.description``; a field that did not match has ``None``.
    """

    keybind: Keybind
    score: float = 0
    key_positions: tuple[int, ...] | None = None
    description_positions: tuple[int, ...] | None = None

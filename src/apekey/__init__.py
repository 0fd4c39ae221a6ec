"""apekey: browse the annotated keybindings of an xmonad config."""

from apekey.builder import KeymapBuilder, build, parse_keymap
from apekey.errors import ApekeyError, ConfigError, SourceReadError
from apekey.fuzzy import fuzzy_match, search
from apekey.model import DEFAULT_TITLE, Keybind, Keymap, MatchResult, Section

__version__ = "0.1.0"

__all__ = [
    "ApekeyError",
    "ConfigError",
    "DEFAULT_TITLE",
    "Keybind",
    "Keymap",
    "KeymapBuilder",
    "MatchResult",
    "Section",
    "SourceReadError",
    "build",
    "fuzzy_match",
    "parse_keymap",
    "search",
]

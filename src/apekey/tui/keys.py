"""Keyboard input parsing and matching for the keymap viewer.

Handles legacy terminal sequences (xterm-style CSI/SS3 with modifier
parameters), control characters and ESC-prefixed alt keys. ``parse_key``
turns raw input into a key identifier such as ``"ctrl+a"`` or ``"pageDown"``;
``matches_key`` compares raw input against an identifier.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

_MODIFIER_ORDER = ("ctrl", "shift", "alt")

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[Z": "shift+tab",
}

# CSI letter finals and "~" numbers, as used with a modifier parameter
_CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageUp",
    "6": "pageDown",
}

# ESC [ 1 ; <mod> <letter>   and   ESC [ <n> ; <mod> ~
_MODIFIED_LETTER_RE = re.compile(r"^\x1b\[1;(\d+)([A-Z])$")
_MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)~$")


def _prefix(modifier_param: int) -> str:
    mod = modifier_param - 1
    prefix = ""
    if mod & MODIFIERS["ctrl"]:
        prefix += "ctrl+"
    if mod & MODIFIERS["shift"]:
        prefix += "shift+"
    if mod & MODIFIERS["alt"]:
        prefix += "alt+"
    return prefix


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


def parse_key(data: str) -> str | None:  # noqa: C901
    """Parse raw terminal input and return the key identifier, or ``None``."""
    if not data:
        return None

    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]

    m = _MODIFIED_LETTER_RE.match(data)
    if m and m.group(2) in _CSI_LETTER_KEYS:
        return _prefix(int(m.group(1))) + _CSI_LETTER_KEYS[m.group(2)]

    m = _MODIFIED_TILDE_RE.match(data)
    if m and m.group(1) in _CSI_TILDE_KEYS:
        return _prefix(int(m.group(2))) + _CSI_TILDE_KEYS[m.group(1)]

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return "escape"
    if data == "\r" or data == "\n":
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data == "\x7f" or data == "\x08":
        return "backspace"
    if data == "\x00":
        return "ctrl+space"
    if data == "\x1f":
        return "ctrl+-"

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\r" or ch == "\n":
            return "alt+enter"
        if ch == "\x7f" or ch == "\x08":
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isupper():
            return "shift+alt+" + ch.lower()
        if ch.isprintable():
            return "alt+" + ch.lower()

    # --- Plain printable character ---
    if len(data) == 1 and data.isprintable():
        return data

    return None


# ---------------------------------------------------------------------------
# matches_key
# ---------------------------------------------------------------------------


def normalize_key_id(key_id: str) -> str:
    """Put modifiers in canonical order: ``"alt+ctrl+x"`` -> ``"ctrl+alt+x"``."""
    if key_id == "+" or key_id.endswith("++"):
        base = "+"
        parts = key_id[:-1].split("+") if len(key_id) > 1 else []
    else:
        parts = key_id.split("+")
        base = parts.pop() if parts else ""
    mods = {p.lower() for p in parts if p}
    ordered = [m for m in _MODIFIER_ORDER if m in mods]
    if len(base) == 1 and not ordered:
        return base
    return "+".join([*ordered, base.lower() if len(base) == 1 else base])


def matches_key(data: str, key_id: KeyId) -> bool:
    """Return ``True`` if *data* (raw terminal input) matches *key_id*."""
    parsed = parse_key(data)
    if parsed is None:
        return False
    return normalize_key_id(parsed) == normalize_key_id(key_id)


# ---------------------------------------------------------------------------
# Input splitting
# ---------------------------------------------------------------------------

BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_CSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_SS3_RE = re.compile(r"\x1bO.")


def split_input(data: str) -> list[str]:
    """Split a chunk read from stdin into individual key sequences.

    A bracketed paste is kept as a single item, markers included.
    """
    result: list[str] = []
    i = 0
    while i < len(data):
        if data.startswith(BRACKETED_PASTE_START, i):
            end = data.find(BRACKETED_PASTE_END, i)
            if end == -1:
                result.append(data[i:])
                break
            end += len(BRACKETED_PASTE_END)
            result.append(data[i:end])
            i = end
            continue

        if data[i] == "\x1b":
            m = _CSI_RE.match(data, i) or _SS3_RE.match(data, i)
            if m:
                result.append(m.group(0))
                i = m.end()
                continue
            if i + 1 < len(data) and data[i + 1] != "\x1b":
                # ESC-prefixed alt key
                result.append(data[i : i + 2])
                i += 2
                continue
            result.append("\x1b")
            i += 1
            continue

        result.append(data[i])
        i += 1
    return result

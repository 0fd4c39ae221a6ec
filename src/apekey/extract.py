"""Key extraction from binding-tuple lines such as ``, ("M-x", kill)``."""

from __future__ import annotations

import re

# "(" then optional whitespace then the first quoted token
_BINDING_RE = re.compile(r'\(\s*"(?P<keys>[^"]*)"(?P<tail>.*)$')


def _clean_action(tail: str) -> str:
    action = tail.strip().lstrip(",").strip()
    # drop the tuple's closing paren, leave balanced ones alone
    if action.endswith(")") and action.count(")") > action.count("("):
        action = action[:-1].rstrip()
    return action


def extract(code_line: str) -> tuple[str, str] | None:
    """Return ``(keys, action)`` for a binding line, or None.

    >>> extract('  , ("M-S-c",   kill)')
    ('M-S-c', 'kill')
    """
    m = _BINDING_RE.search(code_line)
    if m is None:
        return None
    keys = m.group("keys").strip()
    if not keys:
        return None
    return keys, _clean_action(m.group("tail"))

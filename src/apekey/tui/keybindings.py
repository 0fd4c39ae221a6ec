"""Viewer keybindings manager."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Literal, get_args

from apekey.tui.keys import KeyId, matches_key

logger = logging.getLogger(__name__)

ViewerAction = Literal[
    # Application
    "quit",
    "reload",
    # Results list
    "scrollUp",
    "scrollDown",
    "pageUp",
    "pageDown",
    "scrollTop",
    "scrollBottom",
    # Query editing
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
]

VIEWER_ACTIONS: frozenset[str] = frozenset(get_args(ViewerAction))

ViewerKeybindingsConfig = Mapping[str, KeyId | list[KeyId]]

DEFAULT_VIEWER_KEYBINDINGS: dict[ViewerAction, KeyId | list[KeyId]] = {
    # Application
    "quit": ["escape", "ctrl+c"],
    "reload": "ctrl+r",
    # Results list
    "scrollUp": ["up", "ctrl+p"],
    "scrollDown": ["down", "ctrl+n"],
    "pageUp": "pageUp",
    "pageDown": "pageDown",
    "scrollTop": "ctrl+home",
    "scrollBottom": "ctrl+end",
    # Query editing
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorWordLeft": ["alt+left", "ctrl+left", "alt+b"],
    "cursorWordRight": ["alt+right", "ctrl+right", "alt+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
}


class KeybindingsManager:
    """Maps viewer actions to the keys that trigger them."""

    def __init__(self, config: ViewerKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[str, list[KeyId]] = {}
        config = config or {}

        # Start with defaults
        for action, keys in DEFAULT_VIEWER_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # Override with user config
        for action, keys in config.items():
            if action not in VIEWER_ACTIONS:
                logger.warning("Ignoring keybinding for unknown action %r", action)
                continue
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, data: str, action: ViewerAction) -> bool:
        """Check if input matches a specific action."""
        keys = self._action_to_keys.get(action)
        if not keys:
            return False
        return any(matches_key(data, key) for key in keys)


_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager

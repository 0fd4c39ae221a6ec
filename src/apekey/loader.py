"""Read the annotated source and hold the current keymap snapshot."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from apekey.builder import parse_keymap
from apekey.errors import SourceReadError
from apekey.model import Keybind, Keymap

logger = logging.getLogger(__name__)


def read_source(path: str | Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(str(path), e) from e


def load_keymap_sync(path: str | Path) -> Keymap:
    keymap = parse_keymap(read_source(path))
    logger.info(
        "parsing done, sections %d, keybinds %d",
        keymap.section_count(),
        keymap.keybind_count(),
    )
    return keymap


async def load_keymap(path: str | Path) -> Keymap:
    """Read and parse *path* in a worker thread."""
    return await asyncio.to_thread(load_keymap_sync, path)


class KeymapStore:
    """Owns the keymap snapshot that the viewer and searches read.

    A reload builds a complete new keymap first and swaps it in with one
    assignment, so a reader holding the previous snapshot is never affected.
    """

    def __init__(self, path: str | Path, keymap: Keymap | None = None) -> None:
        self.path = Path(path)
        if keymap is None:
            keymap = Keymap()
        self._snapshot = (keymap, keymap.keybinds())
        self._lock = asyncio.Lock()
        self.generation = 0

    @property
    def keymap(self) -> Keymap:
        return self._snapshot[0]

    @property
    def keybinds(self) -> list[Keybind]:
        return self._snapshot[1]

    def swap(self, keymap: Keymap) -> None:
        self._snapshot = (keymap, keymap.keybinds())
        self.generation += 1

    def load(self) -> Keymap:
        self.swap(load_keymap_sync(self.path))
        return self.keymap

    async def reload(self) -> Keymap:
        """Rebuild from disk off the event loop; concurrent calls coalesce."""
        if self._lock.locked():
            async with self._lock:
                return self.keymap
        async with self._lock:
            keymap = await load_keymap(self.path)
            self.swap(keymap)
            return keymap

"""Exceptions raised at apekey's I/O edges.

Parsing and searching never raise on malformed input; only reading the
annotated source and loading the user settings can fail.
"""

from __future__ import annotations


class ApekeyError(Exception):
    """Base class for every error apekey reports to the user."""


class SourceReadError(ApekeyError):
    def __init__(self, path: str, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(
            f"An error occurred while trying to read the config file {path}: {reason}"
        )


class ConfigError(ApekeyError):
    """The settings file is unreadable or holds invalid values."""

"""User settings, read from ``$XDG_CONFIG_HOME/apekey/apekey.toml``.

Every key is optional::

    config_path = "~/.xmonad/xmonad.hs"
    theme = "dark"

    [colors]
    keybind = "#C5656B"

    [keybindings]
    quit = ["escape", "ctrl+c"]
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apekey.errors import ConfigError

XMONAD_HS_PATH = "~/.xmonad/xmonad.hs"
CONFIG_DIR_NAME = "apekey"
CONFIG_FILE_NAME = "apekey.toml"

Rgb = tuple[int, int, int]

# default colours
BG_COLOR: Rgb = (0x2A, 0x21, 0x1C)
FG_COLOR: Rgb = (0xBD, 0xAE, 0x9D)
KEYBIND_COLOR: Rgb = (0xC5, 0x65, 0x6B)
SCROLLBAR_COLOR: Rgb = (0x7F, 0x4A, 0x2B)
ERROR_COLOR: Rgb = (0xE5, 0x39, 0x35)


def parse_hex_color(value: str) -> Rgb:
    """Parse ``#RRGGBB`` or ``#RRGGBBAA`` (the alpha byte is ignored)."""
    hex_value = value[1:] if value.startswith("#") else value
    if len(hex_value) < 6 or len(hex_value) > 8:
        raise ConfigError(f"Failed to parse color value {value}")
    try:
        r = int(hex_value[0:2], 16)
        g = int(hex_value[2:4], 16)
        b = int(hex_value[4:6], 16)
        if len(hex_value) > 6:
            int(hex_value[6:], 16)
    except ValueError as e:
        raise ConfigError(f"Failed to parse color value {value}") from e
    return (r, g, b)


class Colors(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fg: Rgb | None = FG_COLOR
    bg: Rgb | None = BG_COLOR
    title: Rgb | None = None
    section: Rgb | None = None
    keybind: Rgb | None = KEYBIND_COLOR
    comment: Rgb | None = None
    scrollbar: Rgb | None = SCROLLBAR_COLOR
    error: Rgb | None = ERROR_COLOR

    @field_validator("*", mode="before")
    @classmethod
    def _hex_to_rgb(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return parse_hex_color(value)
            except ConfigError as e:
                # pydantic only wraps ValueError into a ValidationError
                raise ValueError(str(e)) from e
        return value


class UserConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    config_path: str = XMONAD_HS_PATH
    theme: Literal["dark", "light"] = "dark"
    colors: Colors = Field(default_factory=Colors)
    keybindings: dict[str, str | list[str]] = Field(default_factory=dict)

    @property
    def source_path(self) -> Path:
        return Path(os.path.expandvars(self.config_path)).expanduser()


def default_config_file() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def parse_config(text: str) -> UserConfig:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse user config file: {e}") from e
    try:
        return UserConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid user config: {e}") from e


def load_config(path: Path | None = None) -> UserConfig:
    """Load the settings file; a missing file gives the defaults."""
    config_file = path or default_config_file()
    if not config_file.exists():
        return UserConfig()
    try:
        text = config_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read user config file {config_file}: {e}") from e
    return parse_config(text)

"""CLI entry point for apekey. Uses Click for argument parsing."""

from __future__ import annotations

import asyncio
import json
import logging
import logging.handlers
import sys
from pathlib import Path

import click

from apekey import __version__
from apekey.config import UserConfig, load_config
from apekey.errors import ApekeyError, ConfigError
from apekey.fuzzy import search
from apekey.loader import KeymapStore
from apekey.model import Keymap, MatchResult

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVELS = ["debug", "info", "warning", "error"]

_MAX_KEYS_COLUMN = 24


def configure_logging(
    level: str,
    log_file: Path | None = None,
    buffered: bool = False,
) -> logging.handlers.MemoryHandler | None:
    """Set up root logging.

    With *buffered* (and no log file) records are held in memory and only
    written to stderr when the returned handler is closed.
    """
    numeric_level = getattr(logging, level.upper())

    if log_file is not None:
        logging.basicConfig(
            level=numeric_level, format=LOG_FORMAT, filename=log_file, force=True
        )
        return None

    if not buffered:
        logging.basicConfig(
            level=numeric_level, format=LOG_FORMAT, stream=sys.stderr, force=True
        )
        return None

    target = logging.StreamHandler(sys.stderr)
    target.setFormatter(logging.Formatter(LOG_FORMAT))
    memory = logging.handlers.MemoryHandler(
        capacity=10_000, flushLevel=logging.CRITICAL + 1, target=target
    )
    logging.basicConfig(level=numeric_level, handlers=[memory], force=True)
    return memory


def _load_settings(config_file: Path | None) -> UserConfig:
    try:
        return load_config(config_file)
    except ConfigError as e:
        logger.warning("%s; using default settings", e)
        return UserConfig()


# ---------------------------------------------------------------------------
# Non-interactive output
# ---------------------------------------------------------------------------


def _keys_column(keymap: Keymap) -> int:
    widest = max((len(k.keys) for k in keymap.keybinds()), default=0)
    return min(widest, _MAX_KEYS_COLUMN)


def format_keymap(keymap: Keymap) -> str:
    """Plain-text listing grouped by section."""
    width = _keys_column(keymap)
    lines = [keymap.display_title]
    for section in keymap.sections:
        lines.append("")
        if section.name is not None:
            lines.append(section.name)
        for keybind in section.keybinds:
            lines.append(f"  {keybind.keys.ljust(width)}  {keybind.label}".rstrip())
    return "\n".join(lines)


def format_results(results: list[MatchResult], keymap: Keymap) -> str:
    width = _keys_column(keymap)
    lines = []
    for result in results:
        keybind = result.keybind
        line = f"{keybind.keys.ljust(width)}  {keybind.label}".rstrip()
        if keybind.section:
            line += f"  [{keybind.section}]"
        lines.append(line)
    return "\n".join(lines)


def results_to_json(results: list[MatchResult]) -> list[dict]:
    return [
        {
            "keys": r.keybind.keys,
            "description": r.keybind.description,
            "action": r.keybind.action,
            "section": r.keybind.section,
            "score": r.score,
        }
        for r in results
    ]


def _print_mode(store: KeymapStore, query: str | None, as_json: bool) -> None:
    keymap = store.keymap
    if not keymap.has_region and not as_json:
        click.echo(f"No annotated keymap found in {store.path}", err=True)
        return

    if query is None:
        if as_json:
            click.echo(json.dumps(keymap.to_dict(), indent=2))
        else:
            click.echo(format_keymap(keymap))
        return

    results = search(query, store.keybinds)
    if as_json:
        click.echo(json.dumps(results_to_json(results), indent=2))
    elif results:
        click.echo(format_results(results, keymap))
    else:
        click.echo("No matching keybinds", err=True)


# ---------------------------------------------------------------------------
# Interactive viewer
# ---------------------------------------------------------------------------


def _interactive(store: KeymapStore, settings: UserConfig) -> None:
    from apekey.app import KeymapApp
    from apekey.theme import Theme
    from apekey.tui.keybindings import KeybindingsManager, set_keybindings
    from apekey.tui.terminal import ProcessTerminal

    set_keybindings(KeybindingsManager(settings.keybindings))
    theme = Theme.from_colors(settings.colors, settings.theme)
    app = KeymapApp(store, ProcessTerminal(), theme)
    asyncio.run(app.run())


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@click.command()
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.option(
    "--config",
    "config_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Settings file (default: $XDG_CONFIG_HOME/apekey/apekey.toml)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="warning",
    envvar="APEKEY_LOG",
    show_default=True,
    help="Logging level (also read from APEKEY_LOG)",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write log records to this file",
)
@click.option("--print", "print_only", is_flag=True, help="Print the keymap and exit")
@click.option("--query", default=None, help="Print matches for QUERY and exit")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON in print mode")
@click.version_option(__version__, prog_name="apekey")
def main(path, config_file, log_level, log_file, print_only, query, as_json):
    """Show the annotated keybindings of an xmonad config.

    PATH defaults to the settings' config_path, then ~/.xmonad/xmonad.hs.
    """
    interactive = (
        not print_only
        and query is None
        and not as_json
        and sys.stdin.isatty()
        and sys.stdout.isatty()
    )
    memory_handler = configure_logging(log_level, log_file, buffered=interactive)

    try:
        settings = _load_settings(config_file)
        source = path if path is not None else settings.source_path
        logger.debug("reading keymap from %s", source)

        store = KeymapStore(source)
        try:
            store.load()
        except ApekeyError as e:
            click.echo(str(e), err=True)
            sys.exit(1)

        if interactive:
            _interactive(store, settings)
        else:
            _print_mode(store, query, as_json)
    finally:
        if memory_handler is not None:
            memory_handler.close()
            logging.getLogger().removeHandler(memory_handler)


if __name__ == "__main__":
    main()

"""Tests for the apekey command line (print mode and option handling)."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from apekey import __version__
from apekey.cli import configure_logging, format_keymap, main
from apekey.model import Keybind, Keymap, Section

SOURCE = """\
main = xmonad def
-- # Test keys
-- ## Windows
-- Kill window
  , ("M-x", kill)
-- Sink window
  , ("M-t", withFocused $ windows . W.sink)
-- ## System
  , ("M-S-q", io exitSuccess)
-- #
"""


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "xmonad.hs"
    path.write_text(SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def no_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("APEKEY_LOG", raising=False)
    return config_home


def _invoke(*args: str) -> tuple[int, str]:
    result = CliRunner().invoke(main, list(args))
    return result.exit_code, result.output


# ---------------------------------------------------------------------------
# Print mode
# ---------------------------------------------------------------------------


class TestPrint:
    def test_grouped_listing(self, source_file: Path, no_settings: Path) -> None:
        code, output = _invoke(str(source_file), "--print")
        assert code == 0
        assert output.splitlines() == [
            "Test keys",
            "",
            "Windows",
            "  M-x    Kill window",
            "  M-t    Sink window",
            "",
            "System",
            "  M-S-q  io exitSuccess",
        ]

    def test_not_a_tty_prints(self, source_file: Path, no_settings: Path) -> None:
        code, output = _invoke(str(source_file))
        assert code == 0
        assert "Kill window" in output

    def test_no_region(self, tmp_path: Path, no_settings: Path) -> None:
        path = tmp_path / "plain.hs"
        path.write_text("main = xmonad def\n")
        code, output = _invoke(str(path), "--print")
        assert code == 0
        assert f"No annotated keymap found in {path}" in output

    def test_missing_file(self, tmp_path: Path, no_settings: Path) -> None:
        path = tmp_path / "missing.hs"
        code, output = _invoke(str(path), "--print")
        assert code == 1
        assert f"An error occurred while trying to read the config file {path}" in output

    def test_path_from_settings(self, source_file: Path, no_settings: Path) -> None:
        settings = no_settings / "apekey" / "apekey.toml"
        settings.parent.mkdir(parents=True)
        settings.write_text(f'config_path = "{source_file.as_posix()}"\n')
        code, output = _invoke("--print")
        assert code == 0
        assert output.startswith("Test keys")

    def test_bad_settings_fall_back_to_defaults(
        self, source_file: Path, tmp_path: Path, no_settings: Path
    ) -> None:
        settings = tmp_path / "bad.toml"
        settings.write_text('[colors]\nkeybind = "#zz"\n')
        code, output = _invoke(str(source_file), "--config", str(settings), "--print")
        assert code == 0
        assert "using default settings" in output
        assert "Kill window" in output


# ---------------------------------------------------------------------------
# Query and JSON
# ---------------------------------------------------------------------------


class TestQuery:
    def test_ranked_matches(self, source_file: Path, no_settings: Path) -> None:
        code, output = _invoke(str(source_file), "--query", "sink")
        assert code == 0
        assert output.splitlines() == ["M-t    Sink window  [Windows]"]

    def test_no_match(self, source_file: Path, no_settings: Path) -> None:
        code, output = _invoke(str(source_file), "--query", "zzz")
        assert code == 0
        assert "No matching keybinds" in output

    def test_json_results(self, source_file: Path, no_settings: Path) -> None:
        code, output = _invoke(str(source_file), "--query", "kill", "--json")
        assert code == 0
        data = json.loads(output)
        assert [r["keys"] for r in data] == ["M-x"]
        assert data[0]["section"] == "Windows"
        assert data[0]["score"] > 0

    def test_json_keymap(self, source_file: Path, no_settings: Path) -> None:
        code, output = _invoke(str(source_file), "--json")
        assert code == 0
        data = json.loads(output)
        assert data["title"] == "Test keys"
        assert [s["name"] for s in data["sections"]] == ["Windows", "System"]
        assert data["sections"][1]["keybinds"][0]["action"] == "io exitSuccess"


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TestOptions:
    def test_version(self) -> None:
        code, output = _invoke("--version")
        assert code == 0
        assert __version__ in output

    def test_log_level_from_environment(
        self, source_file: Path, no_settings: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("APEKEY_LOG", "debug")
        code, output = _invoke(str(source_file), "--print")
        assert code == 0
        assert "[DEBUG] apekey.cli: reading keymap from" in output

    def test_log_file(self, source_file: Path, tmp_path: Path, no_settings: Path) -> None:
        log_file = tmp_path / "apekey.log"
        code, output = _invoke(
            str(source_file), "--print", "--log-level", "info", "--log-file", str(log_file)
        )
        assert code == 0
        assert "[INFO]" not in output
        assert "parsing done, sections 2, keybinds 3" in log_file.read_text()


class TestConfigureLogging:
    def test_buffered_records_wait_for_close(self, capsys: pytest.CaptureFixture[str]) -> None:
        handler = configure_logging("info", buffered=True)
        assert handler is not None
        logging.getLogger("apekey.test").info("held back")
        assert "held back" not in capsys.readouterr().err
        handler.close()
        assert "held back" in capsys.readouterr().err


class TestFormatKeymap:
    def test_default_title_and_unnamed_section(self) -> None:
        keymap = Keymap(
            sections=(Section(keybinds=(Keybind(keys="M-x", description="Kill"),)),),
            has_region=True,
        )
        assert format_keymap(keymap) == "Key bindings\n\n  M-x  Kill"

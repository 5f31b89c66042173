"""Tests for loading theme files from disk."""

import logging
from pathlib import Path

import pytest

from themeweave import ThemeConfig, load
from themeweave.errors import CyclicVariableError, ThemeError, ThemeFileError, UnexpectedTokenError
from themeweave.loader import DEFAULT_THEME_PATH, default_stylesheet, read_stylesheet
from themeweave.model import Color, Distance, Rect

FIXTURES = Path(__file__).parent.parent / "fixtures"
BLACK = Color.from_hex("#000000")


# ---------------------------------------------------------------------------
# Single files
# ---------------------------------------------------------------------------


class TestReadStylesheet:
    def test_reads_fixture(self):
        sheet = read_stylesheet(FIXTURES / "base.rasi")
        assert sheet.source == str(FIXTURES / "base.rasi")
        assert len(sheet.rules) == 5

    def test_missing_file(self, tmp_path: Path):
        missing = tmp_path / "nope.rasi"
        with pytest.raises(ThemeFileError) as exc_info:
            read_stylesheet(missing)
        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_invalid_utf8(self, tmp_path: Path):
        theme = tmp_path / "latin1.rasi"
        theme.write_bytes(b"\xff\xfe window { }")
        with pytest.raises(ThemeFileError) as exc_info:
            read_stylesheet(theme)
        assert exc_info.value.path == str(theme)
        assert isinstance(exc_info.value.cause, UnicodeDecodeError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert "Cannot read theme file" in str(exc_info.value)

    def test_parse_error_carries_path(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            read_stylesheet(FIXTURES / "broken.rasi")
        assert exc_info.value.source == str(FIXTURES / "broken.rasi")
        assert str(exc_info.value).startswith(str(FIXTURES / "broken.rasi") + ":2:")


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


class TestLoad:
    def test_base_only(self):
        tree = load([FIXTURES / "base.rasi"])
        assert tree.get_color("button", "selected", "background-color", BLACK) == Color.from_hex("#0000ff")
        assert tree.get_rect("button", None, "padding", Rect.uniform(Distance.px(0))) == Rect.uniform(Distance.px(4))

    def test_override_wins_ties(self):
        tree = load([FIXTURES / "base.rasi", FIXTURES / "override.rasi"])
        assert tree.get_distance("button", None, "border-width", Distance.px(0)) == Distance.px(2)

    def test_override_variable_reaches_base_rules(self):
        tree = load([FIXTURES / "base.rasi", FIXTURES / "override.rasi"])
        assert tree.get_color("label", None, "background-color", BLACK) == Color.from_hex("#222222")

    def test_base_instance_rule_survives_override(self):
        tree = load([FIXTURES / "base.rasi", FIXTURES / "override.rasi"])
        color = tree.get_color("button", None, "text-color", BLACK, instance_name="ok")
        assert color == Color.from_hex("#00ff00")

    def test_children(self):
        tree = load([FIXTURES / "base.rasi"])
        assert tree.get_children("mainbox") == ["inputbar", "listview"]

    def test_cyclic_variables(self):
        with pytest.raises(CyclicVariableError) as exc_info:
            load([FIXTURES / "cyclic.rasi"])
        assert exc_info.value.source == str(FIXTURES / "cyclic.rasi")

    def test_invalid_utf8_is_a_theme_error(self, tmp_path: Path):
        theme = tmp_path / "bad.rasi"
        theme.write_bytes(b"\xff\xfe")
        with pytest.raises(ThemeError):
            load([theme])

    def test_no_paths(self):
        with pytest.raises(ValueError):
            load([])

    def test_logs_at_debug(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.DEBUG, logger="themeweave"):
            load([FIXTURES / "base.rasi"])
        assert any("Loaded theme" in r.message for r in caplog.records)


# ---------------------------------------------------------------------------
# Built-in defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_default_theme_parses(self):
        sheet = default_stylesheet()
        assert sheet.source == str(DEFAULT_THEME_PATH)
        assert sheet.rules

    def test_defaults_alone(self):
        tree = load([], include_defaults=True)
        assert tree.get_children("mainbox") == ["inputbar", "listview"]
        assert tree.get_color("textbox", "focused", "border-color", BLACK) == Color.from_hex("#007acc")

    def test_defaults_from_config(self):
        tree = load([FIXTURES / "override.rasi"], config=ThemeConfig(include_defaults=True))
        # override.rasi redefines @bg, which the default theme does not use
        assert tree.get_color("window", None, "background-color", BLACK) == Color.from_hex("#1e1e1e")
        assert tree.get_distance("button", None, "border-width", Distance.px(0)) == Distance.px(2)

    def test_user_theme_overrides_defaults(self, tmp_path: Path):
        theme = tmp_path / "user.rasi"
        theme.write_text("@accent: #ff0000;\n")
        tree = load([theme], include_defaults=True)
        assert tree.get_color("element", "selected", "background-color", BLACK) == Color.from_hex("#ff0000")

    def test_explicit_flag_beats_config(self):
        with pytest.raises(ValueError):
            load([], config=ThemeConfig(include_defaults=True), include_defaults=False)

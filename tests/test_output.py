"""Tests for the output system.

Covers format resolution, NO_COLOR handling, stdout/stderr discipline,
quiet and verbose modes, the data formats, and the module-level helpers
that library code uses for diagnostics.
"""

from __future__ import annotations

import json

import pytest

from storefront import output as output_module
from storefront.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("storefront.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("storefront.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


# ------------------------------------------------------------------ #
# Format resolution and colour
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_is_plain_without_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_is_rich_on_tty(self, tty):
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_is_plain_on_tty_with_no_color(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(no_color=True).print_data("payload")
        captured = capfd.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        getattr(OutputManager(no_color=True), method)("message")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "message" in captured.err

    def test_prefixes_without_color(self, capfd, non_tty):
        out = OutputManager(no_color=True, verbose=True)
        out.warning("w")
        out.error("e")
        out.debug("d")
        assert capfd.readouterr().err.splitlines() == ["Warning: w", "Error: e", "[debug] d"]

    def test_markup_in_messages_is_not_interpreted(self, capfd, tty):
        OutputManager(verbose=True).debug("Cache hit: GET /api/products?tags=[bold]x[/bold]")
        assert "[bold]x[/bold]" in capfd.readouterr().err


class TestQuietVerbose:
    def test_quiet_suppresses_info_and_success(self, capfd, non_tty):
        out = OutputManager(no_color=True, quiet=True)
        out.info("i")
        out.success("s")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warning_and_error(self, capfd, non_tty):
        out = OutputManager(no_color=True, quiet=True)
        out.warning("w")
        out.error("e")
        err = capfd.readouterr().err
        assert "w" in err and "e" in err

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("hidden")
        assert capfd.readouterr().err == ""

    def test_verbose_property(self, non_tty):
        assert OutputManager(verbose=True).is_verbose
        assert not OutputManager().is_verbose


# ------------------------------------------------------------------ #
# Data formats
# ------------------------------------------------------------------ #


class TestJsonFormat:
    def test_dict(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"message": "Resource not found"})
        assert json.loads(capfd.readouterr().out) == {"message": "Resource not found"}

    def test_json_string_is_reindented(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response('{"a":1}')
        assert capfd.readouterr().out == '{\n  "a": 1\n}\n'

    def test_non_json_string_printed_raw(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response("<html></html>")
        assert capfd.readouterr().out == "<html></html>\n"

    def test_unicode_not_escaped(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"message": "Доступ запрещён"})
        assert "Доступ запрещён" in capfd.readouterr().out


class TestPlainFormat:
    def test_dict_as_key_value(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_response({"status": 404, "type": "NotFoundError"})
        assert capfd.readouterr().out.splitlines() == ["status\t404", "type\tNotFoundError"]

    def test_list_of_dicts_as_rows(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_response(
            [{"sku": "PUMP-1", "price": 100}, {"sku": "VALVE-2", "price": 20}]
        )
        assert capfd.readouterr().out.splitlines() == ["PUMP-1\t100", "VALVE-2\t20"]


class TestRichFormat:
    def test_dict_produces_output(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH).format_response({"sku": "PUMP-1"})
        assert "PUMP-1" in capfd.readouterr().out


class TestPrintTable:
    def test_json_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(["key", "value"], [["size", "3"]])
        assert json.loads(capfd.readouterr().out) == [{"key": "size", "value": "3"}]

    def test_plain_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).print_table(["key", "value"], [["hits", "7"]])
        assert capfd.readouterr().out == "key\tvalue\nhits\t7\n"

    def test_rich_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH).print_table(
            ["key", "value"], [["backend", "disk"]], title="Response cache"
        )
        out = capfd.readouterr().out
        assert "Response cache" in out
        assert "disk" in out


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_default_is_quiet_plain(self, non_tty):
        out = get_output()
        assert out.is_quiet
        assert out.format == OutputFormat.PLAIN
        assert get_output() is out

    def test_set_and_reset(self, non_tty):
        custom = OutputManager(format=OutputFormat.JSON)
        set_output(custom)
        assert get_output() is custom
        reset_output()
        assert get_output() is not custom

    def test_library_debug_silent_by_default(self, capfd, non_tty):
        output_module.debug("Cache miss: GET /api/products")
        assert capfd.readouterr().err == ""

    def test_helpers_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True, verbose=True))
        output_module.debug("trace")
        output_module.format_response({"ok": True})
        captured = capfd.readouterr()
        assert "[debug] trace" in captured.err
        assert json.loads(captured.out) == {"ok": True}

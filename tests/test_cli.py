import argparse

import pytest

from main import apply_overrides, build_parser
from shortener.config import Settings
from shortener.printer import OutputPrinter


def parse(*argv: str) -> argparse.Namespace:
    return build_parser().parse_args(list(argv))


class TestParser:
    """Tests for CLI argument parsing."""

    def test_defaults(self) -> None:
        args: argparse.Namespace = parse()
        assert args.host == "127.0.0.1"
        assert args.port == 3000
        assert args.ttl is None

    def test_flags(self) -> None:
        args: argparse.Namespace = parse("--port", "8080", "--ttl", "60", "--purge-minutes", "2", "-q")
        assert args.port == 8080
        assert args.ttl == 60
        assert args.purge_minutes == 2
        assert args.quiet


class TestApplyOverrides:
    """Tests for folding flags over environment settings."""

    def test_untouched_without_flags(self) -> None:
        settings: Settings = Settings(default_ttl_seconds=99)
        assert apply_overrides(settings, parse()) == settings

    def test_flags_win(self) -> None:
        settings: Settings = apply_overrides(
            Settings(), parse("--ttl", "60", "--public-url", "https://s.test/", "--upload-dir", "/tmp/u")
        )
        assert settings.default_ttl_seconds == 60
        assert settings.public_base_url == "https://s.test"
        assert settings.upload_dir == "/tmp/u"

    def test_non_positive_ttl_rejected(self) -> None:
        with pytest.raises(ValueError):
            apply_overrides(Settings(), parse("--ttl", "0"))


class TestOutputPrinter:
    """Tests for CLI output formatting."""

    def test_quiet_suppresses_success(self, capsys) -> None:
        OutputPrinter(quiet=True).success("Listening", {"Port": "3000"})
        assert capsys.readouterr().out == ""

    def test_errors_go_to_stderr_even_when_quiet(self, capsys) -> None:
        OutputPrinter(quiet=True, no_color=True).error("bad flag", hint="fix it")
        err: str = capsys.readouterr().err
        assert "bad flag" in err
        assert "fix it" in err

    def test_no_color_has_no_escape_codes(self, capsys) -> None:
        OutputPrinter(no_color=True).success("Listening", {"Port": "3000"})
        out: str = capsys.readouterr().out
        assert "\033[" not in out
        assert "Port" in out and "3000" in out

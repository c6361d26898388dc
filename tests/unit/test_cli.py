"""Tests for the __main__ entry point."""

import argparse
import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from treepaint.logger import remove_stderr_sink


@pytest.fixture(autouse=True)
def _reset_stderr_sink() -> Iterator[None]:
    """Drop the stderr sink main() installs so it does not outlive capsys."""
    yield
    remove_stderr_sink()


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate settings in a temporary config directory."""
    directory = tmp_path / "config"
    monkeypatch.setenv("TREEPAINT_CONFIG_DIR", str(directory))
    return directory


@pytest.fixture
def source_files(tmp_path: Path) -> tuple[Path, Path]:
    """A source file and its captures."""
    source = tmp_path / "example.rs"
    source.write_text('fn main() { "<hi>" }\n', encoding="utf-8")
    captures = tmp_path / "captures.json"
    captures.write_text(
        json.dumps([[0, 2, "keyword", 0, 0], {"start": 12, "end": 18, "scope": "string"}, [3, 7, "function"]]),
        encoding="utf-8",
    )
    return source, captures


class TestGetVersion:
    """Tests for the get_version() function."""

    def test_get_version_returns_string(self) -> None:
        from treepaint.__main__ import get_version

        version = get_version()
        assert isinstance(version, str)
        assert len(version) > 0

    def test_get_version_handles_missing_package(self) -> None:
        from importlib.metadata import PackageNotFoundError

        with patch("treepaint.__main__.version", side_effect=PackageNotFoundError("treepaint")):
            from treepaint.__main__ import get_version

            assert get_version() == "unknown"


class TestParseArgs:
    """Tests for the parse_args() function."""

    def test_parse_args_returns_namespace(self) -> None:
        from treepaint.__main__ import parse_args

        args = parse_args(["--source", "a.rs", "--captures", "a.json"])
        assert isinstance(args, argparse.Namespace)
        assert args.source == Path("a.rs")

    def test_source_required_for_page(self) -> None:
        from treepaint.__main__ import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--theme", "onedark"])

    def test_css_only_needs_no_source(self) -> None:
        from treepaint.__main__ import parse_args

        assert parse_args(["--css-only"]).css_only is True


class TestMain:
    """Tests for main()."""

    def test_renders_page(
        self, config_dir: Path, source_files: tuple[Path, Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        from treepaint.__main__ import main, parse_args

        source, captures = source_files
        status = main(parse_args(["--source", str(source), "--captures", str(captures), "--title", "main.rs"]))
        out = capsys.readouterr().out
        assert status == 0
        assert "<title>main.rs</title>" in out
        assert '<span class="tsc-' in out
        assert "&quot;&lt;hi&gt;&quot;" in out

    def test_writes_output_file(self, config_dir: Path, source_files: tuple[Path, Path], tmp_path: Path) -> None:
        from treepaint.__main__ import main, parse_args

        source, captures = source_files
        output = tmp_path / "out.html"
        main(parse_args(["--source", str(source), "--captures", str(captures), "--output", str(output)]))
        assert output.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_css_only(self, config_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from treepaint.__main__ import main, parse_args

        assert main(parse_args(["--css-only", "--theme", "base16"])) == 0
        out = capsys.readouterr().out
        assert out.startswith(":root")
        assert "<html" not in out

    def test_list_themes(self, config_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from treepaint.__main__ import main, parse_args

        main(parse_args(["--list-themes"]))
        out = capsys.readouterr().out
        assert "onedark\tOne Dark" in out

    def test_show_scopes(self, config_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from treepaint.__main__ import main, parse_args

        main(parse_args(["--show-scopes", "--theme", "onedark"]))
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("attribute\ttsc-")
        assert len(lines) > 20

    def test_settings_theme_used_by_default(
        self, config_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from treepaint.__main__ import main, parse_args
        from treepaint.settings import Settings, save_settings

        save_settings(Settings(theme="base16", class_prefix="hl-"))
        main(parse_args(["--css-only"]))
        out = capsys.readouterr().out
        assert ".hl-0 {" in out
        assert "#181818" in out

    def test_invalid_captures_file(self, config_dir: Path, tmp_path: Path) -> None:
        from treepaint.__main__ import main, parse_args
        from treepaint.highlight.errors import InputError

        source = tmp_path / "a.txt"
        source.write_text("abc", encoding="utf-8")
        captures = tmp_path / "captures.json"
        captures.write_text('{"start": 0}', encoding="utf-8")
        with pytest.raises(InputError):
            main(parse_args(["--source", str(source), "--captures", str(captures)]))


class TestRunFunction:
    """Tests for the run() function."""

    def test_run_exits_with_main_status(self) -> None:
        with (
            patch("treepaint.__main__.main", return_value=0) as mock_main,
            patch("treepaint.__main__.parse_args", return_value=MagicMock()),
        ):
            from treepaint.__main__ import run

            with pytest.raises(SystemExit) as exc_info:
                run()
            mock_main.assert_called_once()
            assert exc_info.value.code == 0

    def test_run_reports_highlight_errors(self, capsys: pytest.CaptureFixture[str]) -> None:
        from treepaint.highlight.errors import ThemeError

        with (
            patch("treepaint.__main__.main", side_effect=ThemeError("Unknown theme 'nope'")),
            patch("treepaint.__main__.parse_args", return_value=MagicMock()),
        ):
            from treepaint.__main__ import run

            with pytest.raises(SystemExit) as exc_info:
                run()
            assert exc_info.value.code == 1
            assert "treepaint: Unknown theme 'nope'" in capsys.readouterr().err

    def test_run_handles_unexpected_exception(self) -> None:
        with (
            patch("treepaint.__main__.main", side_effect=RuntimeError("Test error")),
            patch("treepaint.__main__.parse_args", return_value=MagicMock()),
            patch("traceback.print_exc") as mock_print_exc,
        ):
            from treepaint.__main__ import run

            with pytest.raises(SystemExit) as exc_info:
                run()
            assert exc_info.value.code == 1
            mock_print_exc.assert_called_once()

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from globcat import __version__, cli
from globcat.config import OutputDestination

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_parse_args_defaults() -> None:
    settings = cli.parse_args([])

    assert settings.patterns == []
    assert settings.root == Path(".")
    assert settings.output is OutputDestination.CLIPBOARD
    assert settings.max_depth is None
    assert settings.verbose is False


@pytest.mark.unit
def test_parse_args_parses_patterns_and_options() -> None:
    depth = 3
    settings = cli.parse_args(
        ["*.md", "!draft_*", "--max-depth", str(depth), "--root", "docs", "--output", "stdout", "-v", "--hidden"],
    )

    assert settings.patterns == ["*.md", "!draft_*"]
    assert settings.max_depth == depth
    assert settings.root == Path("docs")
    assert settings.output is OutputDestination.STDOUT
    assert settings.verbose is True
    assert settings.hidden is True
    assert settings.no_ignore is False


@pytest.mark.unit
@pytest.mark.parametrize("argv", [["--max-depth", "-1"], ["--max-depth", "two"], ["--output", "printer"]])
def test_parse_args_rejects_invalid_values(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(argv)

    assert exc_info.value.code == 2  # noqa: PLR2004


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
def test_main_writes_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "a.txt").write_text("hello", encoding="utf-8")
    (tmp_path / "b.md").write_text("skip", encoding="utf-8")

    exit_code = cli.main(["*.txt", "--root", str(tmp_path), "--output", "stdout"])

    assert exit_code == 0
    assert capsys.readouterr().out == "[file name]: a.txt\n[file content begin]\nhello\n[file content end]\n\n"


@pytest.mark.unit
def test_main_invalid_pattern_fails_before_walking(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    mocker: MockerFixture,
) -> None:
    walk_mock = mocker.patch.object(cli, "walk_tree")

    exit_code = cli.main(["src/[abc", "--root", str(tmp_path), "--output", "stdout"])

    assert exit_code == 1
    walk_mock.assert_not_called()
    captured = capsys.readouterr()
    assert not captured.out
    assert "Error:" in captured.err
    assert "src/[abc" in captured.err


@pytest.mark.unit
def test_main_missing_root_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["--root", str(tmp_path / "nope"), "--output", "stdout"])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert not captured.out
    assert "nope" in captured.err


@pytest.mark.unit
def test_main_verbose_traces_to_log(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
    mocker: MockerFixture,
) -> None:
    (tmp_path / "a.txt").write_text("hello", encoding="utf-8")
    mocker.patch.object(cli, "dispatch")

    exit_code = cli.main(["--root", str(tmp_path), "--verbose"])

    assert exit_code == 0
    assert "Searching in root" in caplog.text
    assert "Matched file: a.txt" in caplog.text
    assert "Total matching files: 1" in caplog.text
    assert "Reading file: a.txt" in caplog.text

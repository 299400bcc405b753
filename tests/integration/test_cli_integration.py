from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from globcat import cli, output_dispatch


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.mark.integration
def test_main_copies_selection_to_clipboard(
    tmp_path: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path / "a.md", "# A")
    _write(tmp_path / "draft_b.md", "# B")
    _write(tmp_path / "c.txt", "C")
    copy_mock = mocker.patch.object(output_dispatch.pyperclip, "copy")

    exit_code = cli.main(["*.md", "!draft_*", "--root", str(tmp_path)])

    assert exit_code == 0
    copy_mock.assert_called_once_with("[file name]: a.md\n[file content begin]\n# A\n[file content end]\n")
    out = capsys.readouterr().out
    assert "a.md" in out
    assert "draft_b.md" not in out
    assert "Copied" in out


@pytest.mark.integration
def test_main_clipboard_failure_exits_non_zero(
    tmp_path: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path / "a.md", "# A")
    mocker.patch.object(
        output_dispatch.pyperclip,
        "copy",
        side_effect=output_dispatch.pyperclip.PyperclipException("no clipboard"),
    )

    exit_code = cli.main(["--root", str(tmp_path)])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert "Files matched" in captured.out
    assert "Error: Failed to set clipboard text: no clipboard" in captured.err


@pytest.mark.integration
def test_main_without_patterns_selects_every_non_ignored_file_up_to_depth(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path / ".gitignore", "*.log\n")
    _write(tmp_path / "top.txt", "top")
    _write(tmp_path / "debug.log", "noise")
    _write(tmp_path / "one" / "mid.txt", "mid")
    _write(tmp_path / "one" / "two" / "low.txt", "low")

    exit_code = cli.main(["--root", str(tmp_path), "--output", "stdout", "--max-depth", "2"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "[file name]: one/mid.txt" in out
    assert "[file name]: top.txt" in out
    assert "low.txt" not in out
    assert "debug.log" not in out
    assert ".gitignore" not in out

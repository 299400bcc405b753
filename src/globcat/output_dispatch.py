from __future__ import annotations

from typing import TYPE_CHECKING

import pyperclip
from colorama import Fore, Style, colorama_text

from globcat.config import OutputDestination
from globcat.exceptions import ClipboardError
from globcat.file_discovery import display_path
from globcat.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence


def count_lines(text: str) -> int:
    """Count newline-separated lines, without an extra empty line after a trailing newline."""
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


def count_words(text: str) -> int:
    return len(text.split())


def build_summary_lines(files: Sequence[str], buffer: str) -> list[str]:
    """Build the human-readable summary printed before copying to the clipboard.

    Args:
        files (Sequence[str]): the selected files, in output order
        buffer (str): the output buffer about to be copied

    Returns:
        list[str]: the summary lines, with color codes
    """
    lines = [f"{Fore.BLUE}{Style.BRIGHT}Files matched{Style.RESET_ALL}"]
    if not files:
        lines.append(f"{Fore.RED}No files matched.{Style.RESET_ALL}")
    lines.extend(f"{Fore.RED}+{Style.RESET_ALL} {display_path(f)}" for f in files)

    def bold(text: str) -> str:
        return f"{Style.BRIGHT}{text}{Style.RESET_ALL}"

    lines.append("")
    lines.append(
        f"Copied {bold(f'{len(files)} files')} to clipboard totalling "
        f"{bold(f'{count_lines(buffer)} lines')}, "
        f"{bold(f'{count_words(buffer)} words')} and "
        f"{bold(f'{len(buffer)} characters')}.",
    )
    return lines


def print_summary(files: Sequence[str], buffer: str) -> None:
    """Print the summary to stdout; color codes are stripped when stdout is not a terminal."""
    with colorama_text():
        for line in build_summary_lines(files, buffer):
            print(line)


def copy_to_clipboard(buffer: str) -> None:
    """Place the buffer on the system clipboard.

    Args:
        buffer (str): the exact text to copy

    Raises:
        ClipboardError: if no clipboard mechanism is available or the copy fails.
    """
    try:
        pyperclip.copy(buffer)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(reason=str(e)) from e


def dispatch(
    buffer: str,
    files: Sequence[str],
    destination: OutputDestination,
) -> None:
    """Deliver the output buffer to its destination.

    The stdout destination prints the buffer followed by a newline. The clipboard
    destination prints a summary first, then copies the buffer; a clipboard failure
    is fatal, there is no fallback to stdout.

    Args:
        buffer (str): the aggregated output
        files (Sequence[str]): the selected files, used for the summary
        destination (OutputDestination): where to send the buffer

    Raises:
        ClipboardError: if the clipboard destination fails.
    """
    if destination == OutputDestination.STDOUT:
        print(buffer)
        return

    print_summary(files, buffer)
    copy_to_clipboard(buffer)
    logger.debug("Output copied to clipboard.")

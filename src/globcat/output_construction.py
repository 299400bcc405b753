from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING

from globcat.config import BLOCK_SEPARATOR, FILE_TEMPLATE
from globcat.file_discovery import display_path
from globcat.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def read_file_text(path: Path) -> str:
    """Read a file and decode it as UTF-8, replacing malformed bytes.

    Args:
        path (Path): the file to read

    Raises:
        OSError: if the file cannot be read.

    Returns:
        str: the decoded content
    """
    return path.read_bytes().decode("utf-8", errors="replace")


def render_file(rel: str, root: Path) -> str:
    """Render one selected file into a delimited block.

    A file that cannot be read is logged and rendered with empty content, so one bad
    file never aborts the whole aggregation.

    Args:
        rel (str): the file path relative to root; its printable form is the block label
        root (Path): the search root

    Returns:
        str: the file block, ending with a newline
    """
    logger.debug("Reading file: %s", rel)
    try:
        content = read_file_text(root / rel)
    except OSError as e:
        logger.warning("Error reading %s: %s", rel, e)
        content = ""
    return FILE_TEMPLATE.format(file_name=display_path(rel), file_content=content)


def aggregate(rel_paths: Sequence[str], root: Path, max_workers: int | None = None) -> str:
    """Render all files in parallel and join the blocks in input order.

    Args:
        rel_paths (Sequence[str]): the selected files, relative to root
        root (Path): the search root
        max_workers (int | None): size of the thread pool; defaults to the CPU count

    Returns:
        str: the blocks joined by a single newline
    """
    workers = max_workers or os.cpu_count() or 1
    with ThreadPoolExecutor(max_workers=workers) as pool:
        blocks = list(pool.map(partial(render_file, root=root), rel_paths))
    return BLOCK_SEPARATOR.join(blocks)

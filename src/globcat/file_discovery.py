from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec
from pydantic import BaseModel, ConfigDict, Field

from globcat.config import GIT_INFO_EXCLUDE, IGNORE_FILE_NAMES
from globcat.exceptions import TraversalError
from globcat.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from globcat.pattern_compilation import MatcherSet


class WalkEntry(BaseModel):
    """A filesystem entry discovered while walking the search root.

    Attributes:
        path: The root joined with the entry's relative components.
        depth: Number of directory levels below the root (the root itself is 0).
        is_dir: Whether the entry is a directory (symlinks are never reported as directories).
        is_symlink: Whether the entry is a symbolic link.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Entry path, prefixed by the search root")
    depth: int = Field(..., ge=0, description="Depth below the search root")
    is_dir: bool = Field(default=False, description="Entry is a real directory")
    is_symlink: bool = Field(default=False, description="Entry is a symbolic link")


class IgnoreRules:
    """Stack of gitignore-style rule files, each scoped to the directory holding it.

    Rules pushed later take precedence over earlier ones, so a child directory's
    `.gitignore` can re-include what a parent ignored.
    """

    def __init__(self, scopes: tuple[tuple[str, pathspec.PathSpec], ...] = ()) -> None:
        self._scopes = scopes

    @staticmethod
    def _read_spec(path: Path) -> pathspec.PathSpec | None:
        try:
            with path.open("r", encoding="utf-8", errors="replace") as fh:
                lines = fh.read().splitlines()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None
        except OSError as e:
            raise TraversalError(path=path, reason=str(e)) from e
        return pathspec.GitIgnoreSpec.from_lines(lines)

    @classmethod
    def for_root(cls, root: Path) -> IgnoreRules:
        """Load the repository-local exclude file, if the root has one."""
        spec = cls._read_spec(root / GIT_INFO_EXCLUDE)
        return cls((("", spec),) if spec is not None else ())

    def load(self, directory: Path, rel_dir: str) -> IgnoreRules:
        """Return a new rule stack extended with the ignore files found in `directory`.

        Args:
            directory (Path): the directory being entered
            rel_dir (str): its path relative to the search root ("" for the root)

        Returns:
            IgnoreRules: self if the directory holds no ignore file, else an extended stack
        """
        added: list[tuple[str, pathspec.PathSpec]] = []
        for name in IGNORE_FILE_NAMES:
            spec = self._read_spec(directory / name)
            if spec is not None:
                added.append((rel_dir, spec))
        if not added:
            return self
        return IgnoreRules(self._scopes + tuple(added))

    def is_ignored(self, rel: str, *, is_dir: bool) -> bool:
        """Decide whether an entry is ignored.

        Scopes are checked from highest precedence to lowest. Within one file the last
        matching pattern decides, and a negated pattern ('!') whitelists the entry.

        Args:
            rel (str): the entry path relative to the search root
            is_dir (bool): whether the entry is a directory

        Returns:
            bool: True if the entry is ignored
        """
        for base, spec in reversed(self._scopes):
            local = rel[len(base) + 1 :] if base else rel
            if is_dir:
                local += "/"
            decision: bool | None = None
            for pattern in spec.patterns:
                if pattern.include is not None and pattern.match_file(local) is not None:
                    decision = pattern.include
            if decision is not None:
                return decision
        return False


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def display_path(rel: str) -> str:
    """Return a printable form of a relative path.

    Bytes of the file name that are not valid UTF-8 are replaced with U+FFFD. The
    original string must still be used to open the file.
    """
    return os.fsencode(rel).decode("utf-8", errors="replace")


def is_regular_file(path: Path) -> bool:
    """Check if a file is regular, following symlinks.

    Args:
        path (Path): path to test.

    Returns:
        bool: True if the file is regular, False otherwise.
    """
    try:
        st = path.stat()
        return stat.S_ISREG(st.st_mode)
    except OSError:
        return False


def _scan_sorted(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise TraversalError(path=directory, reason=e.strerror or str(e)) from e


def walk_tree(
    root: Path,
    max_depth: int | None = None,
    *,
    hidden: bool = False,
    ignore_files: bool = True,
) -> Iterator[WalkEntry]:
    """Walk the directory tree rooted at `root`, lazily and depth-first.

    The root itself is yielded first. Entries within a directory are visited in name
    order, so two walks over the same tree yield the same sequence. Symbolic links are
    yielded but never followed.

    Args:
        root (Path): the directory to walk
        max_depth (int | None): entries deeper than this many levels are not visited
        hidden (bool): include entries whose name starts with '.'
        ignore_files (bool): honor .gitignore, .ignore and .git/info/exclude files

    Raises:
        TraversalError: if the root is missing or any directory cannot be listed.

    Yields:
        Iterator[WalkEntry]: the discovered entries
    """
    if not root.is_dir():
        reason = "no such directory" if not root.exists() else "not a directory"
        raise TraversalError(path=root, reason=reason)

    yield WalkEntry(path=root, depth=0, is_dir=True)
    if max_depth is not None and max_depth < 1:
        return

    def descend(directory: Path, rel_dir: str, depth: int, rules: IgnoreRules) -> Iterator[WalkEntry]:
        if ignore_files:
            rules = rules.load(directory, rel_dir)
        for entry in _scan_sorted(directory):
            if not hidden and entry.name.startswith("."):
                continue
            try:
                is_symlink = entry.is_symlink()
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                raise TraversalError(path=Path(entry.path), reason=str(e)) from e
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if ignore_files and rules.is_ignored(rel, is_dir=is_dir):
                continue
            path = directory / entry.name
            yield WalkEntry(path=path, depth=depth + 1, is_dir=is_dir, is_symlink=is_symlink)
            if is_dir and (max_depth is None or depth + 1 < max_depth):
                yield from descend(path, rel, depth + 1, rules)

    yield from descend(root, "", 0, IgnoreRules.for_root(root) if ignore_files else IgnoreRules())


def select_files(
    entries: Iterable[WalkEntry],
    root: Path,
    include: MatcherSet,
    exclude: MatcherSet,
) -> list[str]:
    """Keep the regular files matched by `include` and not matched by `exclude`.

    Args:
        entries (Iterable[WalkEntry]): entries in traversal order
        root (Path): the search root the entries were discovered under
        include (MatcherSet): a path must match at least one of these patterns
        exclude (MatcherSet): a path matching any of these patterns is dropped

    Returns:
        list[str]: the selected paths relative to root, in traversal order
    """
    selected: list[str] = []
    for entry in entries:
        if entry.is_dir or not is_regular_file(entry.path):
            continue
        rel = relpath(entry.path, root)
        if not include.is_match(rel) or exclude.is_match(rel):
            continue
        logger.debug("Matched file: %s", rel)
        selected.append(rel)
    return selected

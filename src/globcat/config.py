from __future__ import annotations

from enum import StrEnum, auto


class OutputDestination(StrEnum):
    """Where the concatenated output buffer is delivered."""

    STDOUT = auto()
    CLIPBOARD = auto()


class PatternKind(StrEnum):
    """Tag attached to every pattern at parse time.

    Include and exclude patterns are compiled into two separate matcher sets and are
    never mixed in the same set.
    """

    INCLUDE = auto()
    EXCLUDE = auto()


NEGATION_MARKER = "!"

# Prefix given to bare file name patterns so they match at any depth.
RECURSIVE_PREFIX = "**/"

# Seeded into the include set when only exclude patterns (or nothing) were given.
CATCH_ALL_PATTERN = "**"

# Ignore files read in every traversed directory, lowest precedence first.
IGNORE_FILE_NAMES: tuple[str, ...] = (".gitignore", ".ignore")

# Repository-local exclude file, read once at the root.
GIT_INFO_EXCLUDE = ".git/info/exclude"

FILE_TEMPLATE = """[file name]: {file_name}
[file content begin]
{file_content}
[file content end]
"""

BLOCK_SEPARATOR = "\n"

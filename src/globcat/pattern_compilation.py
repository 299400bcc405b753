from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from globcat.config import CATCH_ALL_PATTERN, NEGATION_MARKER, RECURSIVE_PREFIX, PatternKind
from globcat.exceptions import InvalidPatternError, PatternExpansionError
from globcat.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_ENV_VAR = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}|(?P<name>[A-Za-z_][A-Za-z0-9_]*))",
)


class CompiledPattern(BaseModel):
    """A single glob pattern, tagged and compiled to an anchored regular expression.

    Attributes:
        source: The pattern as given, after trimming and negation-marker stripping.
        expanded: The pattern after normalization and shell-style expansion.
        kind: Whether the pattern belongs to the include or the exclude set.
        regex: The compiled regular expression matched against relative paths.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    source: str = Field(..., description="Pattern after marker stripping")
    expanded: str = Field(..., description="Pattern after normalization and expansion")
    kind: PatternKind = Field(..., description="Include or exclude tag")
    regex: re.Pattern[str] = Field(..., description="Compiled anchored regex")

    def matches(self, rel: str) -> bool:
        """Check whether the relative path is fully matched by this pattern."""
        return self.regex.fullmatch(rel) is not None


class MatcherSet(BaseModel):
    """A disjunction of compiled patterns sharing the same kind."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: PatternKind
    patterns: tuple[CompiledPattern, ...] = ()

    def is_match(self, rel: str) -> bool:
        """Check whether at least one pattern of the set matches the relative path.

        An empty set matches nothing.

        Args:
            rel (str): the path to test, relative to the search root, with POSIX separators

        Returns:
            bool: True if any pattern matches, False otherwise
        """
        return any(p.matches(rel) for p in self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)


def split_negation(pattern: str) -> tuple[PatternKind, str]:
    """Tag a trimmed pattern and strip its negation markers.

    Every leading '!' is removed, so '!!foo' is an exclude pattern for 'foo'.

    Args:
        pattern (str): the raw pattern, already trimmed

    Returns:
        tuple[PatternKind, str]: the pattern kind and the pattern without markers
    """
    if pattern.startswith(NEGATION_MARKER):
        return PatternKind.EXCLUDE, pattern.lstrip(NEGATION_MARKER)
    return PatternKind.INCLUDE, pattern


def normalize_pattern(pattern: str) -> str:
    """Anchor patterns with a separator at the root, make bare names match at any depth.

    Args:
        pattern (str): the pattern to normalize

    Returns:
        str: the pattern unchanged if it contains a path separator, else prefixed with '**/'
    """
    if "/" in pattern or os.sep in pattern:
        return pattern
    return f"{RECURSIVE_PREFIX}{pattern}"


def _home_dir(pattern: str) -> str:
    try:
        return str(Path.home())
    except RuntimeError as e:
        raise PatternExpansionError(pattern=pattern, variable="HOME") from e


def expand_pattern(pattern: str) -> str:
    """Expand a leading '~' and environment variable references in a pattern.

    Supported forms are '$NAME', '${NAME}' and '${NAME:-default}'. A '$' that is not
    followed by a variable name is kept as-is.

    Args:
        pattern (str): the normalized pattern

    Raises:
        PatternExpansionError: if a referenced variable is unset and has no default.

    Returns:
        str: the expanded pattern
    """
    original = pattern
    if pattern == "~" or pattern.startswith("~/"):
        pattern = _home_dir(original) + pattern[1:]

    def substitute(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("name")
        value = os.environ.get(name)
        if value:
            return value
        default = match.group("default")
        if default is not None:
            return default
        if value is None:
            raise PatternExpansionError(pattern=original, variable=name)
        return value

    return _ENV_VAR.sub(substitute, pattern)


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate a '[...]' class starting at `start`; return the regex and the next index."""
    i = start + 1
    negated = i < len(pattern) and pattern[i] in "!^"
    if negated:
        i += 1
    items: list[str] = []
    first = True
    while i < len(pattern):
        ch = pattern[i]
        if ch == "]" and not first:
            body = "".join(items)
            return f"[{'^' if negated else ''}{body}]", i + 1
        first = False
        if i + 2 < len(pattern) and pattern[i + 1] == "-" and pattern[i + 2] != "]":
            lo, hi = ch, pattern[i + 2]
            if lo > hi:
                raise InvalidPatternError(pattern=pattern, reason=f"invalid range {lo}-{hi}")
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")
            i += 3
            continue
        items.append(re.escape(ch))
        i += 1
    raise InvalidPatternError(pattern=pattern, reason="unclosed character class")


def translate_glob(pattern: str) -> str:  # noqa: C901, PLR0912
    """Translate a glob into an anchored regular expression source.

    Syntax:
        - '*' matches any sequence of characters, '/' included
        - '?' matches any single character
        - '**/' at the start and '/**/' in the middle match zero or more directories
        - '/**' at the end matches everything beneath
        - '[abc]', '[a-z]', '[!a-z]' (or '[^a-z]') are character classes
        - '{a,b}' matches either alternative
        - '\\' escapes the next character

    Args:
        pattern (str): the glob to translate

    Raises:
        InvalidPatternError: on unclosed classes or alternates, reversed ranges, nested
            or unopened alternates, and dangling escapes.

    Returns:
        str: a regular expression to use with `re.fullmatch`
    """
    out: list[str] = []
    depth = 0
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "\\":
            if i + 1 >= n:
                raise InvalidPatternError(pattern=pattern, reason="dangling escape")
            out.append(re.escape(pattern[i + 1]))
            i += 2
        elif ch == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            at_start = i == 0 or pattern[i - 1] in "/{,"
            at_end = j == n or pattern[j] in "/},"
            if j - i >= 2 and at_start and at_end:  # noqa: PLR2004
                if j < n and pattern[j] == "/":
                    out.append("(?:.*/)?")
                    j += 1
                else:
                    out.append(".*")
            else:
                out.append(".*")
            i = j
        elif ch == "?":
            out.append(".")
            i += 1
        elif ch == "[":
            char_class, i = _translate_class(pattern, i)
            out.append(char_class)
        elif ch == "{":
            if depth:
                raise InvalidPatternError(pattern=pattern, reason="nested alternate groups")
            depth += 1
            out.append("(?:")
            i += 1
        elif ch == "}":
            if not depth:
                raise InvalidPatternError(pattern=pattern, reason="unopened alternate group")
            depth -= 1
            out.append(")")
            i += 1
        elif ch == "," and depth:
            out.append("|")
            i += 1
        else:
            out.append(re.escape(ch))
            i += 1
    if depth:
        raise InvalidPatternError(pattern=pattern, reason="unclosed alternate group")
    return "".join(out)


def compile_glob(pattern: str, *, source: str, kind: PatternKind) -> CompiledPattern:
    """Compile an expanded glob into a tagged pattern.

    Args:
        pattern (str): the normalized and expanded glob
        source (str): the pattern as written by the user, kept for diagnostics
        kind (PatternKind): the set this pattern belongs to

    Raises:
        InvalidPatternError: if the glob syntax is invalid.

    Returns:
        CompiledPattern: the compiled pattern
    """
    regex = translate_glob(pattern)
    try:
        compiled = re.compile(regex, re.DOTALL)
    except re.error as e:
        raise InvalidPatternError(pattern=pattern, reason=str(e)) from e
    return CompiledPattern(source=source, expanded=pattern, kind=kind, regex=compiled)


def compile_patterns(raw_patterns: Iterable[str]) -> tuple[MatcherSet, MatcherSet]:
    """Build the include and exclude matcher sets from command-line patterns.

    Each pattern is trimmed, tagged by its leading '!', normalized, expanded and compiled.
    Patterns left empty after this are discarded. When no include pattern was supplied,
    the include set matches everything so that exclude patterns alone can prune the tree.

    Args:
        raw_patterns (Iterable[str]): patterns in command-line order

    Raises:
        PatternExpansionError: if a pattern references an unset variable.
        InvalidPatternError: if a pattern is not a valid glob after expansion.

    Returns:
        tuple[MatcherSet, MatcherSet]: the include set and the exclude set
    """
    groups: dict[PatternKind, list[CompiledPattern]] = {PatternKind.INCLUDE: [], PatternKind.EXCLUDE: []}
    for raw in raw_patterns:
        kind, pattern = split_negation(raw.strip())
        if not pattern:
            continue
        expanded = expand_pattern(normalize_pattern(pattern))
        groups[kind].append(compile_glob(expanded, source=pattern, kind=kind))

    if not groups[PatternKind.INCLUDE]:
        groups[PatternKind.INCLUDE].append(
            compile_glob(CATCH_ALL_PATTERN, source=CATCH_ALL_PATTERN, kind=PatternKind.INCLUDE),
        )

    include = MatcherSet(kind=PatternKind.INCLUDE, patterns=tuple(groups[PatternKind.INCLUDE]))
    exclude = MatcherSet(kind=PatternKind.EXCLUDE, patterns=tuple(groups[PatternKind.EXCLUDE]))
    logger.debug("Compiled patterns", include=describe(include.patterns), exclude=describe(exclude.patterns))
    return include, exclude


def describe(patterns: Sequence[CompiledPattern]) -> list[str]:
    """Return the expanded form of each pattern, in order."""
    return [p.expanded for p in patterns]

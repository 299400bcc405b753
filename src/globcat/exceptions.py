from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class GlobcatError(Exception):
    """Base exception for errors in the globcat module."""

    message: str = "globcat failed."

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class PatternExpansionError(GlobcatError):
    """Raised when a pattern references an environment variable that is not set."""

    pattern: str = ""
    variable: str = ""
    message: str = ""

    def __str__(self) -> str:
        return self.message or f"Failed to expand pattern '{self.pattern}': variable '{self.variable}' is not set."


@dataclass(frozen=True)
class InvalidPatternError(GlobcatError):
    """Raised when a pattern is not a valid glob after expansion."""

    pattern: str = ""
    reason: str = ""
    message: str = ""

    def __str__(self) -> str:
        return self.message or f"Invalid glob pattern after expansion '{self.pattern}': {self.reason}."


@dataclass(frozen=True)
class TraversalError(GlobcatError):
    """Raised when the directory tree cannot be walked."""

    path: Path = Path()
    reason: str = ""
    message: str = ""

    def __str__(self) -> str:
        return self.message or f"Failed to walk {self.path}: {self.reason}"


@dataclass(frozen=True)
class ClipboardError(GlobcatError):
    """Raised when the system clipboard cannot be initialised or written to."""

    reason: str = ""
    message: str = ""

    def __str__(self) -> str:
        return self.message or f"Failed to set clipboard text: {self.reason}"

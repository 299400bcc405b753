from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from globcat.config import OutputDestination


class Settings(BaseModel):
    """Configuration settings for a single globcat run."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    patterns: list[str] = Field(
        default_factory=list,
        description="Glob patterns; a leading '!' marks an exclude pattern.",
    )
    max_depth: int | None = Field(default=None, ge=0, description="Maximum traversal depth.")
    root: Path = Field(default=Path("."), description="Root directory for file search.")
    output: OutputDestination = Field(
        default=OutputDestination.CLIPBOARD,
        description="Output destination.",
    )
    verbose: bool = Field(default=False, description="Emit debug trace lines on stderr.")
    hidden: bool = Field(default=False, description="Include hidden files and directories.")
    no_ignore: bool = Field(default=False, description="Do not read .gitignore/.ignore files.")
    log_file: str = Field(default="", description="Log file path.")

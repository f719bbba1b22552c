from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_OUTPUT = Path("code_export.docx")


class Settings(BaseModel):
    """Configuration settings for a code_to_docx export."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    project: Path = Field(default=Path(), description="Project folder to export.")
    output: Path = Field(default=DEFAULT_OUTPUT, description="Output Word document path.")
    full: bool = Field(default=False, description="Export all files, not just changed files.")
    changed_only: bool = Field(
        default=False,
        description="Export only changed files, even on first run.",
    )
    log_file: str = Field(default="", description="Log file path.")

    @model_validator(mode="after")
    def _check_exclusive_modes(self) -> Settings:
        if self.full and self.changed_only:
            msg = "Cannot use both --full and --changed-only flags together."
            raise ValueError(msg)
        return self

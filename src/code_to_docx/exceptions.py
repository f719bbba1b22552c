from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CodeToDocxError(Exception):
    """Base exception for errors in the code_to_docx package."""


@dataclass(frozen=True)
class GitCommandError(CodeToDocxError):
    """Raised when a git command cannot be run or exits with a failure."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        return f"`{self.command}` failed with code {self.returncode}: {self.stderr.strip()}"


@dataclass(frozen=True)
class ConflictingExportFlagsError(CodeToDocxError):
    """Raised when both a full export and a changed-only export are requested."""

    message: str = "Cannot use both --full and --changed-only flags together."

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class OutputWriteError(CodeToDocxError):
    """Raised when the output document cannot be created or written."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"failed to write output file {self.path}: {self.reason}"

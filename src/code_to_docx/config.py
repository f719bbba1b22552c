from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

# Text classification
SAMPLE_SIZE = 1024
PRINTABLE_THRESHOLD = 90
WHITESPACE_BYTES = frozenset(b"\n\r\t")

# Extensions never rendered, whatever their content looks like.
SKIPPED_EXTENSIONS = frozenset({".exe", ".dll", ".so", ".dylib", ".bin"})

# Document layout
SEPARATOR = "═" * 79
TITLE_SIZE_PT = 16
HEADING_SIZE_PT = 14
LINE_SIZE_PT = 10
LINE_NUMBER_WIDTH = 4
READ_ERROR_PREFIX = "⚠️ Error reading file: "
BINARY_NOTICE = "⚠️ Binary file - content not displayed"


class ExportMode(StrEnum):
    """Which branch of the selection policy produced the exported file set."""

    FULL_EXPORT = auto()
    CHANGED_ONLY = auto()
    ALL_TRACKED_FIRST_RUN = auto()
    CHANGED_INCREMENTAL = auto()

    @property
    def label(self) -> str:
        """Human readable label embedded in the document title."""
        return _MODE_LABELS[self]


_MODE_LABELS: dict[ExportMode, str] = {
    ExportMode.FULL_EXPORT: "Full Export",
    ExportMode.CHANGED_ONLY: "Changed Files Only",
    ExportMode.ALL_TRACKED_FIRST_RUN: "All Tracked Files (First Export)",
    ExportMode.CHANGED_INCREMENTAL: "Changed Files Only (Incremental)",
}


class BlockKind(StrEnum):
    """Kinds of paragraphs an export document is made of."""

    TITLE = auto()
    SEPARATOR = auto()
    HEADING = auto()
    SPACER = auto()
    LINE = auto()
    WARNING = auto()
    NOTICE = auto()


class Block(BaseModel):
    """A single paragraph of the export document.

    Attributes:
        kind: What the paragraph represents.
        text: Raw paragraph text (may be empty for spacers).
        bold: Whether the text is rendered bold.
        size_pt: Font size in points, or None for the document default.
    """

    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    text: str = ""
    bold: bool = False
    size_pt: int | None = None


class OutcomeStatus(StrEnum):
    """Result of appending one file to the export document."""

    RENDERED = auto()
    BINARY = auto()
    WARNING = auto()


class FileOutcome(BaseModel):
    """What happened to a single file during assembly."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="File that was appended")
    status: OutcomeStatus
    message: str = Field(default="", description="Error message for warnings")
    line_count: int = Field(default=0, ge=0, description="Number of rendered lines")

    @computed_field
    @property
    def ok(self) -> bool:
        """Whether the file was handled without a read failure."""
        return self.status is not OutcomeStatus.WARNING

from __future__ import annotations

import contextlib
import os
import re
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import docx
from docx.shared import Pt

from code_to_docx.config import (
    BINARY_NOTICE,
    HEADING_SIZE_PT,
    LINE_NUMBER_WIDTH,
    LINE_SIZE_PT,
    READ_ERROR_PREFIX,
    SEPARATOR,
    TITLE_SIZE_PT,
    Block,
    BlockKind,
    FileOutcome,
    OutcomeStatus,
)
from code_to_docx.exceptions import OutputWriteError
from code_to_docx.file_manipulation import split_lines

if TYPE_CHECKING:
    from collections.abc import Sequence

    from docx.document import Document as DocxDocument

    from code_to_docx.config import ExportMode

# Control characters and lone surrogates (undecodable file names) that WordprocessingML cannot store.
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
DEFAULT_FILE_MODE = 0o666


def project_display_name(root: Path) -> str:
    """Name of the project folder as shown in the document title.

    Args:
        root (Path): the project root, possibly relative (e.g. ".")

    Returns:
        str: the resolved folder name, or the full path for a filesystem root
    """
    resolved = root.resolve()
    return resolved.name or str(resolved)


def output_file_mode(output: Path) -> int:
    """Permission bits for a saved document.

    An existing document keeps its mode; a new one gets ``0o666`` filtered by
    the process umask, like a plainly created file.

    Args:
        output (Path): the destination path

    Returns:
        int: the permission bits to apply
    """
    try:
        return output.stat().st_mode & 0o777
    except OSError:
        umask = os.umask(0)
        os.umask(umask)
        return DEFAULT_FILE_MODE & ~umask


def format_line(number: int, text: str) -> str:
    """Format a source line with its 1-based line number, e.g. ``"   1 | hello"``."""
    return f"{number:{LINE_NUMBER_WIDTH}d} | {text}"


def xml_safe(text: str) -> str:
    """Replace characters that cannot be written to a .docx file with U+FFFD."""
    return _XML_ILLEGAL.sub("\ufffd", text)


class ExportDocument:
    """An append-only sequence of paragraphs, saved once as a Word document.

    The document starts with a bold title block. Each call to `add_file`
    appends one file section: a separator, the full path as a heading, a
    spacer and the line-numbered content. Blocks are never modified once
    appended; saving always writes a brand new document.

    Args:
        title (str): the text of the title block
    """

    def __init__(self, title: str) -> None:
        self.title = title
        self._blocks: list[Block] = []
        self._append(Block(kind=BlockKind.TITLE, text=title, bold=True, size_pt=TITLE_SIZE_PT))

    @classmethod
    def for_project(cls, root: Path, mode: ExportMode) -> ExportDocument:
        """Create a document titled after the project and the export mode.

        Args:
            root (Path): the project root
            mode (ExportMode): the export mode chosen by the selection policy

        Returns:
            ExportDocument: a document containing only its title
        """
        return cls(f"Code Export from {project_display_name(root)} ({mode.label})")

    @property
    def blocks(self) -> Sequence[Block]:
        """The blocks appended so far, in order."""
        return tuple(self._blocks)

    def lines(self) -> list[str]:
        """Return the text of every block, in order."""
        return [b.text for b in self._blocks]

    def _append(self, block: Block) -> None:
        self._blocks.append(block)

    def _spacer(self) -> None:
        self._append(Block(kind=BlockKind.SPACER))

    def add_file(self, path: Path) -> FileOutcome:
        """Append a file section to the document.

        Read failures and binary content do not raise: they are recorded as a
        single explanatory block and reported through the returned outcome so
        the caller can log and carry on with the next file.

        Args:
            path (Path): the file to append; its full path is used as heading

        Returns:
            FileOutcome: RENDERED with the line count, BINARY if the full content
                holds a NUL byte, or WARNING with the read error message
        """
        self._append(Block(kind=BlockKind.SEPARATOR, text=SEPARATOR))
        self._append(Block(kind=BlockKind.HEADING, text=str(path), bold=True, size_pt=HEADING_SIZE_PT))
        self._spacer()

        try:
            content = path.read_bytes()
        except OSError as e:
            message = str(e)
            self._append(Block(kind=BlockKind.WARNING, text=READ_ERROR_PREFIX + message))
            return FileOutcome(path=path, status=OutcomeStatus.WARNING, message=message)

        # The 1 KiB sniff can miss binary content further into the file.
        if b"\x00" in content:
            self._append(Block(kind=BlockKind.NOTICE, text=BINARY_NOTICE))
            return FileOutcome(path=path, status=OutcomeStatus.BINARY)

        lines = split_lines(content.decode("utf-8", errors="replace"))
        for number, text in enumerate(lines, start=1):
            self._append(Block(kind=BlockKind.LINE, text=format_line(number, text), size_pt=LINE_SIZE_PT))
        self._spacer()
        return FileOutcome(path=path, status=OutcomeStatus.RENDERED, line_count=len(lines))

    def render(self) -> DocxDocument:
        """Build the python-docx document, one paragraph per block.

        Returns:
            DocxDocument: the in-memory Word document
        """
        document = docx.Document()
        for block in self._blocks:
            paragraph = document.add_paragraph()
            if not block.text:
                continue
            run = paragraph.add_run(xml_safe(block.text))
            if block.bold:
                run.bold = True
            if block.size_pt is not None:
                run.font.size = Pt(block.size_pt)
        return document

    def save(self, output: Path) -> None:
        """Write the document to `output`, replacing any existing file.

        The document is written to a temporary file in the same directory and
        moved over `output`, so a failed save never leaves a truncated file.

        Args:
            output (Path): the destination .docx path

        Raises:
            OutputWriteError: if the file cannot be created or written.
        """
        tmp_name = ""
        try:
            with tempfile.NamedTemporaryFile(
                dir=output.parent,
                prefix=f".{output.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                self.render().save(tmp)
            # NamedTemporaryFile is created 0600.
            Path(tmp_name).chmod(output_file_mode(output))
            Path(tmp_name).replace(output)
        except (OSError, ValueError) as e:
            if tmp_name:
                with contextlib.suppress(OSError):
                    Path(tmp_name).unlink(missing_ok=True)
            raise OutputWriteError(path=output, reason=str(e)) from e

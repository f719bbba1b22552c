"""
code_to_docx: export a project's source code to a Word document.

Overview
--------
Every exported file becomes a section of a single `.docx` document: a
separator, the full path as a bold heading, and the file content with
4-digit line numbers. Binary files are left out.

Which files are exported depends on git and on whether the output document
already exists:

- first export of a git repository: every tracked file,
- later exports: only modified, added and untracked files,
- `--full`: every tracked file (or the whole tree outside git),
- `--changed-only`: only changed files, even on the first export,
- outside a git repository: every file under the project folder.

The output is always rebuilt from scratch; previous documents are replaced,
never appended to.

Usage
-----
    # First export (all tracked files of a git repository)
    code-to-docx --project ./myproject --output mycode.docx

    # Incremental export (changed files only)
    code-to-docx --project ./myproject --output mycode.docx

    # Force a full export even when the document already exists
    code-to-docx --project ./myproject --output mycode.docx --full

    # Force changed-only even on first run
    code-to-docx --project ./myproject --output mycode.docx --changed-only
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from code_to_docx import __version__
from code_to_docx.config import ExportMode, FileOutcome, OutcomeStatus
from code_to_docx.exceptions import CodeToDocxError
from code_to_docx.file_manipulation import has_skipped_extension, is_regular_file, is_text_file, walk_files
from code_to_docx.logging import logger, setup_logging
from code_to_docx.output_construction import ExportDocument
from code_to_docx.selection import select_files
from code_to_docx.settings import DEFAULT_OUTPUT, Settings

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from code_to_docx.git_status import RepositoryStatusReader


class ExportReport(BaseModel):
    """Summary of a finished export."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    output: Path
    mode: ExportMode
    rendered: int = Field(default=0, description="Files rendered with their content")
    binary: int = Field(default=0, description="Files replaced by a binary notice")
    skipped: int = Field(default=0, description="Candidates filtered out before assembly")
    warnings: list[FileOutcome] = Field(default_factory=list, description="Files that could not be read")

    @property
    def files(self) -> int:
        """Number of file sections written to the document."""
        return self.rendered + self.binary + len(self.warnings)


def should_export(path: Path, output: Path) -> bool:
    """Check whether a candidate path gets a section in the document.

    Args:
        path (Path): the candidate file (absolute)
        output (Path): the resolved output document, never exported into itself

    Returns:
        bool: True for readable regular text files, False otherwise
    """
    if has_skipped_extension(path):
        return False
    if not is_regular_file(path):
        return False
    if path == output:
        return False
    return is_text_file(path)


def export_project(
    project: Path,
    output: Path,
    *,
    force_full_export: bool = False,
    force_changed_only: bool = False,
    reader: RepositoryStatusReader | None = None,
) -> ExportReport:
    """Export a project to a Word document.

    Args:
        project (Path): the project folder
        output (Path): the output .docx path, created or replaced
        force_full_export (bool): export all files even if `output` exists
        force_changed_only (bool): export only changed files even on first run
        reader (RepositoryStatusReader | None): git status source, mainly for tests

    Raises:
        ConflictingExportFlagsError: if both flags are set.
        OSError: if walking the project folder fails.
        OutputWriteError: if the document cannot be written.

    Returns:
        ExportReport: counts of rendered, binary, skipped and unreadable files
    """
    root = project.resolve()
    selection = select_files(
        root,
        output,
        force_full_export=force_full_export,
        force_changed_only=force_changed_only,
        reader=reader,
    )
    logger.info("export mode selected", mode=selection.mode.value, walk=selection.use_walk)

    document = ExportDocument.for_project(root, selection.mode)
    report = ExportReport(output=output, mode=selection.mode)

    candidates: Iterable[Path] = walk_files(root) if selection.use_walk else selection.ordered_files()
    resolved_output = output.resolve()
    for path in candidates:
        if not should_export(path, resolved_output):
            report.skipped += 1
            continue
        outcome = document.add_file(path)
        if outcome.status is OutcomeStatus.WARNING:
            logger.warning("Failed to add file %s: %s", path, outcome.message)
            report.warnings.append(outcome)
        elif outcome.status is OutcomeStatus.BINARY:
            logger.info("Binary content detected late, not displayed: %s", path)
            report.binary += 1
        else:
            report.rendered += 1

    document.save(output)
    logger.info(
        "export written",
        output=str(output),
        rendered=report.rendered,
        binary=report.binary,
        skipped=report.skipped,
        warnings=len(report.warnings),
    )
    return report


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Returns:
        argparse.ArgumentParser: the parser for `code-to-docx`
    """
    p = argparse.ArgumentParser(
        prog="code-to-docx",
        description="Export your code to Microsoft Word documents.",
        epilog=__doc__.split("Usage\n-----\n", 1)[1] if __doc__ else None,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--project", type=str, default=".", help="Path to the project folder to export.")
    p.add_argument(
        "--output",
        type=str,
        default=str(DEFAULT_OUTPUT),
        help="Output Word document path.",
    )
    p.add_argument(
        "--full",
        action="store_true",
        help="Export all files (not just changed files).",
    )
    p.add_argument(
        "--changed-only",
        action="store_true",
        help="Export only changed files (even on first run).",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into validated settings.

    Args:
        argv (Sequence[str] | None): arguments, defaults to ``sys.argv[1:]``

    Raises:
        ValidationError: if the arguments are inconsistent (e.g. --full with --changed-only).

    Returns:
        Settings: the export settings
    """
    args = build_parser().parse_args(argv)
    return Settings(**vars(args))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line interface.

    Args:
        argv (Sequence[str] | None): arguments, defaults to ``sys.argv[1:]``

    Returns:
        int: the process exit code
    """
    try:
        settings = parse_args(argv)
    except ValidationError as e:
        for err in e.errors():
            print(f"Error: {err['msg'].removeprefix('Value error, ')}", file=sys.stderr)
        return 1

    if settings.log_file:
        setup_logging(settings.log_file)

    print(f"Exporting project from: {settings.project}")
    print(f"Output file: {settings.output}")

    try:
        report = export_project(
            settings.project,
            settings.output,
            force_full_export=settings.full,
            force_changed_only=settings.changed_only,
        )
    except (CodeToDocxError, OSError) as e:
        logger.exception("export failed")
        print(f"Error exporting project: {e}", file=sys.stderr)
        return 1

    print(f"Wrote {report.output} mode={report.mode.label} files={report.files}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

from code_to_docx.config import ExportMode
from code_to_docx.exceptions import ConflictingExportFlagsError
from code_to_docx.git_status import RepositoryStatusReader
from code_to_docx.logging import logger


class SelectionResult(BaseModel):
    """Files chosen for an export, and the policy branch that chose them.

    Attributes:
        files: Absolute paths to render, or None to walk the whole project tree.
        mode: The export mode, shown in the document title.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    files: frozenset[Path] | None = Field(default=None, description="None means walk fallback")
    mode: ExportMode

    @computed_field
    @property
    def use_walk(self) -> bool:
        """Whether the export falls back to a full filesystem walk."""
        return self.files is None

    def ordered_files(self) -> list[Path]:
        """Return the selected files sorted lexicographically.

        Returns:
            list[Path]: the sorted selection, empty in walk mode
        """
        return sorted(self.files or (), key=str)


def select_files(
    root: Path,
    output: Path,
    *,
    force_full_export: bool = False,
    force_changed_only: bool = False,
    reader: RepositoryStatusReader | None = None,
) -> SelectionResult:
    """Decide which files belong in this export.

    Explicit flags win over the default behaviour. Without flags, the first
    export of a git repository (no output document yet) takes every tracked
    file, and later exports take only modified, added and untracked files.
    A folder without a git signal is always walked in full.

    Args:
        root (Path): the project root
        output (Path): the output document; its existence marks a previous export
        force_full_export (bool): export all files even if a previous export exists
        force_changed_only (bool): export only changed files even on first run
        reader (RepositoryStatusReader | None): git status source, defaults to
            a reader on `root`

    Raises:
        ConflictingExportFlagsError: if both flags are set.

    Returns:
        SelectionResult: the files to render and the export mode
    """
    if force_full_export and force_changed_only:
        raise ConflictingExportFlagsError

    reader = reader or RepositoryStatusReader(root)
    is_first_time = not output.exists()
    changed = reader.changed_files()
    all_tracked = reader.all_tracked_files()
    is_repo = bool(changed) or bool(all_tracked)
    logger.info(
        "selection inputs",
        root=str(root),
        first_time=is_first_time,
        is_repo=is_repo,
        changed=len(changed),
        tracked=len(all_tracked),
    )

    if not is_repo:
        return SelectionResult(files=None, mode=ExportMode.FULL_EXPORT)
    if force_full_export:
        return SelectionResult(files=all_tracked, mode=ExportMode.FULL_EXPORT)
    if force_changed_only:
        return SelectionResult(files=changed, mode=ExportMode.CHANGED_ONLY)
    if is_first_time:
        return SelectionResult(files=all_tracked, mode=ExportMode.ALL_TRACKED_FIRST_RUN)
    return SelectionResult(files=changed, mode=ExportMode.CHANGED_INCREMENTAL)

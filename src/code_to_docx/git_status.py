"""Read the working tree state of a git repository.

Both listings are best effort: when git is missing or the folder is not a
repository the reader returns empty sets, which callers treat as "no version
control signal".
"""

from __future__ import annotations

import subprocess  # noqa: S404
from pathlib import Path
from typing import TYPE_CHECKING

from code_to_docx.exceptions import GitCommandError
from code_to_docx.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

STATUS_COMMAND = ("status", "--porcelain", "--untracked-files=all", "--", ".")
TOPLEVEL_COMMAND = ("rev-parse", "--show-toplevel")
LS_FILES_COMMAND = ("ls-files",)
UNTRACKED_STATUS = "??"
CHANGED_MARKERS = ("M", "A")
_RENAME_ARROW = " -> "


def unquote_path(path: str) -> str:
    """Remove the double quotes git puts around paths with special characters.

    Args:
        path (str): a path as printed by git

    Returns:
        str: the path without surrounding quotes and with escaped quotes restored
    """
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):  # noqa: PLR2004
        return path[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return path


def parse_status_line(line: str) -> tuple[str, str] | None:
    """Parse one line of ``git status --porcelain``.

    Args:
        line (str): a status line such as ``" M src/app.py"`` or ``"?? notes.txt"``

    Returns:
        tuple[str, str] | None: the two-character status code and the path
            (the destination path for renames), or None for lines too short to parse
    """
    if len(line) < 3:  # noqa: PLR2004
        return None
    status = line[:2]
    path = line[2:].strip()
    if _RENAME_ARROW in path:
        path = path.split(_RENAME_ARROW, 1)[1]
    path = unquote_path(path)
    if not path:
        return None
    return status, path


def is_changed_status(status: str) -> bool:
    """Whether a status code marks a modified, added or untracked file."""
    return status == UNTRACKED_STATUS or any(marker in status for marker in CHANGED_MARKERS)


class RepositoryStatusReader:
    """Query git for the tracked and changed files under a project root.

    Args:
        root (Path): the project root, used as the working directory of git
        git_bin (str): the git executable to invoke
    """

    def __init__(self, root: Path, git_bin: str = "git") -> None:
        self.root = Path(root).resolve()
        self.git_bin = git_bin

    def run_git(self, args: Sequence[str]) -> str:
        """Run a read-only git subcommand in the project root.

        Args:
            args (Sequence[str]): the git arguments, without the executable

        Raises:
            GitCommandError: if git cannot be started or exits with a failure.

        Returns:
            str: the standard output of the command
        """
        cmd = [self.git_bin, "-c", "core.quotePath=false", *args]
        command = " ".join(cmd)
        try:
            out = subprocess.run(  # noqa: S603
                cmd,
                cwd=str(self.root),
                text=True,
                encoding="utf-8",
                errors="replace",
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise GitCommandError(command=command, returncode=-1, stdout="", stderr=str(e)) from e
        if out.returncode != 0:
            raise GitCommandError(
                command=command,
                returncode=out.returncode,
                stdout=out.stdout,
                stderr=out.stderr,
            )
        return out.stdout

    def toplevel(self) -> Path:
        """Return the top-level directory of the working tree containing the root.

        Raises:
            GitCommandError: if the root is not inside a git working tree.

        Returns:
            Path: the resolved working tree top level
        """
        return Path(self.run_git(TOPLEVEL_COMMAND).strip()).resolve()

    def changed_files(self) -> frozenset[Path]:
        """Return files under the root that are modified, added or untracked.

        Porcelain paths are relative to the working tree top level, which is
        not the root when the project is a subdirectory of a repository.

        Returns:
            frozenset[Path]: absolute paths of changed files, empty without a git signal
        """
        try:
            output = self.run_git(STATUS_COMMAND)
            top = self.toplevel()
        except GitCommandError as e:
            logger.debug("git status unavailable: %s", e)
            return frozenset()

        changed: set[Path] = set()
        for line in output.splitlines():
            parsed = parse_status_line(line)
            if parsed is None:
                continue
            status, rel = parsed
            if is_changed_status(status):
                changed.add(top / rel)
        return frozenset(changed)

    def all_tracked_files(self) -> frozenset[Path]:
        """Return every file known to the git index.

        Returns:
            frozenset[Path]: absolute paths of tracked files, empty without a git signal
        """
        try:
            output = self.run_git(LS_FILES_COMMAND)
        except GitCommandError as e:
            logger.debug("git ls-files unavailable: %s", e)
            return frozenset()
        return frozenset(self.root / line.strip() for line in output.splitlines() if line.strip())

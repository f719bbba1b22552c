from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from code_to_docx import git_status
from code_to_docx.exceptions import GitCommandError
from code_to_docx.git_status import RepositoryStatusReader, is_changed_status, parse_status_line

if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_mock import MockerFixture


def completed(stdout: str, returncode: int = 0) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr="boom")


@pytest.mark.unit
@pytest.mark.parametrize(
    ("line", "expected"),
    [
        (" M src/app.py", (" M", "src/app.py")),
        ("?? notes.txt", ("??", "notes.txt")),
        ("AM new module.py", ("AM", "new module.py")),
        ("R  old.py -> pkg/new.py", ("R ", "pkg/new.py")),
        ('?? "with \\"quote\\".txt"', ("??", 'with "quote".txt')),
        ("", None),
        ("M", None),
    ],
)
def test_parse_status_line(line: str, expected: tuple[str, str] | None) -> None:
    assert parse_status_line(line) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    ("status", "changed"),
    [
        (" M", True),
        ("M ", True),
        ("A ", True),
        ("AM", True),
        ("??", True),
        (" D", False),
        ("R ", False),
        ("!!", False),
    ],
)
def test_is_changed_status(status: str, changed: bool) -> None:  # noqa: FBT001
    assert is_changed_status(status) is changed


def fake_git(top: Path, status: str) -> Callable[..., subprocess.CompletedProcess[str]]:
    def run(cmd: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        if "rev-parse" in cmd:
            return completed(f"{top}\n")
        return completed(status)

    return run


@pytest.mark.unit
def test_changed_files_keeps_modified_added_and_untracked(tmp_path: Path, mocker: MockerFixture) -> None:
    run = mocker.patch.object(
        git_status.subprocess,
        "run",
        side_effect=fake_git(tmp_path, " M src/app.py\nA  added.py\n?? new/notes.txt\n D gone.py\n"),
    )

    reader = RepositoryStatusReader(tmp_path)
    changed = reader.changed_files()

    root = tmp_path.resolve()
    assert changed == {root / "src/app.py", root / "added.py", root / "new/notes.txt"}
    args, kwargs = run.call_args_list[0]
    assert args[0][0] == "git"
    assert "status" in args[0]
    assert kwargs["cwd"] == str(root)


@pytest.mark.unit
def test_changed_files_resolves_paths_against_working_tree_top(tmp_path: Path, mocker: MockerFixture) -> None:
    project = tmp_path / "pkg"
    project.mkdir()
    mocker.patch.object(git_status.subprocess, "run", side_effect=fake_git(tmp_path, " M pkg/mod.py\n"))

    changed = RepositoryStatusReader(project).changed_files()

    assert changed == {tmp_path.resolve() / "pkg" / "mod.py"}


@pytest.mark.unit
def test_all_tracked_files_skips_blank_lines(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(git_status.subprocess, "run", return_value=completed("a.txt\n\n  \nsrc/b.py\n"))

    tracked = RepositoryStatusReader(tmp_path).all_tracked_files()

    root = tmp_path.resolve()
    assert tracked == {root / "a.txt", root / "src/b.py"}


@pytest.mark.unit
def test_failed_git_command_yields_empty_sets(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(git_status.subprocess, "run", return_value=completed("", returncode=128))

    reader = RepositoryStatusReader(tmp_path)

    assert reader.changed_files() == frozenset()
    assert reader.all_tracked_files() == frozenset()


@pytest.mark.unit
def test_missing_git_executable_yields_empty_sets(tmp_path: Path) -> None:
    reader = RepositoryStatusReader(tmp_path, git_bin="git-executable-that-does-not-exist")

    assert reader.changed_files() == frozenset()
    assert reader.all_tracked_files() == frozenset()


@pytest.mark.unit
def test_run_git_raises_git_command_error(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(git_status.subprocess, "run", return_value=completed("", returncode=128))

    with pytest.raises(GitCommandError) as exc_info:
        RepositoryStatusReader(tmp_path).run_git(["ls-files"])

    assert exc_info.value.returncode == 128  # noqa: PLR2004
    assert "boom" in str(exc_info.value)

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from code_to_docx.config import PRINTABLE_THRESHOLD, SAMPLE_SIZE, SKIPPED_EXTENSIONS, WHITESPACE_BYTES

if TYPE_CHECKING:
    from collections.abc import Iterator


def is_printable_byte(value: int) -> bool:
    """Check whether a byte is printable ASCII or common whitespace.

    Args:
        value (int): the byte value to test

    Returns:
        bool: True for 0x20-0x7E, newline, carriage return and tab
    """
    return 0x20 <= value <= 0x7E or value in WHITESPACE_BYTES  # noqa: PLR2004


def is_text_sample(sample: bytes) -> bool:
    """Classify a byte sample as text or binary.

    An empty sample is text. A sample containing a NUL byte is binary.
    Otherwise the sample is text when strictly more than 90% of its bytes
    are printable (see `is_printable_byte`).

    Args:
        sample (bytes): the leading bytes of a file

    Returns:
        bool: True if the sample looks like text, False otherwise
    """
    if not sample:
        return True
    if b"\x00" in sample:
        return False
    printable = sum(1 for b in sample if is_printable_byte(b))
    return printable * 100 // len(sample) > PRINTABLE_THRESHOLD


def is_text_file(path: Path, nbytes: int = SAMPLE_SIZE) -> bool:
    """Check if a file is probably text by sniffing its first `nbytes` bytes.

    Args:
        path (Path): the file path to check
        nbytes (int, optional): number of bytes to sample. Defaults to 1024.

    Returns:
        bool: True if the file is probably text, False if it is binary or
            cannot be read
    """
    try:
        with path.open("rb") as f:
            sample = f.read(nbytes)
    except OSError:
        return False
    return is_text_sample(sample)


def is_regular_file(path: Path) -> bool:
    """Check if a file is regular.

    Args:
        path (Path): path to test.

    Returns:
        bool: True if the file is regular, False otherwise (including missing files).
    """
    try:
        st = path.stat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode)


def has_skipped_extension(path: Path) -> bool:
    """Whether the file extension marks an executable or library that is never exported."""
    return path.suffix.lower() in SKIPPED_EXTENSIONS


def _raise_walk_error(error: OSError) -> None:
    raise error


def walk_files(root: Path) -> Iterator[Path]:
    """Walk the directory tree rooted at `root` and yield every regular file.

    Traversal is depth-first and deterministic: entries are sorted by name and
    the files of a directory come before its subdirectories. Errors raised
    while listing a directory are propagated to the caller.

    Args:
        root (Path): the root directory to walk

    Yields:
        Iterator[Path]: absolute paths of the regular files found
    """
    base = root.resolve()
    if not base.is_dir():
        msg = f"Project folder is not a directory: {base}"
        raise NotADirectoryError(msg)
    for dirpath, dirs, files in os.walk(base, onerror=_raise_walk_error):
        dirs.sort()
        for name in sorted(files):
            p = Path(dirpath) / name
            if is_regular_file(p):
                yield p


def split_lines(text: str) -> list[str]:
    """Split text into lines without their terminators.

    Lines end at ``\\n``; a trailing ``\\r`` is dropped so CRLF files render
    cleanly. A final newline does not produce an extra empty line.

    Args:
        text (str): the decoded file content

    Returns:
        list[str]: the lines of the text
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]

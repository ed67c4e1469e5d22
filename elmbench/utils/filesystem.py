# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem helpers shared by the workspace stages.

Two rules apply to everything written into a workspace:
  - a file is either fully written or not there at all (atomic writes)
  - nothing is ever written outside the directory it belongs to
"""

import shutil
import tempfile
from pathlib import Path


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write content to a file atomically.

    We write to a temp file in the same directory, then rename it onto the
    target. Rename within one filesystem is atomic on POSIX, so an
    interrupted run leaves a stray temp file rather than a half-written
    module that elm make would choke on with a confusing error.

    The parent directory is created if missing. Creation is idempotent, so
    two writers targeting the same directory never race each other into
    an error.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=".elm_bench_tmp_",
        suffix=".tmp",
        delete=False,
        newline="",
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        temp_fd.close()
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def copy_file(source: Path, destination: Path) -> None:
    """Copy one file byte-for-byte, creating the destination's parents."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)


def copy_tree(source: Path, destination: Path) -> None:
    """
    Recursively copy a directory into `destination`.

    `destination` may already exist (it usually does: it's a fresh mkdtemp
    directory). Files with the same name are overwritten.
    """
    shutil.copytree(
        source,
        destination,
        dirs_exist_ok=True,
        ignore=shutil.ignore_patterns("__pycache__", "elm-stuff"),
    )


def safe_read(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read a text file with proper error context.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        IsADirectoryError: If the path is a directory.
        OSError: For other I/O errors.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Expected a file, got a directory: {file_path}")
    with file_path.open("r", encoding=encoding, newline="") as handle:
        return handle.read()

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Git revisions as candidates.

`elm-bench -g old-version -g master Remove.remove 42 "List.range 0 1000"`
benchmarks the same project at two revisions. Each revision is exported
with `git archive` into its own directory under the workspace, so the
user's checkout (index, HEAD, worktrees) is never touched and the export
disappears with the workspace.

When elm-bench runs from a subdirectory of the repository, the candidate
project is that same subdirectory inside the export.
"""

import io
import subprocess
import tarfile
from pathlib import Path

from elmbench.logging.logger import get_logger
from elmbench.pipeline.exceptions import CandidateError

logger = get_logger(__name__)


def _run_git(
    args: list[str],
    cwd: Path,
    git_executable: str,
    timeout_seconds: int,
) -> subprocess.CompletedProcess[bytes]:
    try:
        return subprocess.run(
            [git_executable, *args],
            check=True,
            capture_output=True,
            cwd=str(cwd),
            timeout=timeout_seconds,
        )
    except FileNotFoundError as err:
        raise CandidateError(f"git executable not found: {git_executable}") from err
    except subprocess.CalledProcessError as err:
        stderr = err.stderr.decode("utf-8", errors="replace").strip()
        raise CandidateError(f"git {args[0]} failed: {stderr}") from err
    except subprocess.TimeoutExpired as err:
        raise CandidateError(
            f"git {args[0]} timed out after {timeout_seconds} seconds"
        ) from err


def repository_prefix(cwd: Path, git_executable: str = "git", timeout_seconds: int = 60) -> str:
    """
    Path of `cwd` relative to the repository root ("" at the root itself,
    otherwise with a trailing slash, exactly as git reports it).
    """
    result = _run_git(["rev-parse", "--show-prefix"], cwd, git_executable, timeout_seconds)
    return result.stdout.decode("utf-8").strip()


def export_revision(
    revision: str,
    destination: Path,
    cwd: Path,
    git_executable: str = "git",
    timeout_seconds: int = 120,
) -> Path:
    """
    Export a revision's tree into `destination` and return the project root
    inside it (the export root, plus the caller's repository prefix).

    Raises:
        CandidateError: If git fails, the revision doesn't exist, or the
            archive can't be unpacked.
    """
    prefix = repository_prefix(cwd, git_executable)
    archive = _run_git(
        ["archive", "--format=tar", revision],
        cwd,
        git_executable,
        timeout_seconds,
    )

    destination.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(fileobj=io.BytesIO(archive.stdout), mode="r:") as tar:
            tar.extractall(destination, filter="data")
    except tarfile.TarError as err:
        raise CandidateError(f"Cannot unpack revision '{revision}': {err}") from err

    project_root = destination / prefix if prefix else destination
    logger.info(
        "Exported git revision",
        extra={"revision": revision, "path": str(project_root)},
    )
    return project_root

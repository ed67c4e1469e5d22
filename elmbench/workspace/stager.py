# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Scratch workspace for one benchmark run.

Every run gets its own freshly named temporary directory, seeded with a
copy of the harness skeleton (elm.json, main.js, src/Runner.elm). The
candidates, the merged manifest, and the synthesized driver are all
written into it, elm make builds it, and then it's deleted. Two runs never
share a directory, so they can happily run side by side.

Deletion is tied to a context manager wrapping the whole pipeline, so the
directory goes away on success, on failure, and on Ctrl-C alike.
"""

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Optional

from elmbench.logging.logger import get_logger
from elmbench.manifest.loader import MANIFEST_FILENAME
from elmbench.utils.filesystem import copy_tree
from elmbench.utils.paths import default_skeleton_directory

logger = get_logger(__name__)

WORKSPACE_PREFIX = "elm_bench_"


@dataclass(frozen=True)
class Workspace:
    """Well-known locations inside a staged workspace."""

    root: Path

    @property
    def module_root(self) -> Path:
        return self.root / "src"

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILENAME

    @property
    def checkout_root(self) -> Path:
        """Where git candidates are exported while they're being isolated."""
        return self.root / ".candidates"

    @property
    def artifact_path(self) -> Path:
        return self.root / "elm.js"

    @property
    def launcher_path(self) -> Path:
        return self.root / "main.js"


def stage_workspace(
    skeleton_dir: Optional[Path] = None,
    base_dir: Optional[Path] = None,
    target_dir: Optional[Path] = None,
) -> Workspace:
    """
    Create a workspace and copy the skeleton into it.

    With `target_dir`, that directory is used (and created if needed)
    instead of a fresh temp directory. That's how `--eject` keeps its
    output around. An existing target must be an empty directory.

    Raises:
        FileNotFoundError: If the skeleton directory doesn't exist.
        FileExistsError: If `target_dir` exists and isn't an empty directory.
    """
    skeleton = skeleton_dir if skeleton_dir is not None else default_skeleton_directory()
    if not skeleton.is_dir():
        raise FileNotFoundError(f"Harness skeleton not found: {skeleton}")

    if target_dir is not None:
        if not is_empty_directory(target_dir):
            raise FileExistsError(f"Eject target is not an empty directory: {target_dir}")
        created = not target_dir.exists()
        target_dir.mkdir(parents=True, exist_ok=True)
        root = target_dir
    else:
        created = True
        root = Path(tempfile.mkdtemp(
            prefix=WORKSPACE_PREFIX,
            dir=str(base_dir) if base_dir else None,
        ))

    try:
        copy_tree(skeleton, root)
        (root / "src").mkdir(exist_ok=True)
    except BaseException:
        if created:
            shutil.rmtree(root, ignore_errors=True)
        else:
            clear_directory(root)
        raise

    logger.debug(
        "Workspace staged",
        extra={"path": str(root), "skeleton": str(skeleton)},
    )
    return Workspace(root=root)


def is_empty_directory(path: Path) -> bool:
    """True for a missing path or a directory with nothing in it."""
    if not path.exists():
        return True
    return path.is_dir() and next(path.iterdir(), None) is None


def clear_directory(path: Path) -> None:
    """Remove everything inside `path` but keep the directory itself."""
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child, ignore_errors=True)
        else:
            child.unlink(missing_ok=True)


def cleanup_workspace(workspace_root: Path) -> None:
    """Remove a workspace directory and everything inside it."""
    if workspace_root.is_dir():
        shutil.rmtree(workspace_root, ignore_errors=True)
        logger.debug("Workspace cleaned up", extra={"path": str(workspace_root)})


class WorkspaceContext:
    """
    Context manager that stages a workspace on enter and removes it on exit.

    Usage:
        with WorkspaceContext() as workspace:
            ...  # isolate, merge, synthesize, build, run
        # the directory is gone here, whatever happened inside the block

    With `keep=True` the directory survives a successful block, which only
    makes sense together with an explicit `target_dir`. If the block raises,
    a kept target is removed again when this run created it, and emptied
    when it already existed (it had to be empty to be used at all).
    """

    def __init__(
        self,
        skeleton_dir: Optional[Path] = None,
        base_dir: Optional[Path] = None,
        target_dir: Optional[Path] = None,
        keep: bool = False,
    ) -> None:
        self._skeleton_dir = skeleton_dir
        self._base_dir = base_dir
        self._target_dir = target_dir
        self._keep = keep
        self._workspace: Optional[Workspace] = None
        self._created_target = False

    def __enter__(self) -> Workspace:
        self._created_target = self._target_dir is not None and not self._target_dir.exists()
        self._workspace = stage_workspace(self._skeleton_dir, self._base_dir, self._target_dir)
        return self._workspace

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._workspace is None:
            return
        root = self._workspace.root
        if not self._keep:
            cleanup_workspace(root)
            return
        if exc_type is None:
            logger.info("Workspace kept", extra={"path": str(root)})
            return
        if self._created_target:
            cleanup_workspace(root)
        elif root.is_dir():
            clear_directory(root)
            logger.debug("Eject target emptied after failure", extra={"path": str(root)})

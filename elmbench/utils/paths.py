# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for elm-bench.

The rules:
  - workspace writes must stay inside the workspace
  - the harness skeleton ships inside the package, so its location is
    resolved relative to this file, never to the user's working directory
"""

from pathlib import Path


def package_root() -> Path:
    """Absolute path to the installed `elmbench` package directory."""
    return Path(__file__).resolve().parent.parent


def default_skeleton_directory() -> Path:
    """The harness skeleton bundled with the package."""
    return package_root() / "harness" / "skeleton"


def validate_path_within(target: Path, root: Path) -> Path:
    """
    Make sure a path doesn't escape `root`.

    Candidate module paths end up as destination file names, so a module
    path that resolves outside the workspace is rejected rather than
    written. Both paths are resolved before comparing, so `..` segments and
    symlinks are accounted for.

    Returns:
        The resolved absolute path if it's safe.

    Raises:
        ValueError: If the path escapes `root`.
    """
    resolved_target = target.resolve()
    resolved_root = root.resolve()

    if resolved_target != resolved_root and resolved_root not in resolved_target.parents:
        raise ValueError(
            f"Path '{target}' resolves to '{resolved_target}' which is outside "
            f"'{resolved_root}'. This is not allowed."
        )

    return resolved_target

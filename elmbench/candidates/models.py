# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Candidate types.

A candidate is one implementation under test: an Elm application on disk.
It either is a directory the user pointed at, or a snapshot of a git
revision that we exported into the workspace. Once resolved, the rest of
the pipeline never cares which.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class CandidateKind(str, Enum):
    DIRECTORY = "directory"
    GIT = "git"


@dataclass(frozen=True)
class CandidateRequest:
    """What the user typed: `-v ./listRemoveOld` or `-g remove-old`."""

    kind: CandidateKind
    reference: str


@dataclass(frozen=True)
class Candidate:
    """
    A resolved candidate project.

    `display_name` is exactly what the user passed. It labels the
    benchmark entry, heads the report line, and seeds the namespace.
    """

    display_name: str
    project_root: Path
    source_roots: tuple[Path, ...]
    manifest_path: Path
    kind: CandidateKind = CandidateKind.DIRECTORY

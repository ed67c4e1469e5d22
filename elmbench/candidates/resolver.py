# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Turns what the user typed into Candidate records.

Everything here is input validation: a path that doesn't exist, a project
without elm.json, or a revision git doesn't know about fails now, before
the workspace is populated and long before the compiler runs.
"""

import re
from pathlib import Path
from typing import Sequence

from elmbench.candidates.git import export_revision
from elmbench.candidates.models import Candidate, CandidateKind, CandidateRequest
from elmbench.config.schema import ToolchainConfig
from elmbench.logging.logger import get_logger
from elmbench.manifest.loader import MANIFEST_FILENAME, read_elm_json, source_directories
from elmbench.pipeline.exceptions import CandidateError

logger = get_logger(__name__)


def _checkout_dirname(index: int, reference: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9._-]+", "_", reference).strip("._") or "rev"
    return f"{index:02d}-{slug}"


def _describe_project(display_name: str, project_root: Path, kind: CandidateKind) -> Candidate:
    if not project_root.is_dir():
        raise CandidateError(f"Candidate '{display_name}' not found: {project_root}")

    manifest_path = project_root / MANIFEST_FILENAME
    document = read_elm_json(manifest_path)

    source_roots = tuple(
        (project_root / directory).resolve()
        for directory in source_directories(document, manifest_path)
    )
    existing = tuple(root for root in source_roots if root.is_dir())
    if not existing:
        raise CandidateError(
            f"Candidate '{display_name}' has no source directory "
            f"(looked for: {', '.join(str(root) for root in source_roots)})"
        )

    return Candidate(
        display_name=display_name,
        project_root=project_root.resolve(),
        source_roots=existing,
        manifest_path=manifest_path.resolve(),
        kind=kind,
    )


def resolve_candidate(
    request: CandidateRequest,
    index: int,
    checkout_root: Path,
    toolchain: ToolchainConfig,
    cwd: Path,
) -> Candidate:
    """
    Resolve a single request.

    Directory requests are taken relative to `cwd`. Git requests are
    exported under `checkout_root`, one directory per request so two
    revisions never share files.

    Raises:
        CandidateError: Missing project, missing sources, or a git failure.
        ManifestError: The project's elm.json is missing or not JSON.
    """
    if request.kind is CandidateKind.GIT:
        project_root = export_revision(
            request.reference,
            checkout_root / _checkout_dirname(index, request.reference),
            cwd,
            git_executable=toolchain.git_executable,
        )
    else:
        project_root = Path(request.reference)
        if not project_root.is_absolute():
            project_root = cwd / project_root

    candidate = _describe_project(request.reference, project_root, request.kind)
    logger.debug(
        "Candidate resolved",
        extra={
            "candidate": candidate.display_name,
            "kind": candidate.kind.value,
            "project_root": str(candidate.project_root),
        },
    )
    return candidate


def resolve_candidates(
    requests: Sequence[CandidateRequest],
    checkout_root: Path,
    toolchain: ToolchainConfig,
    cwd: Path,
) -> list[Candidate]:
    """
    Resolve every request, keeping the order they were given in.

    The first candidate is the baseline of the comparison, so the order
    matters and is never changed here.

    Raises:
        CandidateError: No candidates at all, a label given twice, or any
            single request that fails to resolve.
    """
    if not requests:
        raise CandidateError("No versions to benchmark")

    seen: set[str] = set()
    for request in requests:
        if request.reference in seen:
            raise CandidateError(f"Candidate '{request.reference}' was given more than once")
        seen.add(request.reference)

    return [
        resolve_candidate(request, index, checkout_root, toolchain, cwd)
        for index, request in enumerate(requests)
    ]

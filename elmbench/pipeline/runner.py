# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The merge-and-harness pipeline, end to end.

    resolve candidates
      → stage workspace
      → plan isolation + load manifests     (all validation happens here)
      → write candidates, merged elm.json, driver
      → elm make → node main.js → parse → rank → render

Everything between staging and rendering runs inside one WorkspaceContext,
so the scratch directory is removed however the run ends. Nothing is
retried: compiling and running the same workspace twice gives the same
answer, so a failure is reported once and the run stops.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from elmbench.candidates.models import CandidateRequest
from elmbench.candidates.resolver import resolve_candidates
from elmbench.config.schema import ElmBenchConfig
from elmbench.harness.driver import (
    DriverProgram,
    FunctionReference,
    build_driver,
    parse_function_reference,
    write_driver,
)
from elmbench.isolation.isolator import IsolationPlan, plan_isolation, write_isolation
from elmbench.isolation.namespace import assign_namespaces
from elmbench.logging.logger import get_logger
from elmbench.manifest.loader import load_manifest, write_manifest
from elmbench.manifest.merger import merge_manifests
from elmbench.pipeline.exceptions import CompileError, ExecutionError, InputError
from elmbench.pipeline.stages import PipelineStage, next_stage
from elmbench.reporting.models import BenchmarkOutput, RankedEntry
from elmbench.reporting.parser import parse_benchmark_output
from elmbench.reporting.ranking import rank_results
from elmbench.reporting.render import format_report
from elmbench.reporting.writer import write_json_report
from elmbench.toolchain.compiler import compile_driver
from elmbench.toolchain.executor import run_artifact
from elmbench.workspace.stager import Workspace, WorkspaceContext, is_empty_directory

logger = get_logger(__name__)


@dataclass(frozen=True)
class BenchmarkRequest:
    """One invocation: what to benchmark, against what, with which arguments."""

    function: str
    candidates: tuple[CandidateRequest, ...]
    arguments: tuple[str, ...] = ()
    cwd: Path = field(default_factory=Path.cwd)
    dry_run: bool = False
    eject_dir: Optional[Path] = None
    json_report: Optional[Path] = None
    color: Optional[bool] = None


@dataclass(frozen=True)
class PreparedWorkspace:
    workspace: Workspace
    plans: tuple[IsolationPlan, ...]
    program: DriverProgram
    driver_path: Path

    @property
    def candidate_labels(self) -> list[str]:
        return [entry.label for entry in self.program.entries]


@dataclass(frozen=True)
class PipelineResult:
    stage: PipelineStage
    report: str = ""
    entries: tuple[RankedEntry, ...] = ()
    output: Optional[BenchmarkOutput] = None
    advisories: tuple[str, ...] = ()
    workspace_root: Optional[Path] = None


class _StageTracker:
    """Walks the Staged → ... → Reported state machine, logging each step."""

    def __init__(self) -> None:
        self.stage = PipelineStage.STAGED
        logger.debug("Stage reached", extra={"stage": self.stage.value})

    def advance(self) -> PipelineStage:
        self.stage = next_stage(self.stage)
        logger.debug("Stage reached", extra={"stage": self.stage.value})
        return self.stage


def prepare_workspace(
    workspace: Workspace,
    request: BenchmarkRequest,
    reference: FunctionReference,
    config: ElmBenchConfig,
) -> PreparedWorkspace:
    """
    Stages 1-4: fill a staged workspace with candidates, elm.json and driver.

    All reading and validating is done before the first write, so an input
    or reconciliation error leaves only the bare skeleton behind.
    """
    candidates = resolve_candidates(
        request.candidates,
        workspace.checkout_root,
        config.toolchain,
        request.cwd,
    )
    namespaces = assign_namespaces(candidates, config.workspace.namespace_root)

    plans = tuple(
        plan_isolation(
            candidate,
            namespaces[candidate.display_name],
            workspace.module_root,
            entry_module=reference.module,
        )
        for candidate in candidates
    )
    manifests = [load_manifest(candidate.manifest_path) for candidate in candidates]
    merged = merge_manifests(load_manifest(workspace.manifest_path), manifests)

    program = build_driver(
        request.function,
        reference.function,
        [(plan.candidate.display_name, plan.entry_module_name) for plan in plans],
        request.arguments,
    )

    for plan in plans:
        write_isolation(plan)
    write_manifest(merged, workspace.manifest_path)
    driver_path = write_driver(program, workspace.module_root)

    # Exported git revisions are only needed until their sources are copied.
    shutil.rmtree(workspace.checkout_root, ignore_errors=True)

    return PreparedWorkspace(
        workspace=workspace,
        plans=plans,
        program=program,
        driver_path=driver_path,
    )


def _build_and_measure(
    prepared: PreparedWorkspace,
    config: ElmBenchConfig,
    tracker: _StageTracker,
    advisories: list[str],
) -> BenchmarkOutput:
    workspace = prepared.workspace

    compiled = compile_driver(
        workspace.root,
        prepared.driver_path,
        workspace.artifact_path,
        config.toolchain,
    )
    if not compiled.success:
        raise CompileError(
            f"elm make failed (exit code {compiled.exit_code})",
            detail=compiled.stderr or compiled.stdout,
        )
    if compiled.stderr.strip():
        logger.warning("elm make wrote to stderr", extra={"stderr": compiled.stderr})
    tracker.advance()

    executed = run_artifact(workspace.root, workspace.launcher_path, config.toolchain)
    if not executed.success:
        raise ExecutionError(
            f"Benchmark program failed (exit code {executed.exit_code})",
            detail=executed.stderr or executed.stdout,
        )
    if executed.stderr.strip():
        logger.warning("Benchmark program wrote to stderr", extra={"stderr": executed.stderr})
        advisories.append(f"Benchmark program wrote to stderr:\n{executed.stderr.rstrip()}")
    tracker.advance()

    output = parse_benchmark_output(executed.stdout, prepared.candidate_labels)
    if output.missing:
        advisories.append(f"No results for: {', '.join(output.missing)}")
    tracker.advance()
    return output


def run_pipeline(request: BenchmarkRequest, config: ElmBenchConfig) -> PipelineResult:
    """
    Run one benchmark comparison.

    With `dry_run` or `eject_dir`, stops after the driver is written and
    nothing is compiled. `eject_dir` also keeps the workspace there.

    Raises:
        InputError: Bad function name, arguments, candidates, manifests,
            or an eject target that already has files in it.
        ReconciliationError: Namespace collision or invalid version pin.
        PipelineError: Compile, execute, or parse failure.
    """
    reference = parse_function_reference(request.function)
    if not request.candidates:
        raise InputError("No versions to benchmark")
    for index, expression in enumerate(request.arguments):
        if not expression.strip():
            raise InputError(f"Argument {index + 1} is empty")

    eject_dir = request.cwd / request.eject_dir if request.eject_dir is not None else None
    if eject_dir is not None and not is_empty_directory(eject_dir):
        raise InputError(f"Eject target must be a new or empty directory: {eject_dir}")

    skeleton_dir = (
        Path(config.workspace.skeleton_directory)
        if config.workspace.skeleton_directory
        else None
    )
    base_dir = (
        Path(config.workspace.base_directory)
        if config.workspace.base_directory
        else None
    )
    keep = eject_dir is not None

    logger.info(
        "Benchmark run started",
        extra={
            "function": request.function,
            "candidates": [candidate.reference for candidate in request.candidates],
            "arguments": len(request.arguments),
            "dry_run": request.dry_run,
            "eject": str(eject_dir) if keep else None,
        },
    )

    with WorkspaceContext(
        skeleton_dir=skeleton_dir,
        base_dir=base_dir,
        target_dir=eject_dir,
        keep=keep,
    ) as workspace:
        tracker = _StageTracker()
        prepared = prepare_workspace(workspace, request, reference, config)

        if request.dry_run or keep:
            logger.info(
                "Workspace prepared, skipping build",
                extra={"workspace": str(workspace.root), "driver": str(prepared.driver_path)},
            )
            return PipelineResult(
                stage=tracker.stage,
                workspace_root=workspace.root if keep else None,
            )

        advisories: list[str] = []
        output = _build_and_measure(prepared, config, tracker, advisories)

    entries = tuple(rank_results(output.results, config.report.bar_width))
    color = config.report.color if request.color is None else request.color
    report = format_report(
        request.function,
        entries,
        warning=output.warning,
        bar_width=config.report.bar_width,
        color=color,
    )
    if request.json_report is not None:
        write_json_report(
            request.json_report,
            request.function,
            entries,
            warning=output.warning,
            missing=output.missing,
        )
    tracker.advance()

    logger.info(
        "Benchmark run finished",
        extra={"fastest": next(entry.label for entry in entries if entry.is_fastest)},
    )

    return PipelineResult(
        stage=tracker.stage,
        report=report,
        entries=entries,
        output=output,
        advisories=tuple(advisories),
    )

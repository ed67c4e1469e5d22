# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Namespace isolation: copy a candidate's sources into the workspace under
its own namespace, rewriting module names and internal imports on the way.

Before (two candidates, each with its own Main and Utils):

    listRemoveOld/src/Main.elm          listRemoveNew/src/Main.elm
    listRemoveOld/src/Utils.elm         listRemoveNew/src/Utils.elm

After, in the workspace:

    src/Version/ListRemoveOld.elm          module Version.ListRemoveOld
    src/Version/ListRemoveOld/Utils.elm    module Version.ListRemoveOld.Utils
    src/Version/ListRemoveNew.elm          module Version.ListRemoveNew
    src/Version/ListRemoveNew/Utils.elm    module Version.ListRemoveNew.Utils

Isolation is split into planning and writing. Planning reads and rewrites
everything in memory and does all the validation (empty project, missing
entry module, duplicate modules). Writing only happens once every candidate
has been planned, so a bad candidate never leaves a half-populated
workspace behind.
"""

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional

from elmbench.candidates.models import Candidate
from elmbench.isolation.elm_syntax import ElmModuleHeader, parse_header, rename_module
from elmbench.isolation.namespace import Namespace
from elmbench.logging.logger import get_logger
from elmbench.pipeline.exceptions import CandidateError
from elmbench.utils.filesystem import atomic_write, copy_file, safe_read
from elmbench.utils.paths import validate_path_within

logger = get_logger(__name__)

DEFAULT_ENTRY_MODULE = "Main"

_SKIPPED_DIRECTORIES = frozenset({"elm-stuff", ".git", "node_modules"})


@dataclass(frozen=True)
class SourceModule:
    """One `.elm` file of a candidate, parsed but not yet rewritten."""

    path: Path
    relative_path: PurePosixPath
    module_name: str
    declared_name: str
    text: str
    header: ElmModuleHeader


@dataclass(frozen=True)
class PlannedFile:
    destination: Path
    content: Optional[str] = None
    copy_from: Optional[Path] = None


@dataclass(frozen=True)
class IsolationPlan:
    """Everything one candidate will write into the workspace."""

    candidate: Candidate
    namespace: Namespace
    entry_module: str
    module_map: dict[str, str]
    files: tuple[PlannedFile, ...] = field(default_factory=tuple)

    @property
    def entry_module_name(self) -> str:
        return self.namespace.qualified


def _module_name_for(relative_path: PurePosixPath) -> str:
    return ".".join(relative_path.with_suffix("").parts)


def _walk(source_root: Path) -> list[Path]:
    found: list[Path] = []
    for path in sorted(source_root.rglob("*")):
        relative = path.relative_to(source_root)
        if any(part in _SKIPPED_DIRECTORIES for part in relative.parts):
            continue
        if path.is_file():
            found.append(path)
    return found


def discover_sources(candidate: Candidate) -> tuple[list[SourceModule], list[tuple[Path, PurePosixPath]]]:
    """
    Find every Elm module and every other file under the candidate's
    source roots.

    Returns:
        (modules, resources). Resources are (absolute path, path relative
        to its source root) pairs.

    Raises:
        CandidateError: If two source roots define the same module, or a
            module can't be read as UTF-8 text.
    """
    modules: list[SourceModule] = []
    resources: list[tuple[Path, PurePosixPath]] = []
    seen: dict[str, Path] = {}

    for source_root in candidate.source_roots:
        for path in _walk(source_root):
            relative = PurePosixPath(path.relative_to(source_root).as_posix())

            if path.suffix != ".elm":
                resources.append((path, relative))
                continue

            try:
                text = safe_read(path)
            except (OSError, UnicodeDecodeError) as err:
                raise CandidateError(
                    f"Cannot read {path} in candidate '{candidate.display_name}': {err}"
                ) from err
            header = parse_header(text)
            if header.declaration is None:
                logger.warning(
                    "Skipping file without a module declaration",
                    extra={"candidate": candidate.display_name, "path": str(path)},
                )
                continue

            module_name = _module_name_for(relative)
            if header.declaration.name != module_name:
                logger.warning(
                    "Module name does not match its file path",
                    extra={
                        "candidate": candidate.display_name,
                        "path": str(path),
                        "declared": header.declaration.name,
                        "expected": module_name,
                    },
                )

            if module_name in seen:
                raise CandidateError(
                    f"Candidate '{candidate.display_name}' defines module {module_name} "
                    f"twice ({seen[module_name]} and {path})"
                )
            seen[module_name] = path

            modules.append(
                SourceModule(
                    path=path,
                    relative_path=relative,
                    module_name=module_name,
                    declared_name=header.declaration.name,
                    text=text,
                    header=header,
                )
            )

    return modules, resources


def plan_isolation(
    candidate: Candidate,
    namespace: Namespace,
    module_root: Path,
    entry_module: str = DEFAULT_ENTRY_MODULE,
) -> IsolationPlan:
    """
    Work out the rewritten copy of a candidate, without writing anything.

    `module_root` is the workspace's source directory (`<workspace>/src`).

    Raises:
        CandidateError: No modules, no entry module, or a module whose path
            would escape the workspace.
    """
    modules, resources = discover_sources(candidate)
    if not modules:
        raise CandidateError(f"Candidate '{candidate.display_name}' has no Elm modules")

    if not any(module.module_name == entry_module for module in modules):
        raise CandidateError(
            f"Candidate '{candidate.display_name}' has no entry module {entry_module} "
            f"(expected {entry_module.replace('.', '/')}.elm in a source directory)"
        )

    module_map: dict[str, str] = {}
    for module in modules:
        relative_module = None if module.module_name == entry_module else module.module_name
        new_name = namespace.module_name(relative_module)
        module_map[module.module_name] = new_name
        module_map.setdefault(module.declared_name, new_name)

    files: list[PlannedFile] = []
    for module in modules:
        if module.module_name == entry_module:
            destination = namespace.entry_file(module_root)
        else:
            destination = namespace.nested_file(module_root, Path(*module.relative_path.parts))

        try:
            validate_path_within(destination, module_root)
        except ValueError as err:
            raise CandidateError(str(err)) from err

        content = rename_module(
            module.text,
            module_map[module.module_name],
            module_map,
            header=module.header,
        )
        files.append(PlannedFile(destination=destination, content=content))

    for path, relative in resources:
        destination = namespace.nested_file(module_root, Path(*relative.parts))
        try:
            validate_path_within(destination, module_root)
        except ValueError as err:
            raise CandidateError(str(err)) from err
        files.append(PlannedFile(destination=destination, copy_from=path))

    logger.debug(
        "Isolation planned",
        extra={
            "candidate": candidate.display_name,
            "namespace": namespace.qualified,
            "modules": len(modules),
            "resources": len(resources),
        },
    )

    return IsolationPlan(
        candidate=candidate,
        namespace=namespace,
        entry_module=entry_module,
        module_map=module_map,
        files=tuple(files),
    )


def write_isolation(plan: IsolationPlan) -> list[Path]:
    """Write a planned isolation into the workspace. Returns the files written."""
    written: list[Path] = []
    for planned in plan.files:
        if planned.content is not None:
            atomic_write(planned.destination, planned.content)
        elif planned.copy_from is not None:
            copy_file(planned.copy_from, planned.destination)
        written.append(planned.destination)

    logger.info(
        "Candidate isolated",
        extra={
            "candidate": plan.candidate.display_name,
            "namespace": plan.namespace.qualified,
            "files": len(written),
        },
    )
    return written


def isolate_candidate(
    candidate: Candidate,
    namespace: Namespace,
    module_root: Path,
    entry_module: str = DEFAULT_ENTRY_MODULE,
) -> IsolationPlan:
    """Plan and write in one go. Convenient when there's only one candidate to care about."""
    plan = plan_isolation(candidate, namespace, module_root, entry_module)
    write_isolation(plan)
    return plan

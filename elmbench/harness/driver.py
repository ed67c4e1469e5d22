# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Driver synthesis: the Elm module that benchmarks every candidate.

Instead of filling markers in a template (where one substitution can
corrupt the next, or a marker can show up twice), the driver is assembled
as a small value, a DriverProgram, and rendered in one pass. The skeleton's
Runner module does the actual stepping and JSON encoding; all the driver
contributes is the suite:

    port module Benchmarks exposing (main)

    import Benchmark exposing (Benchmark)
    import Json.Encode
    import Runner
    import Version.ListRemoveNew
    import Version.ListRemoveOld


    port sendOutput : Json.Encode.Value -> Cmd msg


    main : Program () Runner.Model Runner.Msg
    main =
        Runner.program sendOutput suite


    suite : Benchmark
    suite =
        Benchmark.scale "remove"
            [ ( "./listRemoveOld", \\_ -> Version.ListRemoveOld.remove arg0 arg1 )
            , ( "./listRemoveNew", \\_ -> Version.ListRemoveNew.remove arg0 arg1 )
            ]


    arg0 =
        99

The candidate order in the suite is the input order. The argument
expressions are the user's text, passed through untouched: elm make is
what evaluates and type-checks them.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from elmbench.isolation.isolator import DEFAULT_ENTRY_MODULE
from elmbench.logging.logger import get_logger
from elmbench.pipeline.exceptions import DriverError, InputError
from elmbench.utils.filesystem import atomic_write

logger = get_logger(__name__)

DRIVER_MODULE = "Benchmarks"
RUNNER_MODULE = "Runner"
OUTPUT_PORT = "sendOutput"

_FUNCTION_REFERENCE = re.compile(
    r"^(?:(?P<module>[A-Z][A-Za-z0-9_]*(?:\.[A-Z][A-Za-z0-9_]*)*)\.)?(?P<function>[a-z][A-Za-z0-9_]*)$"
)

_FIXED_IMPORTS: tuple[str, ...] = (
    "Benchmark exposing (Benchmark)",
    "Json.Encode",
    RUNNER_MODULE,
)


@dataclass(frozen=True)
class FunctionReference:
    """`Remove.remove` → module `Remove`, function `remove`."""

    module: str
    function: str


def parse_function_reference(text: str) -> FunctionReference:
    """
    Split the user's function argument into entry module and function.

    A bare name means the function lives in Main.

    Raises:
        InputError: If the text isn't a (possibly qualified) Elm value name.
    """
    match = _FUNCTION_REFERENCE.match(text.strip())
    if match is None:
        raise InputError(
            f"'{text}' is not a function name (expected e.g. 'remove' or 'List.Extra.remove')"
        )
    return FunctionReference(
        module=match.group("module") or DEFAULT_ENTRY_MODULE,
        function=match.group("function"),
    )


@dataclass(frozen=True)
class CandidateEntry:
    label: str
    module: str
    function: str

    @property
    def reference(self) -> str:
        return f"{self.module}.{self.function}"


@dataclass(frozen=True)
class ArgumentBinding:
    name: str
    expression: str


@dataclass(frozen=True)
class DriverProgram:
    benchmark_label: str
    entries: tuple[CandidateEntry, ...]
    bindings: tuple[ArgumentBinding, ...]
    module_name: str = DRIVER_MODULE

    @property
    def imports(self) -> tuple[str, ...]:
        candidate_modules: list[str] = []
        for entry in self.entries:
            if entry.module not in candidate_modules:
                candidate_modules.append(entry.module)
        return _FIXED_IMPORTS + tuple(candidate_modules)

    @property
    def application(self) -> str:
        """The argument list every candidate function is applied to."""
        return " ".join(binding.name for binding in self.bindings)

    def call(self, entry: CandidateEntry) -> str:
        if not self.bindings:
            return entry.reference
        return f"{entry.reference} {self.application}"


def elm_string(value: str) -> str:
    """Render a Python string as an Elm string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def build_driver(
    benchmark_label: str,
    function_name: str,
    candidates: Sequence[tuple[str, str]],
    arguments: Sequence[str],
) -> DriverProgram:
    """
    Assemble the driver for a run.

    Args:
        benchmark_label: Shown in the report header and used as the suite name.
        function_name: The unqualified function every candidate exports.
        candidates: (display label, entry module after isolation) pairs, in
            input order.
        arguments: The user's argument expressions, in order.

    Raises:
        DriverError: No candidates, repeated labels, or a blank argument.
            These mean the pipeline fed the builder something inconsistent.
    """
    if not candidates:
        raise DriverError("Cannot build a benchmark driver without candidates")

    labels = [label for label, _ in candidates]
    duplicates = sorted({label for label in labels if labels.count(label) > 1})
    if duplicates:
        raise DriverError(f"Duplicate candidate labels in driver: {', '.join(duplicates)}")

    bindings = []
    for index, expression in enumerate(arguments):
        if not expression.strip():
            raise DriverError(f"Argument {index} is empty")
        bindings.append(ArgumentBinding(name=f"arg{index}", expression=expression))

    return DriverProgram(
        benchmark_label=benchmark_label,
        entries=tuple(
            CandidateEntry(label=label, module=module, function=function_name)
            for label, module in candidates
        ),
        bindings=tuple(bindings),
    )


def _indent(expression: str, spaces: int = 4) -> str:
    pad = " " * spaces
    return "\n".join(pad + line if line.strip() else line for line in expression.strip("\n").splitlines())


def render_driver(program: DriverProgram) -> str:
    """Render a DriverProgram as Elm source."""
    lines: list[str] = [f"port module {program.module_name} exposing (main)", ""]
    lines.extend(f"import {module}" for module in program.imports)
    lines.extend([
        "",
        "",
        f"port {OUTPUT_PORT} : Json.Encode.Value -> Cmd msg",
        "",
        "",
        f"main : Program () {RUNNER_MODULE}.Model {RUNNER_MODULE}.Msg",
        "main =",
        f"    {RUNNER_MODULE}.program {OUTPUT_PORT} suite",
        "",
        "",
        "suite : Benchmark",
        "suite =",
        f"    Benchmark.scale {elm_string(program.benchmark_label)}",
    ])

    for index, entry in enumerate(program.entries):
        prefix = "[" if index == 0 else ","
        lines.append(f"        {prefix} ( {elm_string(entry.label)}, \\_ -> {program.call(entry)} )")
    lines.append("        ]")

    for binding in program.bindings:
        lines.extend(["", "", f"{binding.name} =", _indent(binding.expression)])

    return "\n".join(lines) + "\n"


def write_driver(program: DriverProgram, module_root: Path) -> Path:
    """Render the driver into `<module_root>/Benchmarks.elm` and return its path."""
    driver_path = module_root / f"{program.module_name}.elm"
    atomic_write(driver_path, render_driver(program))
    logger.info(
        "Driver synthesized",
        extra={
            "path": str(driver_path),
            "candidates": len(program.entries),
            "arguments": len(program.bindings),
        },
    )
    return driver_path

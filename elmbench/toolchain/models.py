# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Results of the two child processes a run spawns."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CompileResult:
    """What came back from elm make."""

    success: bool
    exit_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float
    timed_out: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    """What came back from running the compiled benchmark under node."""

    success: bool
    exit_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float
    timed_out: bool = False

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for benchmark results.

These are frozen: once the benchmark program's output is parsed, nothing
downstream gets to reorder or edit it. The ranking reads the results in
the order the benchmark library reported them.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TimingResult:
    """One candidate's measurement."""

    benchmark_name: str
    candidate_label: str
    ns_per_run: float


@dataclass(frozen=True)
class BenchmarkOutput:
    """
    The parsed stdout of the benchmark program.

    `missing` lists candidates that were benchmarked but produced no
    result (elm-benchmark reports those through `warning`).
    """

    results: tuple[TimingResult, ...]
    warning: Optional[str] = None
    missing: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RankedEntry:
    """One line of the comparison table."""

    label: str
    ns_per_run: float
    bar_length: int
    ns_rounded: int
    comparison: str
    is_baseline: bool
    is_fastest: bool

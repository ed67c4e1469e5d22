# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Ranking: turn raw nanoseconds into bars and "N% faster" labels.

The first result is the baseline; everything else is compared to it.
All rounding rounds halves upwards (floor(x + 0.5)), so -20.5% reads as
"20% faster" and 12.5 ns as 13 ns.

A ratio to the baseline can overflow to infinity for valid timings (a
baseline of 1e-300 ns against anything measurable). Such an entry gets no
bar and an "n/a" comparison.
"""

import math
from typing import Optional, Sequence

from elmbench.reporting.models import RankedEntry, TimingResult

DEFAULT_BAR_WIDTH = 20


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _ratio(ns_per_run: float, baseline: float) -> Optional[float]:
    if baseline <= 0:
        return None
    ratio = ns_per_run / baseline
    if not math.isfinite(ratio):
        return None
    return ratio


def fastest_index(results: Sequence[TimingResult]) -> int:
    """Index of the smallest ns/run. Ties go to the earliest entry."""
    if not results:
        raise ValueError("Cannot rank an empty result list")

    best = 0
    for index, result in enumerate(results):
        if result.ns_per_run < results[best].ns_per_run:
            best = index
    return best


def bar_length(ns_per_run: float, baseline: float, width: int = DEFAULT_BAR_WIDTH) -> int:
    """
    Bar length relative to the baseline's `width`.

    No upper bound: something three times slower than the baseline gets a
    bar three times as long. The renderer decides how much of it to draw.
    """
    ratio = _ratio(ns_per_run, baseline)
    if ratio is None:
        return 0
    scaled = ratio * width
    if not math.isfinite(scaled):
        return 0
    return max(0, round_half_up(scaled))


def percent_difference(ns_per_run: float, baseline: float) -> Optional[int]:
    """Signed percentage against the baseline, or None when it can't be computed."""
    ratio = _ratio(ns_per_run, baseline)
    if ratio is None:
        return None
    percent = (ratio - 1) * 100
    if not math.isfinite(percent):
        return None
    return round_half_up(percent)


def comparison_text(index: int, ns_per_run: float, baseline: float) -> str:
    if index == 0:
        return "baseline"

    percent = percent_difference(ns_per_run, baseline)
    if percent is None:
        return "n/a"
    if percent > 0:
        return f"{percent}% slower"
    if percent < 0:
        return f"{abs(percent)}% faster"
    return "same speed"


def rank_results(
    results: Sequence[TimingResult],
    bar_width: int = DEFAULT_BAR_WIDTH,
) -> list[RankedEntry]:
    """
    Rank results in the order given.

    Raises:
        ValueError: If `results` is empty.
    """
    fastest = fastest_index(results)
    baseline = results[0].ns_per_run

    return [
        RankedEntry(
            label=result.candidate_label,
            ns_per_run=result.ns_per_run,
            bar_length=bar_length(result.ns_per_run, baseline, bar_width),
            ns_rounded=round_half_up(result.ns_per_run),
            comparison=comparison_text(index, result.ns_per_run, baseline),
            is_baseline=index == 0,
            is_fastest=index == fastest,
        )
        for index, result in enumerate(results)
    ]

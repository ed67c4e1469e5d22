# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Human-readable comparison table.

    Benchmarking function `remove`.
      ./listRemoveOld   ████████████████████   351 ns   baseline
      ./listRemoveNew   ██████████████         246 ns   30% faster

The fastest line's label and comparison are shown in green when colour is
on. Bars longer than the field (candidates much slower than the baseline)
push the rest of their line to the right, up to MAX_DRAWN_BAR characters.
Past that the bar is cut off and ends in BAR_OVERFLOW.
"""

from typing import Optional, Sequence

from elmbench.reporting.models import RankedEntry
from elmbench.reporting.ranking import DEFAULT_BAR_WIDTH

BAR_CHAR = "█"
BAR_OVERFLOW = "▶"
MAX_DRAWN_BAR = 200

_GREEN = "\x1b[32m"
_RESET = "\x1b[0m"


def green(text: str) -> str:
    return f"{_GREEN}{text}{_RESET}"


def draw_bar(length: int) -> str:
    if length > MAX_DRAWN_BAR:
        return BAR_CHAR * (MAX_DRAWN_BAR - 1) + BAR_OVERFLOW
    return BAR_CHAR * length


def format_header(benchmark_label: str) -> str:
    return f"Benchmarking function `{benchmark_label}`."


def format_entry(
    entry: RankedEntry,
    label_width: int,
    bar_width: int = DEFAULT_BAR_WIDTH,
    color: bool = True,
) -> str:
    padding = " " * (label_width - len(entry.label))
    bar = draw_bar(entry.bar_length).ljust(bar_width)

    label = entry.label
    comparison = entry.comparison
    if color and entry.is_fastest:
        label = green(label)
        comparison = green(comparison)

    return f"  {label}{padding}   {bar}   {entry.ns_rounded} ns   {comparison}"


def format_report(
    benchmark_label: str,
    entries: Sequence[RankedEntry],
    warning: Optional[str] = None,
    bar_width: int = DEFAULT_BAR_WIDTH,
    color: bool = True,
) -> str:
    """The whole report: header, one line per candidate, optional warning."""
    label_width = max((len(entry.label) for entry in entries), default=0)

    lines = [format_header(benchmark_label)]
    lines.extend(format_entry(entry, label_width, bar_width, color) for entry in entries)
    if warning:
        lines.append(f"Warning: {warning}")
    return "\n".join(lines) + "\n"

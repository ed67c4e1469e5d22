# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Machine-readable report (`--json PATH`).

Same numbers as the text table, written as JSON so a CI job can track
them across commits. Keys are sorted so two identical runs produce
identical files apart from the timestamp.
"""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from elmbench.logging.logger import get_logger
from elmbench.reporting.models import RankedEntry
from elmbench.utils.filesystem import atomic_write

logger = get_logger(__name__)


def build_json_report(
    benchmark_label: str,
    entries: Sequence[RankedEntry],
    warning: Optional[str] = None,
    missing: Sequence[str] = (),
) -> dict[str, object]:
    return {
        "benchmark": benchmark_label,
        "generated": datetime.now(tz=timezone.utc).isoformat(),
        "results": [asdict(entry) for entry in entries],
        "warning": warning,
        "missing": list(missing),
    }


def write_json_report(
    output_path: Path,
    benchmark_label: str,
    entries: Sequence[RankedEntry],
    warning: Optional[str] = None,
    missing: Sequence[str] = (),
) -> Path:
    report = build_json_report(benchmark_label, entries, warning, missing)
    atomic_write(output_path, json.dumps(report, indent=2, sort_keys=True) + "\n")
    logger.info("JSON report written", extra={"path": str(output_path)})
    return output_path

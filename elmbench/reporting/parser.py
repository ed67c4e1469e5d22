# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Parser for the benchmark program's stdout.

The contract is one JSON document:

    {
      "results": [
        { "name": [ "remove", "./listRemoveOld" ], "nsPerRun": 309.43958596194926 },
        { "name": [ "remove", "./listRemoveNew" ], "nsPerRun": 244.48914830045732 }
      ],
      "warning": null
    }

Anything else is a parse failure, reported with the offending output so the
user can see what the program actually printed.

Result order is kept exactly as reported. Each result names its candidate,
and that label is checked against the candidates we actually built, so a
result can never be attributed to the wrong implementation by position.
"""

import json
import math
from typing import Any, Sequence

from elmbench.logging.logger import get_logger
from elmbench.pipeline.exceptions import ArtifactOutputError
from elmbench.reporting.models import BenchmarkOutput, TimingResult

logger = get_logger(__name__)

_EXCERPT_CHARS = 2000


def _fail(message: str, stdout: str) -> ArtifactOutputError:
    excerpt = stdout if len(stdout) <= _EXCERPT_CHARS else stdout[:_EXCERPT_CHARS] + "..."
    return ArtifactOutputError(message, detail=excerpt)


def _parse_result(index: int, raw: Any, stdout: str) -> TimingResult:
    if not isinstance(raw, dict):
        raise _fail(f"results[{index}] is not an object", stdout)

    name = raw.get("name")
    if (
        not isinstance(name, list)
        or len(name) != 2
        or not all(isinstance(part, str) for part in name)
    ):
        raise _fail(f"results[{index}].name must be [benchmark, candidate]", stdout)

    ns_per_run = raw.get("nsPerRun")
    if isinstance(ns_per_run, bool) or not isinstance(ns_per_run, (int, float)):
        raise _fail(f"results[{index}].nsPerRun must be a number", stdout)
    if not math.isfinite(ns_per_run) or ns_per_run < 0:
        raise _fail(f"results[{index}].nsPerRun must be a finite number >= 0", stdout)

    return TimingResult(
        benchmark_name=name[0],
        candidate_label=name[1],
        ns_per_run=float(ns_per_run),
    )


def parse_benchmark_output(stdout: str, candidate_labels: Sequence[str]) -> BenchmarkOutput:
    """
    Parse and validate the benchmark program's stdout.

    Args:
        stdout: Everything the program printed to stdout.
        candidate_labels: Display names of the candidates in the driver.

    Raises:
        ArtifactOutputError: Not JSON, wrong shape, no results, a result
            for a candidate we didn't build, or the same candidate twice.
    """
    try:
        document = json.loads(stdout)
    except json.JSONDecodeError as err:
        raise _fail(f"Benchmark output is not valid JSON: {err}", stdout) from err

    if not isinstance(document, dict):
        raise _fail("Benchmark output must be a JSON object", stdout)

    if "results" not in document or not isinstance(document["results"], list):
        raise _fail("Benchmark output has no 'results' list", stdout)

    if "warning" not in document:
        raise _fail("Benchmark output has no 'warning' field", stdout)
    warning = document["warning"]
    if warning is not None and not isinstance(warning, str):
        raise _fail("'warning' must be a string or null", stdout)

    results = tuple(
        _parse_result(index, raw, stdout) for index, raw in enumerate(document["results"])
    )
    if not results:
        raise _fail("Benchmark output contains no results", stdout)

    known = set(candidate_labels)
    seen: set[str] = set()
    for result in results:
        if result.candidate_label not in known:
            raise _fail(f"Result for unknown candidate '{result.candidate_label}'", stdout)
        if result.candidate_label in seen:
            raise _fail(f"Candidate '{result.candidate_label}' reported twice", stdout)
        seen.add(result.candidate_label)

    missing = tuple(label for label in candidate_labels if label not in seen)
    if missing:
        logger.warning("Candidates without results", extra={"missing": list(missing)})

    return BenchmarkOutput(results=results, warning=warning or None, missing=missing)

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runs the compiled benchmark program.

The artifact is `main.js` from the skeleton, which loads the compiled
`elm.js`, starts the Benchmarks worker, and prints the port output as JSON.
It gets no stdin. stdout is captured verbatim for the parser; stderr is
kept separately so noise there never corrupts the JSON.
"""

import subprocess
import time
from pathlib import Path

from elmbench.config.schema import ToolchainConfig
from elmbench.logging.logger import get_logger
from elmbench.toolchain.models import ExecutionResult

logger = get_logger(__name__)


def run_artifact(
    workspace_root: Path,
    launcher_path: Path,
    toolchain: ToolchainConfig,
) -> ExecutionResult:
    """
    Run `node main.js` in the workspace with a hard timeout.

    Benchmarks take a while by nature (elm-benchmark keeps sampling until
    its fit is good), so the run timeout is separate from and usually much
    longer than the compile timeout.
    """
    timeout_seconds = toolchain.run_timeout_seconds
    start = time.monotonic()

    try:
        result = subprocess.run(
            [toolchain.node_executable, str(launcher_path.relative_to(workspace_root))],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_seconds,
            cwd=str(workspace_root),
            stdin=subprocess.DEVNULL,
        )

        elapsed = time.monotonic() - start
        success = result.returncode == 0

        logger.info(
            "Benchmark program finished",
            extra={
                "success": success,
                "exit_code": result.returncode,
                "elapsed_seconds": round(elapsed, 3),
                "stdout_bytes": len(result.stdout),
            },
        )

        return ExecutionResult(
            success=success,
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            elapsed_seconds=elapsed,
        )

    except subprocess.TimeoutExpired:
        elapsed = time.monotonic() - start
        logger.warning(
            "Benchmark program timed out",
            extra={"timeout_seconds": timeout_seconds, "workspace": str(workspace_root)},
        )
        return ExecutionResult(
            success=False,
            exit_code=-1,
            stdout="",
            stderr=f"Benchmark program timed out after {timeout_seconds}s",
            elapsed_seconds=elapsed,
            timed_out=True,
        )

    except FileNotFoundError:
        elapsed = time.monotonic() - start
        logger.error(
            "node not found. Is Node.js installed?",
            extra={"executable": toolchain.node_executable},
        )
        return ExecutionResult(
            success=False,
            exit_code=-1,
            stdout="",
            stderr=f"{toolchain.node_executable} executable not found",
            elapsed_seconds=elapsed,
        )

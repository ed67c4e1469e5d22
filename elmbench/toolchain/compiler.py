# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Compile harness: runs `elm make` on the synthesized workspace.

Run the subprocess, capture everything, enforce a timeout, return the
result. No shell, no build caching beyond what elm-stuff/ gives us inside
the throwaway workspace, so every run compiles the same way.
"""

import subprocess
import time
from pathlib import Path

from elmbench.config.schema import ToolchainConfig
from elmbench.logging.logger import get_logger
from elmbench.toolchain.models import CompileResult

logger = get_logger(__name__)


def build_compile_command(
    driver_path: Path,
    output_path: Path,
    workspace_root: Path,
    toolchain: ToolchainConfig,
) -> list[str]:
    """The elm make invocation, with paths relative to the workspace."""
    command = [
        toolchain.elm_executable,
        "make",
        str(driver_path.relative_to(workspace_root)),
    ]
    if toolchain.optimize:
        command.append("--optimize")
    command.extend(["--output", str(output_path.relative_to(workspace_root))])
    return command


def compile_driver(
    workspace_root: Path,
    driver_path: Path,
    output_path: Path,
    toolchain: ToolchainConfig,
) -> CompileResult:
    """
    Compile the driver module into a JS artifact.

    Only the exit code decides success. Output on stderr from a successful
    compile is kept in the result for the caller to surface.
    """
    command = build_compile_command(driver_path, output_path, workspace_root, toolchain)
    timeout_seconds = toolchain.compile_timeout_seconds
    start = time.monotonic()

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_seconds,
            cwd=str(workspace_root),
            stdin=subprocess.DEVNULL,
        )

        elapsed = time.monotonic() - start
        success = result.returncode == 0 and output_path.is_file()

        logger.info(
            "Compilation finished",
            extra={
                "success": success,
                "exit_code": result.returncode,
                "elapsed_seconds": round(elapsed, 3),
                "workspace": str(workspace_root),
            },
        )

        return CompileResult(
            success=success,
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            elapsed_seconds=elapsed,
        )

    except subprocess.TimeoutExpired:
        elapsed = time.monotonic() - start
        logger.warning(
            "Compilation timed out",
            extra={"timeout_seconds": timeout_seconds, "workspace": str(workspace_root)},
        )
        return CompileResult(
            success=False,
            exit_code=-1,
            stdout="",
            stderr=f"Compilation timed out after {timeout_seconds}s",
            elapsed_seconds=elapsed,
            timed_out=True,
        )

    except FileNotFoundError:
        elapsed = time.monotonic() - start
        logger.error(
            "elm not found. Is the Elm compiler installed?",
            extra={"executable": toolchain.elm_executable},
        )
        return CompileResult(
            success=False,
            exit_code=-1,
            stdout="",
            stderr=f"{toolchain.elm_executable} executable not found",
            elapsed_seconds=elapsed,
        )

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Command handler for the elm-bench CLI.

The handler's job is translation: parsed arguments in, a BenchmarkRequest
out, and every exception family back out as an exit code. Diagnostics go
through the structured logger. The only plain text written is the report
itself (stdout), advisories, and toolchain diagnostics, which are already
human-readable and would be mangled by JSON escaping.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from elmbench.cli.exit_codes import (
    CONFIG_ERROR,
    INTERRUPTED,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from elmbench.config.exceptions import ConfigError
from elmbench.config.loader import load_config
from elmbench.config.schema import ElmBenchConfig
from elmbench.logging.logger import configure_logging, get_logger
from elmbench.pipeline.exceptions import InputError, PipelineError, ReconciliationError
from elmbench.pipeline.runner import BenchmarkRequest, run_pipeline

logger = get_logger(__name__)


def _load_and_configure(args: argparse.Namespace) -> tuple[int, Optional[ElmBenchConfig]]:
    """
    Load the config (if any) and set up logging.

    `--log-level` beats the config's level, which beats the WARNING default.
    Returns (exit_code, config); the caller stops unless exit_code is SUCCESS.
    """
    configure_logging(args.log_level or "WARNING")

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as err:
        logger.error("Configuration error", extra={"error": str(err)})
        return CONFIG_ERROR, None

    log_file = Path(config.global_config.log_file) if config.global_config.log_file else None
    configure_logging(args.log_level or config.global_config.log_level, log_file=log_file)
    return SUCCESS, config


def _write_diagnostics(stream: TextIO, text: str) -> None:
    if text.strip():
        stream.write(text.rstrip() + "\n")
        stream.flush()


def _build_request(args: argparse.Namespace) -> BenchmarkRequest:
    return BenchmarkRequest(
        function=args.function,
        candidates=tuple(args.candidates or ()),
        arguments=tuple(args.arguments or ()),
        cwd=Path.cwd(),
        dry_run=args.dry_run,
        eject_dir=Path(args.eject) if args.eject else None,
        json_report=Path(args.json) if args.json else None,
        color=False if args.no_color else None,
    )


def handle_benchmark(args: argparse.Namespace) -> int:
    """Run one comparison and print the report."""
    exit_code, config = _load_and_configure(args)
    if exit_code != SUCCESS or config is None:
        return exit_code

    if not args.candidates:
        logger.error("No versions to benchmark", extra={"stage": "input"})
        return USER_ERROR
    if not args.function:
        logger.error("No function to benchmark", extra={"stage": "input"})
        return USER_ERROR

    try:
        result = run_pipeline(_build_request(args), config)

    except KeyboardInterrupt:
        logger.error("Interrupted", extra={"stage": "interrupted"})
        return INTERRUPTED

    except InputError as err:
        logger.error("Invalid input", extra={"stage": "input", "error": str(err)})
        return USER_ERROR

    except ReconciliationError as err:
        logger.error("Cannot merge candidates", extra={"stage": "reconcile", "error": str(err)})
        return VALIDATION_ERROR

    except PipelineError as err:
        logger.error(
            "Toolchain failure",
            extra={"stage": err.stage.value, "error": str(err)},
        )
        _write_diagnostics(sys.stderr, err.detail)
        return RUNTIME_ERROR

    except Exception as err:
        logger.error(
            "Runtime error",
            extra={"error": str(err)},
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        return RUNTIME_ERROR

    if result.workspace_root is not None:
        logger.warning("Workspace ejected", extra={"path": str(result.workspace_root)})

    for advisory in result.advisories:
        _write_diagnostics(sys.stderr, f"Warning: {advisory}")

    if result.report:
        sys.stdout.write(result.report)
        sys.stdout.flush()

    return SUCCESS
